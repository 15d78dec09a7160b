"""Example simulations driven by `FakeTimers`."""
