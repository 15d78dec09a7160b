"""Quantized virtual clock."""

from faketimers.config import DEFAULT_TICK_MS


class VirtualClock:
    """Monotonic simulated clock measured in milliseconds.

    Time only moves when `step()` is called, and never by more than one tick
    quantum at a time.
    """

    def __init__(self, tick_ms: int = DEFAULT_TICK_MS) -> None:
        if tick_ms <= 0:
            raise ValueError(f"tick_ms must be > 0, got {tick_ms}")
        self._tick_ms = tick_ms
        self.t = 0

    @property
    def tick_ms(self) -> int:
        return self._tick_ms

    def now_ms(self) -> int:
        """Return the current simulated time in milliseconds."""
        return self.t

    def step(self, remaining_ms: int) -> int:
        """Advance by `min(remaining_ms, tick_ms)` and return the step taken."""
        if remaining_ms < 0:
            raise ValueError(f"remaining_ms must be >= 0, got {remaining_ms}")
        step = min(remaining_ms, self._tick_ms)
        self.t += step
        return step

    def is_quantized(self, duration_ms: int) -> bool:
        """Return True if `duration_ms` is a positive whole number of ticks."""
        return duration_ms > 0 and duration_ms % self._tick_ms == 0
