"""`Scheduler` protocol implemented on top of `FakeTimers`.

Lets code written against the small `call_later(ms, cb)` / `now_ms()`
scheduling surface run on the same virtual time as code that uses timer
handles directly. Each `call_later` is a single-shot timer that deletes itself
when it fires.
"""

import logging
from typing import Any, Callable, Set

from faketimers.fake_timers import FakeTimers
from faketimers.protocols import SchedulerCancel
from faketimers.timer_table import INVALID_HANDLE, TimerBehavior

_LOG = logging.getLogger("faketimers.adapter")


class _ScheduledCall:
    """Binds a scheduler callback to the timer that will run it."""

    def __init__(self, adapter: "SchedulerAdapter", cb: Callable[[], None]) -> None:
        self.adapter = adapter
        self.cb = cb
        self.handle = INVALID_HANDLE

    def fire(self, handle: int, context: Any) -> None:
        self._release()
        self.cb()

    def cancel(self) -> None:
        """Drop the call if it has not fired yet; later calls are no-ops."""
        self._release()

    def _release(self) -> None:
        if self.handle == INVALID_HANDLE:
            return
        self.adapter.timers.delete(self.handle)
        self.adapter.outstanding.discard(self.handle)
        self.handle = INVALID_HANDLE


class SchedulerAdapter:
    """Scheduler backed by single-shot fake timers.

    Delays are rounded up to whole ticks, and to at least one tick, because
    timer periods must be positive multiples of the tick quantum.
    """

    def __init__(self, timers: FakeTimers) -> None:
        self.timers = timers
        self.outstanding: Set[int] = set()

    @property
    def pending_count(self) -> int:
        """Return count of calls scheduled but not yet fired or cancelled."""
        return len(self.outstanding)

    def now_ms(self) -> int:
        return self.timers.get_current_time()

    def call_later(self, ms: int, cb: Callable[[], None]) -> SchedulerCancel:
        """Schedule `cb` to run after `ms` milliseconds of virtual time.

        Returns a zero-arg cancel function; if invoked before the callback is
        due, the callback will not run.
        """
        if ms < 0:
            raise ValueError(f"ms must be >= 0, got {ms}")
        tick = self.timers.tick_ms
        period = max(tick, -(-ms // tick) * tick)
        call = _ScheduledCall(self, cb)
        name = getattr(cb, "__name__", "call_later")
        call.handle = self.timers.create(name, period, TimerBehavior.SINGLE_SHOT, None, call.fire)
        self.timers.start(call.handle)
        self.outstanding.add(call.handle)
        _LOG.debug("call_later handle=%d ms=%d period_ms=%d", call.handle, ms, period)
        return call.cancel

    def advance(self, ms: int) -> int:
        """Advance virtual time by `ms`; return the number of timers fired."""
        return self.timers.move_time_forward(ms)
