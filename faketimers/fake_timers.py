"""Deterministic software-timer service for tests.

Use `FakeTimers` in place of an RTOS timer service to control time explicitly:

- timers are created, started and stopped through integer handles, exactly as
  code under test would against the real service;
- time only moves when the test calls `move_time_forward(ms)` or `tick()`;
- calls deferred with `pend_function_call` run at the start of the next
  advance, before any timer fires.

Typical test:

    timers = FakeTimers(tick_ms=10)
    handle = timers.create("blink", 100, TimerBehavior.AUTO_RELOAD, None, cb)
    timers.start(handle)
    timers.move_time_forward(250)   # cb fired at 100 and 200

Time advances one tick quantum at a time and every timer period is a whole
number of ticks, so a timer fires at most once per step. While advances keep
the clock on the tick grid, timers fire exactly at their expiry instant; an
advance that leaves the clock off the grid makes the next firing happen at the
first step at or past the expiry, and auto-reload timers re-arm from there.
"""

import logging
from typing import Any, Callable, Optional

from faketimers.clock import VirtualClock
from faketimers.config import (
    DEFAULT_INITIAL_CAPACITY,
    DEFAULT_TICK_MS,
    FakeTimersConfig,
)
from faketimers.pending import PendingCallQueue
from faketimers.timer_table import Timer, TimerBehavior, TimerTable

_LOG = logging.getLogger("faketimers.engine")


class FakeTimers:
    """Timer table, virtual clock and pending-call queue driven by the test.

    Each instance owns all of its state, so independent instances can be used
    side by side. Not thread safe.
    """

    def __init__(
        self,
        tick_ms: int = DEFAULT_TICK_MS,
        initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
    ) -> None:
        self.config = FakeTimersConfig(tick_ms=tick_ms, initial_capacity=initial_capacity)
        self.clock = VirtualClock(self.config.tick_ms)
        self.table = TimerTable(self.clock, self.config.initial_capacity)
        self.pending = PendingCallQueue()

    @classmethod
    def from_config(cls, config: FakeTimersConfig) -> "FakeTimers":
        return cls(tick_ms=config.tick_ms, initial_capacity=config.initial_capacity)

    @property
    def tick_ms(self) -> int:
        return self.clock.tick_ms

    # Timer table operations

    def create(
        self,
        name: str,
        period_ms: int,
        behavior: TimerBehavior,
        context: Any,
        callback: Optional[Callable[[int, Any], None]],
    ) -> int:
        """Create an inactive timer.

        Returns the new handle, or `0` if `period_ms` is not a positive
        multiple of the tick quantum.
        """
        return self.table.create(name, period_ms, behavior, context, callback)

    def delete(self, handle: int) -> bool:
        return self.table.delete(handle)

    def start(self, handle: int) -> bool:
        return self.table.start(handle)

    def stop(self, handle: int) -> bool:
        return self.table.stop(handle)

    def reset(self, handle: int) -> bool:
        return self.table.reset(handle)

    def change_period(self, handle: int, new_period_ms: int) -> bool:
        return self.table.change_period(handle, new_period_ms)

    def set_behavior(self, handle: int, behavior: TimerBehavior) -> bool:
        return self.table.set_behavior(handle, behavior)

    def set_context(self, handle: int, context: Any) -> bool:
        return self.table.set_context(handle, context)

    def get_context(self, handle: int) -> Any:
        """Return the timer's context; raises `InvalidTimerHandle` if not live."""
        return self.table.get_context(handle)

    def get_name(self, handle: int) -> str:
        return self.table.get_name(handle)

    def get_period(self, handle: int) -> int:
        return self.table.get_period(handle)

    def get_behavior(self, handle: int) -> TimerBehavior:
        return self.table.get_behavior(handle)

    def get_expiry_time(self, handle: int) -> int:
        """Return the absolute next-fire time, or `EXPIRY_INACTIVE` (-1)."""
        return self.table.get_expiry_time(handle)

    def is_active(self, handle: int) -> bool:
        return self.table.is_active(handle)

    # Deferred calls

    def pend_function_call(
        self, callback: Callable[[Any, int], None], context: Any, auxiliary: int
    ) -> bool:
        """Queue `callback(context, auxiliary)` for the start of the next advance."""
        return self.pending.pend(callback, context, auxiliary)

    # Time

    def get_current_time(self) -> int:
        return self.clock.now_ms()

    def tick(self) -> int:
        """Advance time by exactly one tick quantum."""
        return self.move_time_forward(self.clock.tick_ms)

    def move_time_forward(self, delta_ms: int) -> int:
        """Advance virtual time by `delta_ms` and fire every timer that comes due.

        Pending calls run first. Time then moves in steps of at most one tick
        quantum, the last step being shorter when `delta_ms` is not a whole
        number of ticks, and timers are swept after every step.

        Returns the number of timer expirations, including those of timers
        that have no callback to invoke.
        """
        if delta_ms < 0:
            raise ValueError(f"delta_ms must be >= 0, got {delta_ms}")
        self.pending.drain()

        expired = 0
        remaining = delta_ms
        while remaining > 0:
            remaining -= self.clock.step(remaining)
            expired += self._sweep()
        return expired

    def _sweep(self) -> int:
        """Expire every timer due at the current instant; return how many.

        Slots are visited by index over the table length at sweep start and
        each is re-checked when reached, so callbacks may create, stop or
        delete timers (including their own) without disturbing the sweep.
        """
        now = self.clock.now_ms()
        expired = 0
        for index in range(len(self.table.slots)):
            timer = self.table.slots[index]
            if not timer.is_due(now):
                continue
            self._fire(timer, now)
            expired += 1
        return expired

    def _fire(self, timer: Timer, now: int) -> None:
        # Re-arm happens before the callback; changes the callback makes to its
        # own timer win.
        if timer.behavior is TimerBehavior.AUTO_RELOAD:
            timer.next_expiry_ms = now + timer.period_ms
        else:
            timer.next_expiry_ms = None
        _LOG.debug("timer_fired handle=%d name=%s now_ms=%d", timer.handle, timer.name, now)
        if timer.callback is not None:
            timer.callback(timer.handle, timer.context)

    def dump_state(self, n: int = 5) -> str:
        """Return a human-readable snapshot of timer state and pending calls.

        Args:
            n: Maximum number of active timers to include (default: 5).

        The snapshot includes the current virtual time, the number of allocated
        timers and pending calls, and details for the first `n` active timers
        in expiry order, without changing any state.
        """
        now = self.clock.now_ms()
        active = sorted(
            (timer for timer in self.table if timer.active),
            key=lambda timer: (timer.next_expiry_ms, timer.handle),
        )
        lines = [
            f"FakeTimers @ t = {now}ms (tick = {self.clock.tick_ms}ms)",
            f"timers = {sum(1 for _ in self.table)} allocated, {len(active)} active"
            f" (showing first {min(n, len(active))})",
            f"pending calls = {len(self.pending)}",
        ]
        for i, timer in enumerate(active[:n]):
            cb_name = getattr(timer.callback, "__name__", None)
            cb_desc = cb_name if isinstance(cb_name, str) else repr(timer.callback)
            lines.append(
                f"#{i:02d} handle={timer.handle} name={timer.name!r} due @ {timer.next_expiry_ms}ms"
                f" (in {timer.next_expiry_ms - now}ms) period={timer.period_ms}ms"
                f" behavior={timer.behavior.value} cb={cb_desc}"
            )
        return "\n".join(lines)
