"""Interfaces (Protocols) that decouple timer-driven code from the timer service.

Code under test should depend only on these minimal abstractions, so a test
can hand it a `FakeTimers` instance while production wiring hands it the real
timer service.
"""

from typing import Any, Callable, Optional, Protocol

from faketimers.timer_table import TimerBehavior

TimerHandle = int
TimerCallback = Callable[[TimerHandle, Any], None]
PendedFunction = Callable[[Any, int], None]


class TimerService(Protocol):
    """Software-timer service abstraction.

    Handles are positive integers; `0` means "no timer". Mutators return
    `False` (and `create` returns `0`) instead of raising when they are given
    an invalid handle or period.
    """

    def create(
        self,
        name: str,
        period_ms: int,
        behavior: TimerBehavior,
        context: Any,
        callback: Optional[TimerCallback],
    ) -> TimerHandle:
        """Create an inactive timer and return its handle, or `0` on failure."""
        raise NotImplementedError

    def delete(self, handle: TimerHandle) -> bool:
        raise NotImplementedError

    def start(self, handle: TimerHandle) -> bool:
        """Arm the timer to fire one full period from now."""
        raise NotImplementedError

    def stop(self, handle: TimerHandle) -> bool:
        raise NotImplementedError

    def reset(self, handle: TimerHandle) -> bool:
        raise NotImplementedError

    def change_period(self, handle: TimerHandle, new_period_ms: int) -> bool:
        """Change the period and re-arm the timer from the current instant."""
        raise NotImplementedError

    def set_behavior(self, handle: TimerHandle, behavior: TimerBehavior) -> bool:
        raise NotImplementedError

    def set_context(self, handle: TimerHandle, context: Any) -> bool:
        raise NotImplementedError

    def get_context(self, handle: TimerHandle) -> Any:
        raise NotImplementedError

    def get_name(self, handle: TimerHandle) -> str:
        raise NotImplementedError

    def get_period(self, handle: TimerHandle) -> int:
        raise NotImplementedError

    def get_behavior(self, handle: TimerHandle) -> TimerBehavior:
        raise NotImplementedError

    def get_expiry_time(self, handle: TimerHandle) -> int:
        """Return the absolute expiry time in ms, or a negative value if inactive."""
        raise NotImplementedError

    def is_active(self, handle: TimerHandle) -> bool:
        raise NotImplementedError

    def pend_function_call(
        self, callback: PendedFunction, context: Any, auxiliary: int
    ) -> bool:
        """Defer `callback(context, auxiliary)` to the timer service's next turn."""
        raise NotImplementedError

    def get_current_time(self) -> int:
        """Return the service's current time in milliseconds."""
        raise NotImplementedError


class SchedulerCancel(Protocol):
    """Callable returned by `Scheduler.call_later` to cancel a pending event."""

    def __call__(self) -> None:
        raise NotImplementedError


class Scheduler(Protocol):
    """Minimal `call_later` scheduling surface for code that does not use timer handles."""

    def call_later(self, ms: int, cb: Callable[[], None]) -> SchedulerCancel:
        """Schedule callback `cb` to run in `ms` milliseconds."""
        raise NotImplementedError

    def now_ms(self) -> int:
        """Return current time in milliseconds for this scheduler domain."""
        raise NotImplementedError
