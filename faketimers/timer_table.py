"""Handle-addressed storage for simulated software timers.

Timers live in a list of slots. A timer's handle is its slot index plus one,
so handle `0` never names a timer and can be used as the "failed" result of
`create`. Deleting a timer resets its slot back to an empty `Timer`, which
both frees the slot for reuse and makes the old handle invalid.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional

from faketimers.clock import VirtualClock
from faketimers.config import DEFAULT_INITIAL_CAPACITY

_LOG = logging.getLogger("faketimers.table")

INVALID_HANDLE = 0
EXPIRY_INACTIVE = -1


class TimerBehavior(str, Enum):
    """
    What a timer does when it fires.

    ``SINGLE_SHOT``
        Fires once per activation, then becomes inactive.

    ``AUTO_RELOAD``
        Re-arms itself for another full period as it fires.
    """

    SINGLE_SHOT = "single_shot"
    AUTO_RELOAD = "auto_reload"


class InvalidTimerHandle(LookupError):
    """Raised by accessors given a handle that does not name a live timer."""

    def __init__(self, handle: int) -> None:
        super().__init__(f"invalid timer handle: {handle}")
        self.handle = handle


@dataclass
class Timer:
    """
    One timer slot.

    Parameters
    ----------
    name:
        Display label, informational only.
    period_ms:
        Firing period; a whole multiple of the clock's tick quantum.
    behavior:
        `TimerBehavior` applied when the timer fires.
    context:
        Opaque caller object handed back to `callback`.
    callback:
        Called as ``callback(handle, context)`` when the timer fires. A timer
        without a callback still expires but nothing is called.
    handle:
        ``slot index + 1`` while allocated, `INVALID_HANDLE` otherwise.
    next_expiry_ms:
        Absolute virtual time of the next firing, `None` while inactive.
    """

    name: str = ""
    period_ms: int = 0
    behavior: TimerBehavior = TimerBehavior.SINGLE_SHOT
    context: Any = None
    callback: Optional[Callable[[int, Any], None]] = None
    handle: int = INVALID_HANDLE
    allocated: bool = False
    next_expiry_ms: Optional[int] = None

    @property
    def active(self) -> bool:
        return self.allocated and self.next_expiry_ms is not None

    def is_due(self, now_ms: int) -> bool:
        return self.active and now_ms >= self.next_expiry_ms


class TimerTable:
    """Slot table plus the non-temporal timer operations.

    Time-relative operations (`start`, `reset`, `change_period`) read the
    current instant from the shared `VirtualClock`; the table never moves time.
    """

    def __init__(
        self, clock: VirtualClock, initial_capacity: int = DEFAULT_INITIAL_CAPACITY
    ) -> None:
        self.clock = clock
        self.slots: List[Timer] = [Timer() for _ in range(initial_capacity)]

    def __len__(self) -> int:
        """Return the number of slots, free or allocated, not the number of timers."""
        return len(self.slots)

    @property
    def slot_count(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[Timer]:
        """Iterate over allocated timers in slot order."""
        return (timer for timer in self.slots if timer.allocated)

    @property
    def active_count(self) -> int:
        return sum(1 for timer in self.slots if timer.active)

    def lookup(self, handle: int) -> Optional[Timer]:
        """Return the live timer for `handle`, or `None` if the handle is invalid."""
        if handle <= INVALID_HANDLE or handle > len(self.slots):
            return None
        timer = self.slots[handle - 1]
        return timer if timer.allocated else None

    def require(self, handle: int) -> Timer:
        timer = self.lookup(handle)
        if timer is None:
            raise InvalidTimerHandle(handle)
        return timer

    def create(
        self,
        name: str,
        period_ms: int,
        behavior: TimerBehavior,
        context: Any,
        callback: Optional[Callable[[int, Any], None]],
    ) -> int:
        """Allocate an inactive timer; return its handle or `INVALID_HANDLE`."""
        coerced = _coerce_behavior(behavior)
        if coerced is None:
            _LOG.warning("timer_create_rejected name=%s behavior=%r", name, behavior)
            return INVALID_HANDLE
        behavior = coerced
        if not self.clock.is_quantized(period_ms):
            _LOG.warning(
                "timer_create_rejected name=%s period_ms=%s tick_ms=%s",
                name,
                period_ms,
                self.clock.tick_ms,
            )
            return INVALID_HANDLE

        index = self._first_free_index()
        timer = Timer(
            name=name,
            period_ms=period_ms,
            behavior=behavior,
            context=context,
            callback=callback,
            handle=index + 1,
            allocated=True,
        )
        if index == len(self.slots):
            self.slots.append(timer)
        else:
            self.slots[index] = timer
        _LOG.debug(
            "timer_created handle=%d name=%s period_ms=%d behavior=%s",
            timer.handle,
            name,
            period_ms,
            behavior.value,
        )
        return timer.handle

    def delete(self, handle: int) -> bool:
        if self.lookup(handle) is None:
            return False
        self.slots[handle - 1] = Timer()
        _LOG.debug("timer_deleted handle=%d", handle)
        return True

    def start(self, handle: int) -> bool:
        """Arm the timer one full period from now, whatever its prior state."""
        timer = self.lookup(handle)
        if timer is None:
            return False
        timer.next_expiry_ms = self.clock.now_ms() + timer.period_ms
        return True

    def stop(self, handle: int) -> bool:
        timer = self.lookup(handle)
        if timer is None:
            return False
        timer.next_expiry_ms = None
        return True

    def reset(self, handle: int) -> bool:
        return self.start(handle)

    def change_period(self, handle: int, new_period_ms: int) -> bool:
        """Replace the period and restart, discarding time left on the old one."""
        timer = self.lookup(handle)
        if timer is None or not self.clock.is_quantized(new_period_ms):
            return False
        timer.period_ms = new_period_ms
        timer.next_expiry_ms = self.clock.now_ms() + new_period_ms
        return True

    def set_behavior(self, handle: int, behavior: TimerBehavior) -> bool:
        timer = self.lookup(handle)
        behavior = _coerce_behavior(behavior)
        if timer is None or behavior is None:
            return False
        timer.behavior = behavior
        return True

    def set_context(self, handle: int, context: Any) -> bool:
        timer = self.lookup(handle)
        if timer is None:
            return False
        timer.context = context
        return True

    def get_context(self, handle: int) -> Any:
        return self.require(handle).context

    def get_name(self, handle: int) -> str:
        return self.require(handle).name

    def get_period(self, handle: int) -> int:
        return self.require(handle).period_ms

    def get_behavior(self, handle: int) -> TimerBehavior:
        return self.require(handle).behavior

    def get_expiry_time(self, handle: int) -> int:
        timer = self.lookup(handle)
        if timer is None or timer.next_expiry_ms is None:
            return EXPIRY_INACTIVE
        return timer.next_expiry_ms

    def is_active(self, handle: int) -> bool:
        timer = self.lookup(handle)
        return timer is not None and timer.active

    def _first_free_index(self) -> int:
        for index, timer in enumerate(self.slots):
            if not timer.allocated:
                return index
        return len(self.slots)


def _coerce_behavior(behavior: Any) -> Optional[TimerBehavior]:
    """Return `behavior` as a `TimerBehavior`, or `None` if it names none."""
    try:
        return TimerBehavior(behavior)
    except ValueError:
        return None
