"""Shared doubles for the fake timer tests.

`CallRecorder` stands in for the callbacks that code under test would hand to
the timer service. It records every invocation together with the virtual time
at which it happened, so tests can assert on exact firing instants.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

import pytest

from faketimers import FakeTimers


@dataclass
class RecordedCall:
    """One callback invocation and the virtual time it happened at."""

    args: tuple
    at_ms: Optional[int]


class CallRecorder:
    """Call-recording double usable as a timer or pended-function callback."""

    def __init__(self, timers: Optional[FakeTimers] = None) -> None:
        """Optionally bind to ``timers`` so calls are stamped with virtual time."""
        self.timers = timers
        self.calls: List[RecordedCall] = []

    def __call__(self, *args: Any) -> None:
        """Record the call arguments and the current virtual time."""
        at_ms = self.timers.get_current_time() if self.timers is not None else None
        self.calls.append(RecordedCall(args=args, at_ms=at_ms))

    @property
    def count(self) -> int:
        """Return how many times the double was called."""
        return len(self.calls)

    @property
    def times(self) -> List[Optional[int]]:
        """Return the virtual time of each call, in call order."""
        return [call.at_ms for call in self.calls]

    @property
    def args(self) -> List[tuple]:
        """Return the arguments of each call, in call order."""
        return [call.args for call in self.calls]

    def clear(self) -> None:
        """Forget all recorded calls."""
        self.calls.clear()


@pytest.fixture
def timers() -> FakeTimers:
    """Engine with the default 10ms tick quantum."""
    return FakeTimers(tick_ms=10)


@pytest.fixture
def recorder(timers: FakeTimers) -> CallRecorder:
    """Call recorder stamped with ``timers``' virtual time."""
    return CallRecorder(timers)
