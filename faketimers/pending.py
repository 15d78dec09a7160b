"""FIFO queue of deferred function calls."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque

_LOG = logging.getLogger("faketimers.pending")


@dataclass
class PendingCall:
    """A deferred ``callback(context, auxiliary)`` invocation."""

    callback: Callable[[Any, int], None]
    context: Any
    auxiliary: int

    def __call__(self) -> None:
        self.callback(self.context, self.auxiliary)


class PendingCallQueue:
    """Calls deferred to the start of the next time advance.

    `drain()` runs only the calls that were queued when it began. A pending
    call that queues another call defers it to the following drain.
    """

    def __init__(self) -> None:
        self._calls: Deque[PendingCall] = deque()

    def __len__(self) -> int:
        return len(self._calls)

    def __iter__(self):
        return iter(self._calls)

    def pend(self, callback: Callable[[Any, int], None], context: Any, auxiliary: int) -> bool:
        self._calls.append(PendingCall(callback, context, auxiliary))
        return True

    def drain(self) -> int:
        """Run queued calls in FIFO order; return how many ran."""
        batch, self._calls = self._calls, deque()
        executed = 0
        while batch:
            call = batch.popleft()
            try:
                call()
            except Exception:
                # Calls after the failing one stay queued for the next drain.
                batch.extend(self._calls)
                self._calls = batch
                raise
            executed += 1
        if executed:
            _LOG.debug("pending_drained count=%d deferred=%d", executed, len(self._calls))
        return executed
