"""Deterministic software-timer service for unit tests."""

from .adapters import SchedulerAdapter
from .clock import VirtualClock
from .config import FakeTimersConfig
from .fake_timers import FakeTimers
from .pending import PendingCall, PendingCallQueue
from .protocols import Scheduler, SchedulerCancel, TimerService
from .timer_table import (
    EXPIRY_INACTIVE,
    INVALID_HANDLE,
    InvalidTimerHandle,
    Timer,
    TimerBehavior,
    TimerTable,
)

__all__ = [
    "EXPIRY_INACTIVE",
    "FakeTimers",
    "FakeTimersConfig",
    "INVALID_HANDLE",
    "InvalidTimerHandle",
    "PendingCall",
    "PendingCallQueue",
    "Scheduler",
    "SchedulerAdapter",
    "SchedulerCancel",
    "Timer",
    "TimerBehavior",
    "TimerService",
    "TimerTable",
    "VirtualClock",
]
