"""
Scheduling module initialization
"""

from .timer_scheduler import (
    TimerCallback,
    TimerHandle,
    TimerScheduler,
    VirtualTimerScheduler,
    AsyncioTimerScheduler,
    KeyedTimers
)

__all__ = [
    "TimerCallback",
    "TimerHandle",
    "TimerScheduler",
    "VirtualTimerScheduler",
    "AsyncioTimerScheduler",
    "KeyedTimers"
]
