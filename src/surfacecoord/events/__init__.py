"""
Unified system event stream
"""

from .system_events import (
    SystemEventType,
    SystemEvent,
    SystemEventSink,
    SystemEventEmitter,
    logging_trace_sink
)

__all__ = [
    "SystemEventType",
    "SystemEvent",
    "SystemEventSink",
    "SystemEventEmitter",
    "logging_trace_sink"
]
