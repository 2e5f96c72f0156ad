"""
Unified System Event Stream
Every coordinator hook is funnelled into one typed, timestamped event that is
delivered to a single observer sink, optionally traced, and kept in a bounded
history for the visibility API.
"""

import logging
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from surfacecoord.clock import Clock

logger = logging.getLogger(__name__)
trace_logger = logging.getLogger("surfacecoord.trace")

DEFAULT_HISTORY_LIMIT = 256


class SystemEventType(str, Enum):
    MENU_REGISTERED = "menu_registered"
    MENU_UNREGISTERED = "menu_unregistered"
    ATTENTION_CHANGED = "attention_changed"
    ATTENTION_PREEMPTED = "attention_preempted"
    LOAD_EXCEEDED = "load_exceeded"
    FOCUS_CHANGED = "focus_changed"
    KEYBOARD_ACTION = "keyboard_action"
    ANNOUNCEMENT = "announcement"
    ANIMATION_START = "animation_start"
    ANIMATION_COMPLETE = "animation_complete"
    BUDGET_EXCEEDED = "budget_exceeded"


class SystemEvent(BaseModel):
    """One entry of the unified event stream"""
    model_config = ConfigDict(frozen=True)

    type: SystemEventType
    participant_id: Optional[str] = None
    timestamp: float
    details: Dict[str, Any] = Field(default_factory=dict)


SystemEventSink = Callable[[SystemEvent], None]


def logging_trace_sink(event: SystemEvent) -> None:
    """Default debug trace sink writing to the surfacecoord.trace logger"""
    trace_logger.info(
        f"[{event.timestamp:.1f}ms] {event.type.value} "
        f"participant={event.participant_id or '-'} details={event.details}"
    )


class SystemEventEmitter:
    """Builds system events and fans them out to the observer and trace sinks"""

    def __init__(
        self,
        clock: Clock,
        on_system_event: Optional[SystemEventSink] = None,
        debug: bool = False,
        trace_sink: Optional[SystemEventSink] = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT
    ):
        self.clock = clock
        self.on_system_event = on_system_event
        self.debug = debug
        self.trace_sink = trace_sink or logging_trace_sink
        self._history: Deque[SystemEvent] = deque(maxlen=history_limit)

    def emit(
        self,
        event_type: SystemEventType,
        participant_id: Optional[str] = None,
        **details: Any
    ) -> SystemEvent:
        """
        Emit one event

        Args:
            event_type: Kind of event
            participant_id: Participant the event concerns, if any
            **details: Event specific payload

        Returns:
            The emitted event
        """
        event = SystemEvent(
            type=event_type,
            participant_id=participant_id,
            timestamp=self.clock.now_ms(),
            details=details
        )
        self._history.append(event)

        if self.on_system_event is not None:
            try:
                self.on_system_event(event)
            except Exception as e:
                logger.error(f"System event sink failed for {event_type.value}: {e}")

        if self.debug:
            try:
                self.trace_sink(event)
            except Exception as e:
                logger.error(f"Trace sink failed for {event_type.value}: {e}")

        return event

    def get_history(
        self,
        limit: Optional[int] = None,
        event_type: Optional[SystemEventType] = None
    ) -> List[SystemEvent]:
        """Most recent events, oldest first"""
        events = list(self._history)
        if event_type is not None:
            events = [event for event in events if event.type == event_type]
        if limit is not None:
            events = events[-limit:] if limit > 0 else []
        return events

    def clear_history(self) -> None:
        self._history.clear()
