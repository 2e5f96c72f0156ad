"""
Tests for the unified system event stream
"""

from unittest.mock import Mock

from surfacecoord.clock import DeterministicClock
from surfacecoord.events.system_events import SystemEventEmitter, SystemEventType


class TestSystemEventEmitter:
    """Test event emission and history"""

    def test_emit_stamps_clock_time(self):
        clock = DeterministicClock(start_ms=42.0)
        sink = Mock()
        emitter = SystemEventEmitter(clock, on_system_event=sink)

        event = emitter.emit(SystemEventType.LOAD_EXCEEDED, None, current=16, max=15)

        sink.assert_called_once_with(event)
        assert event.timestamp == 42.0
        assert event.details == {"current": 16, "max": 15}

    def test_trace_sink_only_in_debug(self):
        trace = Mock()
        quiet = SystemEventEmitter(DeterministicClock(), trace_sink=trace)
        quiet.emit(SystemEventType.FOCUS_CHANGED, "menu")
        trace.assert_not_called()

        loud = SystemEventEmitter(DeterministicClock(), debug=True, trace_sink=trace)
        loud.emit(SystemEventType.FOCUS_CHANGED, "menu")
        trace.assert_called_once()

    def test_failing_sinks_are_contained(self):
        emitter = SystemEventEmitter(
            DeterministicClock(),
            on_system_event=Mock(side_effect=RuntimeError("boom")),
            debug=True,
            trace_sink=Mock(side_effect=RuntimeError("boom"))
        )

        emitter.emit(SystemEventType.ANNOUNCEMENT, "menu")

        assert len(emitter.get_history()) == 1

    def test_default_trace_sink_logs(self, caplog):
        emitter = SystemEventEmitter(DeterministicClock(), debug=True)

        with caplog.at_level("INFO", logger="surfacecoord.trace"):
            emitter.emit(SystemEventType.MENU_REGISTERED, "menu")

        assert "menu_registered" in caplog.text

    def test_history_is_bounded_and_filterable(self):
        emitter = SystemEventEmitter(DeterministicClock(), history_limit=3)
        for participant_id in ["a", "b", "c", "d"]:
            emitter.emit(SystemEventType.MENU_REGISTERED, participant_id)
        emitter.emit(SystemEventType.MENU_UNREGISTERED, "d")

        assert [e.participant_id for e in emitter.get_history()] == ["c", "d", "d"]
        assert len(emitter.get_history(event_type=SystemEventType.MENU_REGISTERED)) == 2
        assert emitter.get_history(limit=1)[0].type == SystemEventType.MENU_UNREGISTERED
        assert emitter.get_history(limit=0) == []

        emitter.clear_history()
        assert emitter.get_history() == []
