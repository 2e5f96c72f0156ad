"""
Keyboard Router
Routes key events through a fixed four-stage pipeline: global shortcuts,
typeahead entry, typeahead continuation, then the focused participant's own
bindings. The first stage that handles an event ends routing.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from surfacecoord.exceptions import MissingCollaboratorError
from surfacecoord.focus.focus_service import FocusService
from surfacecoord.registry.attention_registry import AttentionRegistry
from surfacecoord.registry.registry_models import ParticipantCategory, priority_for_category
from surfacecoord.scheduling.timer_scheduler import AsyncioTimerScheduler, KeyedTimers, TimerScheduler

from .default_key_configs import default_key_configs
from .keyboard_models import (
    ActionCallback,
    KeyboardAction,
    KeyboardHandlerBinding,
    KeyConfig,
    KeyEvent,
    KeyEventSource
)

logger = logging.getLogger(__name__)

DEFAULT_TYPE_AHEAD_DELAY_MS = 1000
SEARCH_MODE_MESSAGE = "Search mode activated"

GlobalActionObserver = Callable[[KeyboardAction, str, Optional[KeyEvent]], None]

_SEARCH_TIMER_KEY = "search"


class KeyboardRouter:
    """Single key listener arbitrating between shortcuts, typeahead and participants"""

    def __init__(
        self,
        registry: Optional[AttentionRegistry],
        focus_service: Optional[FocusService],
        scheduler: Optional[TimerScheduler] = None,
        enable_type_ahead: bool = True,
        type_ahead_delay_ms: float = DEFAULT_TYPE_AHEAD_DELAY_MS,
        on_global_key_action: Optional[GlobalActionObserver] = None
    ):
        if registry is None:
            raise MissingCollaboratorError("KeyboardRouter", "registry")
        if focus_service is None:
            raise MissingCollaboratorError("KeyboardRouter", "focus service")

        self.registry = registry
        self.focus_service = focus_service
        self.enable_type_ahead = enable_type_ahead
        self.type_ahead_delay_ms = type_ahead_delay_ms
        self.on_global_key_action = on_global_key_action

        self._handlers: Dict[str, KeyboardHandlerBinding] = {}
        self._global_shortcuts: Dict[str, KeyConfig] = {}
        self._search_mode = False
        self._search_term = ""
        self._search_participant: Optional[str] = None
        self._timers = KeyedTimers(scheduler or AsyncioTimerScheduler(), name="typeahead")
        self._source: Optional[KeyEventSource] = None

        logger.info(
            f"KeyboardRouter initialized (type_ahead={enable_type_ahead}, "
            f"delay={type_ahead_delay_ms}ms)"
        )

    # Lifecycle

    def attach(self, source: KeyEventSource) -> None:
        """Attach the router's single listener to a key event source"""
        self.detach()
        source.add_listener(self.handle_key_down)
        self._source = source

    def detach(self) -> None:
        if self._source is not None:
            self._source.remove_listener(self.handle_key_down)
            self._source = None

    def dispose(self) -> None:
        self.detach()
        self.disable_search_mode()
        self._timers.cancel_all()
        self._handlers.clear()
        self._global_shortcuts.clear()
        logger.info("KeyboardRouter disposed")

    # Handler registration

    def register_keyboard_handler(
        self,
        binding: Union[KeyboardHandlerBinding, Mapping[str, Any]]
    ) -> bool:
        """
        Register (or replace) the key bindings of a participant

        Args:
            binding: Handler binding or mapping; a mapping without a priority
                gets the registry's priority for the participant

        Returns:
            True if the binding was stored
        """
        try:
            if not isinstance(binding, KeyboardHandlerBinding):
                data = dict(binding)
                if "priority" not in data and "participant_id" in data and "category" in data:
                    data["priority"] = self._lookup_priority(data["participant_id"], data["category"])
                binding = KeyboardHandlerBinding.model_validate(data)
        except (ValidationError, ValueError) as e:
            logger.warning(f"Keyboard handler registration failed: {e}")
            return False

        self._handlers[binding.participant_id] = binding
        logger.debug(
            f"Keyboard handler registered for {binding.participant_id} "
            f"({len(binding.key_configs)} bindings, priority {binding.priority})"
        )
        return True

    def bind_participant(
        self,
        participant_id: str,
        category: ParticipantCategory,
        on_action: Optional[ActionCallback] = None,
        key_configs: Optional[Sequence[Union[KeyConfig, Mapping[str, Any]]]] = None
    ) -> bool:
        """Register a participant with its category's default bindings unless overridden"""
        try:
            configs = (
                [KeyConfig.model_validate(c) if not isinstance(c, KeyConfig) else c for c in key_configs]
                if key_configs is not None
                else default_key_configs(category)
            )
        except (ValidationError, ValueError) as e:
            logger.warning(f"Invalid key configuration for {participant_id}: {e}")
            return False

        return self.register_keyboard_handler({
            "participant_id": participant_id,
            "category": category,
            "key_configs": configs,
            "on_action": on_action,
        })

    def unregister_keyboard_handler(self, participant_id: str) -> bool:
        removed = self._handlers.pop(participant_id, None) is not None
        if removed and self._search_participant == participant_id:
            self.disable_search_mode()
        return removed

    def get_handler(self, participant_id: str) -> Optional[KeyboardHandlerBinding]:
        return self._handlers.get(participant_id)

    def set_handler_enabled(self, participant_id: str, enabled: bool) -> bool:
        handler = self._handlers.get(participant_id)
        if handler is None:
            return False
        self._handlers[participant_id] = handler.model_copy(update={"enabled": enabled})
        return True

    def is_handler_enabled(self, participant_id: str) -> bool:
        handler = self._handlers.get(participant_id)
        return handler.enabled if handler else False

    def _lookup_priority(self, participant_id: str, category: Any) -> int:
        registration = self.registry.get_registration(participant_id)
        if registration is not None:
            return registration.priority
        return priority_for_category(ParticipantCategory(category))

    # Global shortcuts

    def set_global_shortcut(self, name: str, config: Union[KeyConfig, Mapping[str, Any]]) -> bool:
        try:
            if not isinstance(config, KeyConfig):
                config = KeyConfig.model_validate(config)
        except ValidationError as e:
            logger.warning(f"Global shortcut registration failed for {name}: {e}")
            return False
        self._global_shortcuts[name] = config
        return True

    def remove_global_shortcut(self, name: str) -> bool:
        return self._global_shortcuts.pop(name, None) is not None

    def get_global_shortcuts(self) -> Dict[str, KeyConfig]:
        return dict(self._global_shortcuts)

    # Actions

    def trigger_action(
        self,
        participant_id: str,
        action: KeyboardAction,
        event: Optional[KeyEvent] = None
    ) -> bool:
        """
        Invoke a participant's action callback and notify the global observer

        Returns:
            False when the handler is missing, disabled or its callback raised
        """
        handler = self._handlers.get(participant_id)
        if handler is None or not handler.enabled:
            return False

        try:
            if handler.on_action is not None:
                handler.on_action(action, event)
            if self.on_global_key_action is not None:
                self.on_global_key_action(action, participant_id, event)
            return True
        except Exception as e:
            logger.error(f"Keyboard action {action.value} failed for {participant_id}: {e}")
            return False

    # Search mode

    def enable_search_mode(self, participant_id: str) -> None:
        self._search_mode = True
        self._search_term = ""
        self._search_participant = participant_id
        self.focus_service.announce_focus_change(SEARCH_MODE_MESSAGE, "assertive")

    def disable_search_mode(self) -> None:
        self._search_mode = False
        self._search_term = ""
        self._search_participant = None
        self._timers.cancel(_SEARCH_TIMER_KEY)

    def update_search_term(self, term: str) -> None:
        """Set the search term and restart the inactivity timer"""
        self._search_term = term
        self._timers.schedule(_SEARCH_TIMER_KEY, self.type_ahead_delay_ms, self.disable_search_mode)

    def is_search_active(self) -> bool:
        return self._search_mode

    def get_search_term(self) -> str:
        return self._search_term

    # Routing

    def handle_key_down(self, event: KeyEvent) -> bool:
        """
        Route one key event

        Returns:
            True if some stage handled the event
        """
        current_focus = self.focus_service.get_focused_menu_id()

        for config in self._global_shortcuts.values():
            if event.matches(config):
                self._apply_event_flags(event, config)
                if current_focus:
                    self.trigger_action(current_focus, config.action, event)
                return True

        if (
            self.enable_type_ahead
            and current_focus
            and not self._search_mode
            and self._is_typeahead_char(event.key)
            and not event.has_modifiers
            and event.key != " "
        ):
            self.enable_search_mode(current_focus)
            self.update_search_term(event.key)
            event.prevent_default()
            return True

        if self._search_mode and current_focus:
            if event.key == "Escape":
                self.disable_search_mode()
                event.prevent_default()
                return True

            if event.key == "Backspace":
                trimmed = self._search_term[:-1]
                if trimmed:
                    self.update_search_term(trimmed)
                else:
                    self.disable_search_mode()
                event.prevent_default()
                return True

            if self._is_typeahead_char(event.key) and not (event.ctrl or event.alt or event.meta):
                self.update_search_term(self._search_term + event.key)
                event.prevent_default()
                return True

        if current_focus:
            handler = self._handlers.get(current_focus)
            if handler is not None and handler.enabled:
                for config in handler.key_configs:
                    if event.matches(config):
                        self._apply_event_flags(event, config)
                        self.trigger_action(current_focus, config.action, event)
                        return True

        return False

    @staticmethod
    def _is_typeahead_char(key: str) -> bool:
        return len(key) == 1 and key.isprintable()

    @staticmethod
    def _apply_event_flags(event: KeyEvent, config: KeyConfig) -> None:
        if config.prevent_default:
            event.prevent_default()
        if config.stop_propagation:
            event.stop_propagation()

    def list_handlers(self) -> List[KeyboardHandlerBinding]:
        return sorted(self._handlers.values(), key=lambda h: (h.priority, h.participant_id))
