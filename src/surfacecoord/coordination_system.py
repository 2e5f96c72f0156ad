"""
Coordination System
Composition root: builds the registry, focus service, keyboard router,
announcement coordinator and motion coordinator in dependency order, wires
their hooks into one unified system event stream and owns their lifecycle.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from surfacecoord.announcements.announcement_coordinator import AnnouncementCoordinator
from surfacecoord.announcements.announcement_models import Announcement, AnnouncementCategory
from surfacecoord.announcements.narration_channels import NarrationChannelFactory
from surfacecoord.announcements.participant_messages import ParticipantAnnouncer
from surfacecoord.config import CoordinationConfig
from surfacecoord.events.system_events import (
    SystemEvent,
    SystemEventEmitter,
    SystemEventSink,
    SystemEventType
)
from surfacecoord.exceptions import CoordinatorNotInitializedError
from surfacecoord.feature_flags.feature_flags import FeatureFlags
from surfacecoord.focus.focus_service import FocusService, InMemoryFocusService
from surfacecoord.keyboard.keyboard_models import KeyboardAction, KeyConfig, KeyEvent, KeyEventSource
from surfacecoord.keyboard.keyboard_router import KeyboardRouter
from surfacecoord.motion.motion_coordinator import MotionCoordinator
from surfacecoord.motion.motion_models import AnimationRequest
from surfacecoord.motion.reduction import MotionReductionStrategy
from surfacecoord.registry.attention_registry import AttentionRegistry
from surfacecoord.registry.registry_models import ParticipantCategory, ParticipantRegistration
from surfacecoord.scheduling.timer_scheduler import AsyncioTimerScheduler, TimerScheduler

logger = logging.getLogger(__name__)

# Categories that take motion priority when they mount
MOTION_PRIORITY_CATEGORIES = (ParticipantCategory.CONTEXT, ParticipantCategory.NAVIGATION)


class SystemState:
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DISPOSED = "disposed"


@dataclass
class CoordinationHooks:
    """User hooks; each is called before the matching system event is emitted"""
    on_load_exceeded: Optional[Callable[[int, int], None]] = None
    on_menu_registered: Optional[Callable[[ParticipantRegistration], None]] = None
    on_menu_unregistered: Optional[Callable[[ParticipantRegistration], None]] = None
    on_attention_change: Optional[Callable[[Optional[str]], None]] = None
    on_attention_preempted: Optional[Callable[[str, str], None]] = None
    on_focus_change: Optional[Callable[[Optional[str], Any], None]] = None
    on_keyboard_action: Optional[Callable[[KeyboardAction, str, Optional[KeyEvent]], None]] = None
    on_announcement: Optional[Callable[[Announcement], None]] = None
    on_animation_start: Optional[Callable[[AnimationRequest], None]] = None
    on_animation_complete: Optional[Callable[[AnimationRequest], None]] = None
    on_budget_exceeded: Optional[Callable[[int, int], None]] = None


class CoordinationSystem:
    """Explicitly constructed coordination system; instances are independent"""

    def __init__(
        self,
        config: Optional[CoordinationConfig] = None,
        scheduler: Optional[TimerScheduler] = None,
        focus_service: Optional[FocusService] = None,
        narration_factory: Optional[NarrationChannelFactory] = None,
        feature_flags: Optional[FeatureFlags] = None,
        hooks: Optional[CoordinationHooks] = None,
        on_system_event: Optional[SystemEventSink] = None,
        trace_sink: Optional[SystemEventSink] = None,
        reduction_strategy: Optional[MotionReductionStrategy] = None,
        key_source: Optional[KeyEventSource] = None
    ):
        self.config = config or CoordinationConfig()
        self.scheduler = scheduler or AsyncioTimerScheduler()
        self.feature_flags = feature_flags or FeatureFlags()
        self.hooks = hooks or CoordinationHooks()
        self._focus_service_arg = focus_service
        self._narration_factory = narration_factory
        self._reduction_strategy = reduction_strategy
        self._key_source = key_source

        debug = self.config.debug or self.feature_flags.is_debug_trace_enabled()
        self.events = SystemEventEmitter(
            clock=self.scheduler,
            on_system_event=on_system_event,
            debug=debug,
            trace_sink=trace_sink,
            history_limit=self.config.event_history_limit
        )

        self._state = SystemState.UNINITIALIZED
        self._registry: Optional[AttentionRegistry] = None
        self._focus: Optional[FocusService] = None
        self._keyboard: Optional[KeyboardRouter] = None
        self._announcements: Optional[AnnouncementCoordinator] = None
        self._motion: Optional[MotionCoordinator] = None

    # Lifecycle

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == SystemState.ACTIVE

    def init(self) -> "CoordinationSystem":
        """Build every coordinator in dependency order"""
        if self.is_active:
            return self

        config = self.config
        flags = self.feature_flags

        self._registry = AttentionRegistry(
            max_cognitive_load=config.registry.max_cognitive_load,
            on_load_exceeded=self._handle_load_exceeded,
            on_attention_change=self._handle_attention_change,
            on_attention_preempted=self._handle_attention_preempted,
            on_menu_registered=self._handle_menu_registered,
            on_menu_unregistered=self._handle_menu_unregistered
        )

        if self._focus_service_arg is not None:
            self._focus = self._focus_service_arg
        else:
            self._focus = InMemoryFocusService(
                announce_changes=config.focus.announce_changes,
                on_focus_change=self._handle_focus_change
            )

        self._keyboard = KeyboardRouter(
            registry=self._registry,
            focus_service=self._focus,
            scheduler=self.scheduler,
            enable_type_ahead=config.keyboard.enable_type_ahead and flags.is_type_ahead_enabled(),
            type_ahead_delay_ms=config.keyboard.type_ahead_delay_ms,
            on_global_key_action=self._handle_keyboard_action
        )
        if self._key_source is not None:
            self._keyboard.attach(self._key_source)

        announcement_config = config.announcements
        if not flags.is_progress_announcements_enabled():
            announcement_config = announcement_config.model_copy(
                update={"enable_progress_announcements": False}
            )
        self._announcements = AnnouncementCoordinator(
            config=announcement_config,
            scheduler=self.scheduler,
            narration_factory=self._narration_factory,
            on_announcement=self._handle_announcement,
            render_delay_ms=config.render_delay_ms,
            render_on_promotion=config.render_on_promotion
        )
        self._announcements.start()
        if isinstance(self._focus, InMemoryFocusService) and self._focus.announcer is None:
            self._focus.announcer = self._announce_focus_change

        self._motion = MotionCoordinator(
            registry=self._registry,
            scheduler=self.scheduler,
            budget=config.motion,
            reduction_strategy=self._reduction_strategy,
            on_animation_start=self._handle_animation_start,
            on_animation_complete=self._handle_animation_complete,
            on_budget_exceeded=self._handle_budget_exceeded,
            require_registered=config.require_registered_motion
        )
        if not flags.is_motion_enabled():
            self._motion.pause_motion()

        self._state = SystemState.ACTIVE
        logger.info("CoordinationSystem initialized")
        return self

    def dispose(self) -> None:
        """Tear down in reverse dependency order"""
        if not self.is_active:
            return
        self._motion.dispose()
        self._announcements.dispose()
        self._keyboard.dispose()
        if isinstance(self._focus, InMemoryFocusService) and self._focus.announcer == self._announce_focus_change:
            self._focus.announcer = None
        self._registry.clear()

        self._motion = None
        self._announcements = None
        self._keyboard = None
        self._focus = None
        self._registry = None
        self._state = SystemState.DISPOSED
        logger.info("CoordinationSystem disposed")

    def __enter__(self) -> "CoordinationSystem":
        return self.init()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def _require(self, component: Optional[Any], name: str) -> Any:
        if not self.is_active or component is None:
            raise CoordinatorNotInitializedError(name, self._state)
        return component

    @property
    def registry(self) -> AttentionRegistry:
        return self._require(self._registry, "AttentionRegistry")

    @property
    def focus(self) -> FocusService:
        return self._require(self._focus, "FocusService")

    @property
    def keyboard(self) -> KeyboardRouter:
        return self._require(self._keyboard, "KeyboardRouter")

    @property
    def announcements(self) -> AnnouncementCoordinator:
        return self._require(self._announcements, "AnnouncementCoordinator")

    @property
    def motion(self) -> MotionCoordinator:
        return self._require(self._motion, "MotionCoordinator")

    # Participant wiring

    def register_participant(
        self,
        participant_id: str,
        category: Union[ParticipantCategory, str],
        cognitive_load: int,
        element: Any = None,
        on_action: Optional[Callable[..., Any]] = None,
        key_configs: Optional[Sequence[Union[KeyConfig, Mapping[str, Any]]]] = None
    ) -> bool:
        """
        Mount a participant across all coordinators

        Registers it with the registry, binds its keys (category defaults
        unless key_configs is given), registers its focus element when one is
        supplied and gives context/navigation participants motion priority.

        Returns:
            False if the key configs are invalid or the registry denied the
            registration; nothing is mounted in either case
        """
        if key_configs is not None:
            try:
                key_configs = [
                    c if isinstance(c, KeyConfig) else KeyConfig.model_validate(c) for c in key_configs
                ]
            except (ValidationError, ValueError) as e:
                logger.warning(f"Participant {participant_id} not mounted, invalid key configuration: {e}")
                return False

        registry = self.registry
        if not registry.register_menu({
            "id": participant_id,
            "category": category,
            "cognitive_load": cognitive_load
        }):
            return False

        registration = registry.get_registration(participant_id)
        if not self.keyboard.bind_participant(participant_id, registration.category, on_action, key_configs):
            registry.unregister_menu(participant_id)
            return False
        if element is not None:
            self.focus.register_focus_element(element, participant_id)
        if registration.category in MOTION_PRIORITY_CATEGORIES:
            self.motion.set_motion_priority(participant_id)
        return True

    def unregister_participant(self, participant_id: str) -> bool:
        """Unmount a participant, releasing everything it holds"""
        registry = self.registry
        self.motion.cancel_animations_for_menu(participant_id)
        self.motion.release_motion_priority(participant_id)
        self.announcements.clear_announcements(participant_id)
        self.keyboard.unregister_keyboard_handler(participant_id)
        self.focus.release_focus_trap(participant_id)
        self.focus.unregister_focus_element(participant_id)
        return registry.unregister_menu(participant_id)

    def announcer_for(self, participant_id: str) -> ParticipantAnnouncer:
        registration = self.registry.get_registration(participant_id)
        if registration is None:
            raise KeyError(f"Participant {participant_id} is not registered")
        return ParticipantAnnouncer(self.announcements, participant_id, registration.category)

    def dispatch_key(self, event: KeyEvent) -> bool:
        """Feed one key event to the keyboard router"""
        return self.keyboard.handle_key_down(event)

    # Status

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of the whole system"""
        status: Dict[str, Any] = {
            "state": self._state,
            "debug": self.events.debug,
            "feature_flags": self.feature_flags.enabled_flags(),
        }
        if not self.is_active:
            return status

        registry_state = self._registry.get_state()
        status.update({
            "registry": {
                "participant_count": len(registry_state.participants),
                "attention_owner": registry_state.attention_owner,
                "focus_stack": registry_state.focus_stack,
                "current_load": registry_state.current_load,
                "budget": registry_state.budget,
            },
            "focus": {
                "focused_participant": self._focus.get_focused_menu_id(),
            },
            "keyboard": {
                "handler_count": len(self._keyboard.list_handlers()),
                "search_active": self._keyboard.is_search_active(),
                "search_term": self._keyboard.get_search_term(),
            },
            "announcements": {
                "active": len(self._announcements.get_active_announcements()),
                "queued": self._announcements.get_queue_length(),
                "paused": self._announcements.is_paused(),
            },
            "motion": {
                **self._motion.get_budget_status(),
                "active": self._motion.get_active_animation_count(),
                "queued": self._motion.get_queue_length(),
                "motion_level": self._motion.get_motion_level().value,
                "paused": self._motion.is_paused(),
                "priority_owner": self._motion.get_motion_priority_owner(),
            },
        })
        return status

    def get_events(self, limit: Optional[int] = None) -> List[SystemEvent]:
        return self.events.get_history(limit=limit)

    # Hook wiring

    def _call_hook(self, name: str, *args: Any) -> None:
        hook = getattr(self.hooks, name)
        if hook is None:
            return
        try:
            hook(*args)
        except Exception as e:
            logger.error(f"Coordination hook {name} failed: {e}")

    def _handle_load_exceeded(self, requested_load: int, budget: int) -> None:
        self._call_hook("on_load_exceeded", requested_load, budget)
        self.events.emit(SystemEventType.LOAD_EXCEEDED, requested_load=requested_load, budget=budget)

    def _handle_menu_registered(self, registration: ParticipantRegistration) -> None:
        self._call_hook("on_menu_registered", registration)
        self.events.emit(
            SystemEventType.MENU_REGISTERED,
            registration.id,
            category=registration.category.value,
            priority=registration.priority,
            cognitive_load=registration.cognitive_load
        )

    def _handle_menu_unregistered(self, registration: ParticipantRegistration) -> None:
        self._call_hook("on_menu_unregistered", registration)
        self.events.emit(
            SystemEventType.MENU_UNREGISTERED,
            registration.id,
            category=registration.category.value
        )

    def _handle_attention_change(self, owner: Optional[str]) -> None:
        self._call_hook("on_attention_change", owner)
        self.events.emit(SystemEventType.ATTENTION_CHANGED, owner, owner=owner)

    def _handle_attention_preempted(self, preempted: str, new_owner: str) -> None:
        self._call_hook("on_attention_preempted", preempted, new_owner)
        self.events.emit(SystemEventType.ATTENTION_PREEMPTED, preempted, new_owner=new_owner)

    def _handle_focus_change(self, participant_id: Optional[str], element: Any) -> None:
        self._call_hook("on_focus_change", participant_id, element)
        self.events.emit(SystemEventType.FOCUS_CHANGED, participant_id)

    def _handle_keyboard_action(
        self,
        action: KeyboardAction,
        participant_id: str,
        event: Optional[KeyEvent]
    ) -> None:
        self._call_hook("on_keyboard_action", action, participant_id, event)
        self.events.emit(
            SystemEventType.KEYBOARD_ACTION,
            participant_id,
            action=action.value,
            key=event.key if event is not None else None
        )

    def _handle_announcement(self, announcement: Announcement) -> None:
        self._call_hook("on_announcement", announcement)
        self.events.emit(
            SystemEventType.ANNOUNCEMENT,
            announcement.participant_id,
            id=announcement.id,
            message=announcement.message,
            priority=announcement.priority.value,
            category=announcement.category.value
        )

    def _handle_animation_start(self, request: AnimationRequest) -> None:
        self._call_hook("on_animation_start", request)
        self.events.emit(
            SystemEventType.ANIMATION_START,
            request.participant_id,
            id=request.id,
            motion_type=request.motion_type.value
        )

    def _handle_animation_complete(self, request: AnimationRequest) -> None:
        self._call_hook("on_animation_complete", request)
        self.events.emit(
            SystemEventType.ANIMATION_COMPLETE,
            request.participant_id,
            id=request.id,
            motion_type=request.motion_type.value
        )

    def _handle_budget_exceeded(self, requested_load: int, max_load: int) -> None:
        self._call_hook("on_budget_exceeded", requested_load, max_load)
        self.events.emit(SystemEventType.BUDGET_EXCEEDED, requested_load=requested_load, max_load=max_load)

    def _announce_focus_change(self, message: str, priority: str) -> None:
        self._announcements.announce(message, priority=priority, category=AnnouncementCategory.STATUS)
