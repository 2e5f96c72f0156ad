"""
SurfaceCoord
Arbitration of attention, cognitive load, motion and narration between
independently mounted UI participants
"""

__version__ = "0.1.0"

from .clock import Clock, SystemClock, DeterministicClock
from .exceptions import (
    CoordinatorUsageError,
    CoordinatorNotInitializedError,
    MissingCollaboratorError
)
from .scheduling import TimerHandle, TimerScheduler, VirtualTimerScheduler, AsyncioTimerScheduler, KeyedTimers
from .registry import ParticipantCategory, ParticipantRegistration, CoordinationState, AttentionRegistry
from .focus import FocusService, InMemoryFocusService
from .keyboard import KeyboardAction, KeyConfig, KeyEvent, KeyboardHandlerBinding, KeyboardRouter
from .announcements import (
    AnnouncementPriority,
    AnnouncementCategory,
    Announcement,
    AnnouncementConfig,
    AnnouncementCoordinator,
    InMemoryNarrationChannel
)
from .motion import AnimationRequest, MotionBudget, MotionCoordinator, MotionReductionStrategy
from .events import SystemEvent, SystemEventType, SystemEventEmitter
from .feature_flags import FeatureFlags
from .config import (
    RegistryOptions,
    FocusOptions,
    KeyboardOptions,
    CoordinationConfig,
    load_coordination_config
)
from .coordination_system import CoordinationHooks, CoordinationSystem

__all__ = [
    "__version__",
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "CoordinatorUsageError",
    "CoordinatorNotInitializedError",
    "MissingCollaboratorError",
    "TimerHandle",
    "TimerScheduler",
    "VirtualTimerScheduler",
    "AsyncioTimerScheduler",
    "KeyedTimers",
    "ParticipantCategory",
    "ParticipantRegistration",
    "CoordinationState",
    "AttentionRegistry",
    "FocusService",
    "InMemoryFocusService",
    "KeyboardAction",
    "KeyConfig",
    "KeyEvent",
    "KeyboardHandlerBinding",
    "KeyboardRouter",
    "AnnouncementPriority",
    "AnnouncementCategory",
    "Announcement",
    "AnnouncementConfig",
    "AnnouncementCoordinator",
    "InMemoryNarrationChannel",
    "AnimationRequest",
    "MotionBudget",
    "MotionCoordinator",
    "MotionReductionStrategy",
    "SystemEvent",
    "SystemEventType",
    "SystemEventEmitter",
    "FeatureFlags",
    "RegistryOptions",
    "FocusOptions",
    "KeyboardOptions",
    "CoordinationConfig",
    "load_coordination_config",
    "CoordinationHooks",
    "CoordinationSystem"
]
