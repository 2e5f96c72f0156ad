"""
Pytest fixtures for SurfaceCoord
"""

import os

import pytest

from surfacecoord.announcements.announcement_coordinator import AnnouncementCoordinator
from surfacecoord.announcements.narration_channels import InMemoryNarrationChannel
from surfacecoord.config import CoordinationConfig
from surfacecoord.coordination_system import CoordinationSystem
from surfacecoord.feature_flags.feature_flags import FeatureFlags
from surfacecoord.focus.focus_service import InMemoryFocusService
from surfacecoord.registry.attention_registry import AttentionRegistry
from surfacecoord.scheduling.timer_scheduler import VirtualTimerScheduler

ISOLATED_ENV_KEYS = [
    'SURFACECOORD_CONFIG',
    'SURFACECOORD_DEBUG',
    'SURFACECOORD_MAX_COGNITIVE_LOAD',
    'SURFACECOORD_TYPEAHEAD_DELAY_MS',
    'SURFACECOORD_DEBOUNCE_DELAY_MS',
    'SURFACECOORD_VERBOSITY',
    'SURFACECOORD_FEATURE_FLAGS_CONFIG',
    'SURFACECOORD_FLAG_DEBUG_TRACE_ENABLED',
    'SURFACECOORD_FLAG_TYPE_AHEAD_ENABLED',
    'SURFACECOORD_FLAG_PROGRESS_ANNOUNCEMENTS_ENABLED',
    'SURFACECOORD_FLAG_MOTION_ENABLED',
]


@pytest.fixture(autouse=True)
def isolate_environment():
    """
    Autouse fixture keeping configuration and flag variables out of tests.
    Anything a test sets is restored afterwards.
    """
    original_env = {key: os.environ.get(key) for key in ISOLATED_ENV_KEYS}
    for key in ISOLATED_ENV_KEYS:
        os.environ.pop(key, None)

    yield

    for key, value in original_env.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value


@pytest.fixture
def scheduler():
    """Virtual scheduler starting at t=0"""
    return VirtualTimerScheduler()


@pytest.fixture
def registry():
    return AttentionRegistry()


@pytest.fixture
def focus_service():
    return InMemoryFocusService()


@pytest.fixture
def channels():
    """Narration channels created by the factory, keyed by tier value"""
    return {}


@pytest.fixture
def narration_factory(channels):
    def factory(priority):
        channel = InMemoryNarrationChannel(priority)
        channels[channel.priority.value] = channel
        return channel
    return factory


@pytest.fixture
def announcements(scheduler, narration_factory):
    coordinator = AnnouncementCoordinator(scheduler=scheduler, narration_factory=narration_factory)
    coordinator.start()
    yield coordinator
    coordinator.dispose()


@pytest.fixture
def system_events():
    """Collected system events"""
    return []


@pytest.fixture
def system(scheduler, narration_factory, system_events):
    """Initialized coordination system on the virtual scheduler"""
    coordination = CoordinationSystem(
        config=CoordinationConfig(),
        scheduler=scheduler,
        narration_factory=narration_factory,
        feature_flags=FeatureFlags(),
        on_system_event=system_events.append
    )
    coordination.init()
    yield coordination
    coordination.dispose()
