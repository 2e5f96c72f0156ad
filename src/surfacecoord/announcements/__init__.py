"""
Announcement coordination
"""

from .announcement_models import (
    AnnouncementPriority,
    AnnouncementCategory,
    VerbosityLevel,
    Announcement,
    AnnouncementConfig
)
from .narration_channels import (
    NarrationChannel,
    NarrationChannelFactory,
    InMemoryNarrationChannel,
    in_memory_channel_factory
)
from .announcement_coordinator import (
    DEFAULT_RENDER_DELAY_MS,
    AnnouncementCoordinator
)
from .participant_messages import (
    PARTICIPANT_MESSAGES,
    ParticipantAnnouncer,
    tree_level_message
)

__all__ = [
    "AnnouncementPriority",
    "AnnouncementCategory",
    "VerbosityLevel",
    "Announcement",
    "AnnouncementConfig",
    "NarrationChannel",
    "NarrationChannelFactory",
    "InMemoryNarrationChannel",
    "in_memory_channel_factory",
    "DEFAULT_RENDER_DELAY_MS",
    "AnnouncementCoordinator",
    "PARTICIPANT_MESSAGES",
    "ParticipantAnnouncer",
    "tree_level_message"
]
