"""
Read-only HTTP visibility into coordination state
"""

from .visibility_api import (
    CoordinationVisibilityAPI,
    ParticipantInfo,
    MotionInfo,
    AnnouncementInfo,
    SystemEventInfo
)

__all__ = [
    "CoordinationVisibilityAPI",
    "ParticipantInfo",
    "MotionInfo",
    "AnnouncementInfo",
    "SystemEventInfo"
]
