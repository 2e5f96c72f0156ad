"""
Focus service interface and in-memory implementation
"""

from .focus_service import (
    FocusAnnouncer,
    FocusService,
    FocusTrapEntry,
    InMemoryFocusService
)

__all__ = [
    "FocusAnnouncer",
    "FocusService",
    "FocusTrapEntry",
    "InMemoryFocusService"
]
