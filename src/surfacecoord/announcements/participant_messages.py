"""
Participant message templates and per-participant announcer
"""

from typing import Dict, Optional

from surfacecoord.registry.registry_models import ParticipantCategory

from .announcement_coordinator import AnnouncementCoordinator
from .announcement_models import VerbosityLevel

PARTICIPANT_MESSAGES: Dict[ParticipantCategory, Dict[str, str]] = {
    ParticipantCategory.CONTEXT: {
        "opened": "Context menu opened",
        "closed": "Context menu closed",
        "item_selected": "Menu item activated",
        "navigation_start": "Navigating context menu",
    },
    ParticipantCategory.NAVIGATION: {
        "opened": "Navigation menu expanded",
        "closed": "Navigation menu collapsed",
        "item_selected": "Navigation item selected",
        "submenu_opened": "Submenu opened",
        "submenu_closed": "Submenu closed",
    },
    ParticipantCategory.DROPDOWN: {
        "opened": "Dropdown menu opened",
        "closed": "Dropdown menu closed",
        "item_selected": "Option selected",
        "search_mode_enabled": "Type to search options",
    },
    ParticipantCategory.BREADCRUMB: {
        "navigation_change": "Page location changed",
        "path_expanded": "Full navigation path shown",
        "path_collapsed": "Navigation path collapsed",
    },
    ParticipantCategory.TREE: {
        "node_expanded": "Tree node expanded",
        "node_collapsed": "Tree node collapsed",
        "item_selected": "Tree item selected",
    },
    ParticipantCategory.SIDEBAR: {
        "expanded": "Sidebar expanded",
        "collapsed": "Sidebar collapsed",
        "navigation_changed": "Sidebar navigation changed",
    },
}

NAVIGATION_DIRECTIONS = ("next", "previous", "first", "last")


def tree_level_message(level: int) -> str:
    return f"Tree level {level}"


class ParticipantAnnouncer:
    """Announcement helper bound to one participant and its category wording"""

    def __init__(
        self,
        coordinator: AnnouncementCoordinator,
        participant_id: str,
        category: ParticipantCategory
    ):
        self.coordinator = coordinator
        self.participant_id = participant_id
        self.category = ParticipantCategory(category)
        self.messages = PARTICIPANT_MESSAGES.get(self.category, {})

    def announce(self, message: str, **options) -> str:
        return self.coordinator.announce_for_menu(self.participant_id, message, **options)

    def announce_opened(self) -> str:
        message = self.messages.get("opened", f"{self.category.value} menu opened")
        return self.coordinator.announce_state_change(message, self.participant_id)

    def announce_closed(self) -> str:
        message = self.messages.get("closed", f"{self.category.value} menu closed")
        return self.coordinator.announce_state_change(message, self.participant_id)

    def announce_item_selected(self, item_text: Optional[str] = None) -> str:
        base = self.messages.get("item_selected", "Item selected")
        message = f"{base}: {item_text}" if item_text else base
        return self.coordinator.announce_navigation(message, self.participant_id)

    def announce_navigation_change(self, direction: str) -> str:
        """Announce relative movement; suppressed when spatial announcements are off or verbosity is minimal"""
        if direction not in NAVIGATION_DIRECTIONS:
            raise ValueError(f"Unknown navigation direction: {direction}")
        config = self.coordinator.config
        if not config.enable_spatial_announcements or config.verbosity_level == VerbosityLevel.MINIMAL:
            return ""
        return self.coordinator.announce_navigation(f"Moved to {direction} item", self.participant_id)

    def announce_error(self, message: str) -> str:
        return self.coordinator.announce_error(message, self.participant_id)

    def announce_success(self, message: str) -> str:
        return self.coordinator.announce_success(message, self.participant_id)

    def clear_all(self) -> None:
        self.coordinator.clear_announcements(self.participant_id)

    def get_active_count(self) -> int:
        return len(self.coordinator.get_active_announcements(self.participant_id))
