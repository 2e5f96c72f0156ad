"""
Focus Service
Interface to the focus-trap primitive consumed by the keyboard router, plus an
in-memory implementation that tracks focus by participant id.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

FocusAnnouncer = Callable[[str, str], Any]
FocusChangeHook = Callable[[Optional[str], Any], None]


class FocusService(Protocol):
    """Focus primitive the coordinators depend on"""

    def register_focus_element(self, element: Any, participant_id: str) -> Callable[[], None]:
        ...

    def unregister_focus_element(self, participant_id: str) -> None:
        ...

    def create_focus_trap(self, boundary: Any, participant_id: str) -> bool:
        ...

    def release_focus_trap(self, participant_id: str) -> bool:
        ...

    def announce_focus_change(self, message: str, priority: str = "polite") -> None:
        ...

    def get_focused_menu_id(self) -> Optional[str]:
        ...


@dataclass
class FocusTrapEntry:
    """One active focus trap and the focus it displaced"""
    participant_id: str
    boundary: Any
    previous_focus: Optional[str]
    restore_on_release: bool = True


class InMemoryFocusService:
    """
    Focus service without a rendering surface

    Elements are opaque objects keyed by participant id. Focus is moved
    explicitly with focus()/blur(); traps form a stack where only the first
    trap may be created while none is active.
    """

    RECENT_ANNOUNCEMENT_LIMIT = 5

    def __init__(
        self,
        announcer: Optional[FocusAnnouncer] = None,
        announce_changes: bool = True,
        on_focus_change: Optional[FocusChangeHook] = None
    ):
        self.announcer = announcer
        self.announce_changes = announce_changes
        self.on_focus_change = on_focus_change

        self._elements: Dict[str, Any] = {}
        self._traps: List[FocusTrapEntry] = []
        self._focused: Optional[str] = None
        self._recent: Deque[str] = deque(maxlen=self.RECENT_ANNOUNCEMENT_LIMIT)

        logger.info("InMemoryFocusService initialized")

    def register_focus_element(self, element: Any, participant_id: str) -> Callable[[], None]:
        """
        Register the focusable element of a participant

        Args:
            element: Opaque element handle
            participant_id: Owning participant

        Returns:
            Callable that unregisters the element
        """
        if not participant_id:
            raise ValueError("participant_id is required to register a focus element")

        self._elements[participant_id] = element
        self._emit_focus_change(participant_id, element)

        def unsubscribe() -> None:
            if self._elements.get(participant_id) is element:
                self.unregister_focus_element(participant_id)

        return unsubscribe

    def unregister_focus_element(self, participant_id: str) -> None:
        if self._elements.pop(participant_id, None) is None:
            return
        self._traps = [trap for trap in self._traps if trap.participant_id != participant_id]
        if self._focused == participant_id:
            self._focused = None
            self._emit_focus_change(None, None)

    def focus(self, participant_id: str) -> bool:
        """Move focus into a registered participant's element"""
        if participant_id not in self._elements:
            logger.debug(f"Cannot focus unregistered element {participant_id}")
            return False
        if self._focused != participant_id:
            self._focused = participant_id
            self._emit_focus_change(participant_id, self._elements[participant_id])
        return True

    def blur(self) -> None:
        if self._focused is not None:
            self._focused = None
            self._emit_focus_change(None, None)

    def get_focused_menu_id(self) -> Optional[str]:
        return self._focused

    # Focus traps

    def create_focus_trap(self, boundary: Any, participant_id: str) -> bool:
        """Trap focus within boundary; refused while another trap is active"""
        if self._traps:
            logger.debug(
                f"Focus trap for {participant_id} refused; "
                f"{self._traps[-1].participant_id} already holds a trap"
            )
            return False

        self._traps.append(FocusTrapEntry(
            participant_id=participant_id,
            boundary=boundary,
            previous_focus=self._focused
        ))
        if participant_id in self._elements:
            self.focus(participant_id)
        self.announce_focus_change(f"Menu opened: {participant_id}", "polite")
        return True

    def release_focus_trap(self, participant_id: str) -> bool:
        entry = next((trap for trap in self._traps if trap.participant_id == participant_id), None)
        if entry is None:
            return False

        self._traps.remove(entry)
        if entry.restore_on_release:
            if entry.previous_focus and entry.previous_focus in self._elements:
                self.focus(entry.previous_focus)
            elif self._focused == participant_id:
                self.blur()
        self.announce_focus_change(f"Menu closed: {participant_id}", "polite")
        return True

    def is_trap_active(self) -> bool:
        return bool(self._traps)

    def get_current_trap_boundary(self) -> Any:
        return self._traps[-1].boundary if self._traps else None

    # Announcements

    def announce_focus_change(self, message: str, priority: str = "polite") -> None:
        """Forward a focus-related message to the narration layer"""
        if not self.announce_changes:
            return
        self._recent.append(message)
        if self.announcer is None:
            return
        try:
            self.announcer(message, priority)
        except Exception as e:
            logger.error(f"Focus announcer failed: {e}")

    def get_recent_announcements(self) -> List[str]:
        return list(self._recent)

    def _emit_focus_change(self, participant_id: Optional[str], element: Any) -> None:
        if self.on_focus_change is None:
            return
        try:
            self.on_focus_change(participant_id, element)
        except Exception as e:
            logger.error(f"Focus change handler failed: {e}")
