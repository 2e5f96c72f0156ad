"""
Narration channels
Long-lived live text regions read by assistive technology
"""

import logging
from typing import Callable, List, Protocol

from .announcement_models import AnnouncementPriority

logger = logging.getLogger(__name__)


class NarrationChannel(Protocol):
    """One live region; assistive technology narrates every text change"""

    priority: AnnouncementPriority

    @property
    def text(self) -> str:
        ...

    def set_text(self, text: str) -> None:
        ...

    def close(self) -> None:
        ...


NarrationChannelFactory = Callable[[AnnouncementPriority], NarrationChannel]


class InMemoryNarrationChannel:
    """Narration channel that records every text write"""

    def __init__(self, priority: AnnouncementPriority):
        self.priority = AnnouncementPriority(priority)
        self.writes: List[str] = []
        self.closed = False
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if self.closed:
            logger.debug(f"Ignoring write to closed {self.priority.value} channel")
            return
        self._text = text
        self.writes.append(text)

    def close(self) -> None:
        self._text = ""
        self.closed = True

    def narrations(self) -> List[str]:
        """Non-empty writes, i.e. what was actually narrated"""
        return [write for write in self.writes if write]


def in_memory_channel_factory(priority: AnnouncementPriority) -> InMemoryNarrationChannel:
    return InMemoryNarrationChannel(priority)
