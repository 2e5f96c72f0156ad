"""
Announcement Coordinator
Debounces narration requests, caps how many announcements are active at once
and writes them to one polite and one assertive narration channel.
"""

import logging
import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from surfacecoord.scheduling.timer_scheduler import AsyncioTimerScheduler, KeyedTimers, TimerScheduler

from .announcement_models import (
    Announcement,
    AnnouncementCategory,
    AnnouncementConfig,
    AnnouncementPriority
)
from .narration_channels import NarrationChannel, NarrationChannelFactory, in_memory_channel_factory

logger = logging.getLogger(__name__)

DEFAULT_RENDER_DELAY_MS = 10
SUCCESS_DURATION_MS = 3000
PROGRESS_DURATION_MS = 1000

AnnouncementHook = Callable[[Announcement], None]

_CHANNEL_TIERS = (AnnouncementPriority.POLITE, AnnouncementPriority.ASSERTIVE)


class AnnouncementCoordinator:
    """
    Arbiter of the shared narration channels

    Flow of one announcement: announce() validates and (re)starts the debounce
    timer for its key; when the timer fires the announcement is either queued
    (at capacity) or made active, its channel is blanked and re-set after the
    render delay so the change is narrated. Active announcements with a
    duration clear themselves.
    """

    def __init__(
        self,
        config: Optional[Union[AnnouncementConfig, Mapping[str, Any]]] = None,
        scheduler: Optional[TimerScheduler] = None,
        narration_factory: Optional[NarrationChannelFactory] = None,
        on_announcement: Optional[AnnouncementHook] = None,
        render_delay_ms: float = DEFAULT_RENDER_DELAY_MS,
        render_on_promotion: bool = False
    ):
        if config is None:
            config = AnnouncementConfig()
        elif not isinstance(config, AnnouncementConfig):
            config = AnnouncementConfig.model_validate(config)

        self.config = config
        self.scheduler = scheduler or AsyncioTimerScheduler()
        self.narration_factory = narration_factory or in_memory_channel_factory
        self.on_announcement = on_announcement
        self.render_delay_ms = render_delay_ms
        # Extension point: promoted queue entries are not narrated unless set
        self.render_on_promotion = render_on_promotion

        self._channels: Dict[AnnouncementPriority, NarrationChannel] = {}
        self._active: Dict[str, Announcement] = {}
        self._queue: Deque[Announcement] = deque()
        self._paused = False

        self._debounce = KeyedTimers(self.scheduler, name="announce-debounce")
        self._auto_clear = KeyedTimers(self.scheduler, name="announce-clear")
        self._render = KeyedTimers(self.scheduler, name="announce-render")

        logger.info(
            f"AnnouncementCoordinator initialized (max_concurrent="
            f"{config.max_concurrent_announcements}, debounce={config.debounce_delay_ms}ms)"
        )

    # Lifecycle

    def start(self) -> None:
        """Create the long-lived narration channels"""
        for tier in _CHANNEL_TIERS:
            if tier not in self._channels:
                self._channels[tier] = self.narration_factory(tier)
        logger.debug("Narration channels created")

    def dispose(self) -> None:
        """Close both channels and cancel every pending timer"""
        cancelled = self._debounce.cancel_all() + self._auto_clear.cancel_all() + self._render.cancel_all()
        for channel in self._channels.values():
            channel.close()
        self._channels.clear()
        self._active.clear()
        self._queue.clear()
        logger.info(f"AnnouncementCoordinator disposed ({cancelled} timers cancelled)")

    @property
    def started(self) -> bool:
        return bool(self._channels)

    # Announcing

    def announce(
        self,
        message: str,
        priority: Union[AnnouncementPriority, str] = AnnouncementPriority.POLITE,
        category: Union[AnnouncementCategory, str] = AnnouncementCategory.INFORMATION,
        participant_id: Optional[str] = None,
        duration: float = 0,
        persistent: bool = False
    ) -> str:
        """
        Request a narration

        Identical message/participant pairs arriving within the debounce window
        coalesce into one emission carrying the latest call's options.

        Args:
            message: Text to narrate; surrounding whitespace is trimmed
            priority: Narration tier
            category: Announcement category
            participant_id: Owning participant, if any
            duration: Auto-clear delay in ms (0 keeps it until cleared)
            persistent: Marks announcements that should outlive routine clears

        Returns:
            Announcement id, or "" when paused, blank or invalid
        """
        if self._paused or not isinstance(message, str) or not message.strip():
            return ""

        try:
            announcement = Announcement(
                id=f"announcement-{uuid.uuid4().hex[:12]}",
                message=message,
                priority=priority,
                category=category,
                participant_id=participant_id,
                timestamp=self.scheduler.now_ms(),
                duration=duration,
                persistent=persistent
            )
        except ValidationError as e:
            logger.warning(f"Announcement validation failed: {e}")
            return ""

        self._debounce.schedule(
            announcement.debounce_key,
            self.config.debounce_delay_ms,
            lambda: self._deliver(announcement)
        )
        return announcement.id

    def announce_for_menu(self, participant_id: str, message: str, **options: Any) -> str:
        options.pop("participant_id", None)
        return self.announce(message, participant_id=participant_id, **options)

    def announce_navigation(self, message: str, participant_id: Optional[str] = None) -> str:
        return self.announce(
            message,
            priority=AnnouncementPriority.POLITE,
            category=AnnouncementCategory.NAVIGATION,
            participant_id=participant_id
        )

    def announce_state_change(self, message: str, participant_id: Optional[str] = None) -> str:
        return self.announce(
            message,
            priority=AnnouncementPriority.POLITE,
            category=AnnouncementCategory.STATE_CHANGE,
            participant_id=participant_id
        )

    def announce_error(self, message: str, participant_id: Optional[str] = None) -> str:
        return self.announce(
            message,
            priority=AnnouncementPriority.ASSERTIVE,
            category=AnnouncementCategory.ERROR,
            participant_id=participant_id,
            persistent=True
        )

    def announce_success(self, message: str, participant_id: Optional[str] = None) -> str:
        return self.announce(
            message,
            priority=AnnouncementPriority.POLITE,
            category=AnnouncementCategory.SUCCESS,
            participant_id=participant_id,
            duration=SUCCESS_DURATION_MS
        )

    def announce_progress(self, message: str, participant_id: Optional[str] = None) -> str:
        if not self.config.enable_progress_announcements:
            return ""
        return self.announce(
            message,
            priority=AnnouncementPriority.POLITE,
            category=AnnouncementCategory.PROGRESS,
            participant_id=participant_id,
            duration=PROGRESS_DURATION_MS
        )

    def _deliver(self, announcement: Announcement) -> None:
        if len(self._active) >= self.config.max_concurrent_announcements:
            self._queue.append(announcement)
            logger.debug(f"Announcement {announcement.id} queued (queue length {len(self._queue)})")
            return

        self._activate(announcement)
        self._render_announcement(announcement)
        self._notify(announcement)

    def _activate(self, announcement: Announcement) -> None:
        self._active[announcement.id] = announcement
        if announcement.duration > 0:
            self._auto_clear.schedule(
                announcement.id,
                announcement.duration,
                lambda: self.clear_announcement_by_id(announcement.id)
            )

    def _render_announcement(self, announcement: Announcement) -> None:
        channel = self._channels.get(announcement.priority)
        if channel is None:
            return
        channel.set_text("")
        self._render.schedule(
            announcement.id,
            self.render_delay_ms,
            lambda: channel.set_text(announcement.message)
        )

    def _notify(self, announcement: Announcement) -> None:
        if self.on_announcement is None:
            return
        try:
            self.on_announcement(announcement)
        except Exception as e:
            logger.error(f"Announcement handler failed: {e}")

    # Clearing

    def clear_announcement_by_id(self, announcement_id: str) -> bool:
        """
        Remove an active or queued announcement

        Freeing an active slot promotes the queue head. Promoted entries are
        tracked (and auto-cleared) but only narrated when render_on_promotion
        is set.
        """
        if announcement_id in self._active:
            del self._active[announcement_id]
            self._auto_clear.cancel(announcement_id)
            self._render.cancel(announcement_id)
            self._promote_queue_head()
            return True

        for queued in self._queue:
            if queued.id == announcement_id:
                self._queue.remove(queued)
                return True
        return False

    def _promote_queue_head(self) -> None:
        if not self._queue or len(self._active) >= self.config.max_concurrent_announcements:
            return

        announcement = self._queue.popleft()
        self._activate(announcement)
        logger.debug(f"Announcement {announcement.id} promoted from queue")
        if self.render_on_promotion:
            self._render_announcement(announcement)
            self._notify(announcement)

    def clear_announcements(self, participant_id: Optional[str] = None) -> None:
        """Clear all (or one participant's) active and queued announcements"""
        if participant_id is None:
            removed = list(self._active)
            self._active.clear()
            self._queue.clear()
        else:
            removed = [aid for aid, a in self._active.items() if a.participant_id == participant_id]
            for aid in removed:
                del self._active[aid]
            self._queue = deque(a for a in self._queue if a.participant_id != participant_id)

        for aid in removed:
            self._auto_clear.cancel(aid)
            self._render.cancel(aid)
        for channel in self._channels.values():
            channel.set_text("")

    def pause(self) -> None:
        self._paused = True

    def resume(self) -> None:
        self._paused = False

    def is_paused(self) -> bool:
        return self._paused

    # Configuration

    def update_config(self, partial: Mapping[str, Any]) -> bool:
        try:
            self.config = AnnouncementConfig.model_validate({**self.config.model_dump(), **dict(partial)})
        except ValidationError as e:
            logger.warning(f"Announcement config update validation failed: {e}")
            return False
        return True

    def get_config(self) -> AnnouncementConfig:
        return self.config

    # Queries

    def get_active_announcements(self, participant_id: Optional[str] = None) -> List[Announcement]:
        announcements = list(self._active.values())
        if participant_id:
            return [a for a in announcements if a.participant_id == participant_id]
        return announcements

    def get_queued_announcements(self) -> List[Announcement]:
        return list(self._queue)

    def get_queue_length(self) -> int:
        return len(self._queue)

    def get_pending_count(self) -> int:
        """Announcements still inside their debounce window"""
        return len(self._debounce)

    def is_announcement_active(self, announcement_id: str) -> bool:
        return announcement_id in self._active

    def get_channel(self, priority: Union[AnnouncementPriority, str]) -> Optional[NarrationChannel]:
        return self._channels.get(AnnouncementPriority(priority))

    def get_channel_text(self, priority: Union[AnnouncementPriority, str]) -> str:
        channel = self.get_channel(priority)
        return channel.text if channel is not None else ""
