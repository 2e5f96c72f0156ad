"""
Tests for the announcement coordinator and participant announcer
"""

from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from surfacecoord.announcements.announcement_coordinator import AnnouncementCoordinator
from surfacecoord.announcements.announcement_models import (
    Announcement,
    AnnouncementCategory,
    AnnouncementConfig,
    AnnouncementPriority
)
from surfacecoord.announcements.participant_messages import ParticipantAnnouncer, tree_level_message
from surfacecoord.registry.registry_models import ParticipantCategory

DEBOUNCE_AND_RENDER_MS = 110


class TestAnnouncementModels:
    """Test announcement validation"""

    def test_message_is_trimmed(self):
        announcement = Announcement(id="a", message="  Saved  ", timestamp=0)

        assert announcement.message == "Saved"
        assert announcement.debounce_key == "Saved-global"

    def test_blank_message_rejected(self):
        with pytest.raises(ValidationError):
            Announcement(id="a", message="   ", timestamp=0)

    @pytest.mark.parametrize("field,value", [
        ("max_concurrent_announcements", 0),
        ("max_concurrent_announcements", 6),
        ("debounce_delay_ms", 1001),
        ("verbosity_level", "chatty"),
    ])
    def test_config_bounds(self, field, value):
        with pytest.raises(ValidationError):
            AnnouncementConfig(**{field: value})


class TestDebounce:
    """Test debounce coalescing"""

    def test_rapid_duplicates_narrate_once(self, announcements, scheduler, channels):
        for _ in range(5):
            announcements.announce("Saved", duration=2000)
            scheduler.advance(10)

        scheduler.advance(100)

        assert channels["polite"].narrations() == ["Saved"]
        assert channels["polite"].writes == ["", "Saved"]
        assert len(announcements.get_active_announcements()) == 1

    def test_distinct_participants_are_not_coalesced(self, announcements, scheduler, channels):
        announcements.announce("Saved", participant_id="a")
        announcements.announce("Saved", participant_id="b")

        assert announcements.get_pending_count() == 2

        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        assert len(announcements.get_active_announcements()) == 2

    def test_latest_options_win(self, announcements, scheduler):
        first_id = announcements.announce("Saved")
        last_id = announcements.announce("Saved", category="success")

        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        assert announcements.is_announcement_active(first_id) is False
        assert announcements.is_announcement_active(last_id) is True
        assert announcements.get_active_announcements()[0].category == AnnouncementCategory.SUCCESS

    def test_nothing_narrated_before_debounce(self, announcements, scheduler, channels):
        announcements.announce("Saved")
        scheduler.advance(99)

        assert channels["polite"].writes == []


class TestAnnounce:
    """Test announce paths"""

    def test_blank_and_paused_return_empty(self, announcements):
        assert announcements.announce("   ") == ""

        announcements.pause()
        assert announcements.is_paused() is True
        assert announcements.announce("Saved") == ""

        announcements.resume()
        assert announcements.announce("Saved").startswith("announcement-")

    def test_invalid_options_return_empty(self, announcements):
        assert announcements.announce("Saved", priority="shouting") == ""
        assert announcements.announce("Saved", duration=-1) == ""

    def test_assertive_tier_uses_assertive_channel(self, announcements, scheduler, channels):
        announcements.announce_error("Upload failed")
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        assert channels["assertive"].text == "Upload failed"
        assert channels["polite"].writes == []
        assert announcements.get_active_announcements()[0].persistent is True

    def test_render_blanks_then_sets(self, announcements, scheduler, channels):
        announcements.announce("Saved")
        scheduler.advance(100)

        assert announcements.get_channel_text("polite") == ""

        scheduler.advance(10)

        assert announcements.get_channel_text(AnnouncementPriority.POLITE) == "Saved"

    def test_on_announcement_hook(self, scheduler, narration_factory):
        hook = Mock()
        coordinator = AnnouncementCoordinator(
            scheduler=scheduler, narration_factory=narration_factory, on_announcement=hook
        )
        coordinator.start()

        coordinator.announce("Saved")
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        hook.assert_called_once()
        assert hook.call_args[0][0].message == "Saved"

    def test_success_auto_clears(self, announcements, scheduler):
        announcement_id = announcements.announce_success("Done")
        scheduler.advance(100)
        assert announcements.is_announcement_active(announcement_id) is True

        scheduler.advance(3000)
        assert announcements.is_announcement_active(announcement_id) is False

    def test_progress_respects_config(self, announcements):
        assert announcements.announce_progress("50%") != ""

        assert announcements.update_config({"enable_progress_announcements": False}) is True
        assert announcements.announce_progress("60%") == ""

    def test_invalid_config_update_rejected(self, announcements):
        assert announcements.update_config({"max_concurrent_announcements": 10}) is False
        assert announcements.get_config().max_concurrent_announcements == 2


class TestCapacity:
    """Test capacity queue and promotion"""

    def fill(self, announcements, scheduler, *messages):
        ids = [announcements.announce(message) for message in messages]
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)
        return ids

    def test_third_announcement_is_queued(self, announcements, scheduler, channels):
        self.fill(announcements, scheduler, "one", "two", "three")

        assert len(announcements.get_active_announcements()) == 2
        assert announcements.get_queue_length() == 1
        assert "three" not in channels["polite"].narrations()

    def test_clear_promotes_queue_head_without_narration(self, announcements, scheduler, channels):
        first, _, third = self.fill(announcements, scheduler, "one", "two", "three")

        assert announcements.clear_announcement_by_id(first) is True
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        assert announcements.is_announcement_active(third) is True
        assert announcements.get_queue_length() == 0
        assert "three" not in channels["polite"].narrations()

    def test_clear_within_render_delay_is_never_narrated(self, announcements, scheduler, channels):
        announcement_id = announcements.announce("Hello")
        scheduler.advance(100)

        assert announcements.clear_announcement_by_id(announcement_id) is True
        scheduler.advance(20)

        assert channels["polite"].text == ""
        assert "Hello" not in channels["polite"].narrations()

    def test_promotion_narrates_when_enabled(self, scheduler, narration_factory, channels):
        coordinator = AnnouncementCoordinator(
            scheduler=scheduler, narration_factory=narration_factory, render_on_promotion=True
        )
        coordinator.start()
        first, _, _ = self.fill(coordinator, scheduler, "one", "two", "three")

        coordinator.clear_announcement_by_id(first)
        scheduler.advance(10)

        assert channels["polite"].text == "three"

    def test_clear_queued_and_unknown(self, announcements, scheduler):
        _, _, third = self.fill(announcements, scheduler, "one", "two", "three")

        assert announcements.clear_announcement_by_id(third) is True
        assert announcements.clear_announcement_by_id(third) is False

    def test_clear_for_participant(self, announcements, scheduler, channels):
        announcements.announce("mine", participant_id="a")
        announcements.announce("theirs", participant_id="b")
        announcements.announce("queued", participant_id="a")
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        announcements.clear_announcements("a")

        assert [a.message for a in announcements.get_active_announcements()] == ["theirs"]
        assert announcements.get_queue_length() == 0
        assert channels["polite"].text == ""

    def test_clear_all(self, announcements, scheduler):
        self.fill(announcements, scheduler, "one", "two", "three")

        announcements.clear_announcements()

        assert announcements.get_active_announcements() == []
        assert announcements.get_queue_length() == 0


class TestLifecycle:
    """Test channel lifecycle"""

    def test_start_creates_both_channels(self, announcements, channels):
        assert announcements.started is True
        assert set(channels) == {"polite", "assertive"}

    def test_dispose_closes_channels_and_cancels_timers(self, announcements, scheduler, channels):
        announcements.announce("Saved")
        announcements.dispose()
        scheduler.advance(1000)

        assert channels["polite"].closed is True
        assert channels["polite"].writes == []
        assert scheduler.pending_count() == 0
        assert announcements.started is False


class TestParticipantAnnouncer:
    """Test category wording"""

    def test_opened_uses_category_message(self, announcements, scheduler, channels):
        announcer = ParticipantAnnouncer(announcements, "ctx", ParticipantCategory.CONTEXT)

        announcer.announce_opened()
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        assert channels["polite"].text == "Context menu opened"
        assert announcer.get_active_count() == 1

    def test_missing_wording_falls_back(self, announcements, scheduler, channels):
        announcer = ParticipantAnnouncer(announcements, "tree", "tree")

        announcer.announce_opened()
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        assert channels["polite"].text == "tree menu opened"

    def test_item_selected_includes_text(self, announcements, scheduler, channels):
        announcer = ParticipantAnnouncer(announcements, "dd", ParticipantCategory.DROPDOWN)

        announcer.announce_item_selected("Copy")
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        assert channels["polite"].text == "Option selected: Copy"

    def test_navigation_change(self, announcements, scheduler, channels):
        announcer = ParticipantAnnouncer(announcements, "nav", ParticipantCategory.NAVIGATION)

        with pytest.raises(ValueError):
            announcer.announce_navigation_change("sideways")

        announcer.announce_navigation_change("next")
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)
        assert channels["polite"].text == "Moved to next item"

        announcements.update_config({"enable_spatial_announcements": False})
        assert announcer.announce_navigation_change("last") == ""

    def test_minimal_verbosity_skips_navigation_change(self, announcements, scheduler, channels):
        announcer = ParticipantAnnouncer(announcements, "nav", ParticipantCategory.NAVIGATION)

        assert announcements.update_config({"verbosity_level": "minimal"}) is True
        assert announcer.announce_navigation_change("next") == ""
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        assert channels["polite"].narrations() == []

        announcements.update_config({"verbosity_level": "verbose"})
        assert announcer.announce_navigation_change("next") != ""

    def test_clear_all_only_touches_own_announcements(self, announcements, scheduler):
        mine = ParticipantAnnouncer(announcements, "a", ParticipantCategory.SIDEBAR)
        theirs = ParticipantAnnouncer(announcements, "b", ParticipantCategory.SIDEBAR)
        mine.announce("first")
        theirs.announce("second")
        scheduler.advance(DEBOUNCE_AND_RENDER_MS)

        mine.clear_all()

        assert mine.get_active_count() == 0
        assert theirs.get_active_count() == 1

    def test_tree_level_message(self):
        assert tree_level_message(3) == "Tree level 3"
