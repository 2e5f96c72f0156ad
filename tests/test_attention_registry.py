"""
Tests for the attention and budget registry
"""

from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from surfacecoord.registry.attention_registry import AttentionRegistry
from surfacecoord.registry.registry_models import (
    ParticipantCategory,
    ParticipantRegistration,
    priority_for_category
)


def reg(participant_id, category="dropdown", load=2):
    return {"id": participant_id, "category": category, "cognitive_load": load}


class TestParticipantRegistration:
    """Test registration model"""

    def test_priority_derived_from_category(self):
        registration = ParticipantRegistration(id="ctx", category="context", cognitive_load=3)

        assert registration.priority == 1
        assert priority_for_category(ParticipantCategory.BREADCRUMB) == 10
        assert priority_for_category(ParticipantCategory.SIDEBAR) == 5

    @pytest.mark.parametrize("data", [
        {"id": "", "category": "tree", "cognitive_load": 1},
        {"id": "   ", "category": "tree", "cognitive_load": 1},
        {"id": "x", "category": "popover", "cognitive_load": 1},
        {"id": "x", "category": "tree", "cognitive_load": 0},
        {"id": "x", "category": "tree", "cognitive_load": 11},
    ])
    def test_invalid_shapes_rejected(self, data):
        with pytest.raises(ValidationError):
            ParticipantRegistration(**data)


class TestRegistration:
    """Test budget admission"""

    def test_budget_denial_fires_load_exceeded(self):
        on_load_exceeded = Mock()
        registry = AttentionRegistry(max_cognitive_load=10, on_load_exceeded=on_load_exceeded)

        assert registry.register_menu(reg("A", load=6)) is True
        assert registry.get_cognitive_load() == 6

        assert registry.register_menu(reg("B", load=6)) is False
        on_load_exceeded.assert_called_once_with(12, 10)
        assert registry.get_cognitive_load() == 6
        assert registry.is_menu_active("B") is False

    def test_exact_budget_is_admitted(self):
        registry = AttentionRegistry(max_cognitive_load=10)

        assert registry.register_menu(reg("A", load=4)) is True
        assert registry.register_menu(reg("B", load=6)) is True
        assert registry.get_cognitive_load() == 10

    def test_invalid_registration_returns_false(self, registry):
        assert registry.register_menu({"id": "x", "category": "tree", "cognitive_load": 42}) is False
        assert registry.register_menu({"category": "tree"}) is False
        assert registry.get_cognitive_load() == 0

    def test_reregistration_charges_only_delta(self):
        registry = AttentionRegistry(max_cognitive_load=10)
        registry.register_menu(reg("A", load=6))

        assert registry.register_menu(reg("A", category="tree", load=8)) is True
        assert registry.get_cognitive_load() == 8
        assert registry.get_registration("A").category == ParticipantCategory.TREE

        assert registry.register_menu(reg("A", load=11 - 1)) is True
        assert registry.register_menu(reg("B", load=1)) is False

    def test_load_equals_sum_of_registered_weights(self):
        registry = AttentionRegistry(max_cognitive_load=20)
        operations = [
            ("register", "a", 3), ("register", "b", 5), ("unregister", "a", 0),
            ("register", "c", 7), ("register", "b", 2), ("unregister", "missing", 0),
            ("register", "d", 10), ("unregister", "c", 0), ("register", "e", 4),
        ]

        for op, pid, load in operations:
            if op == "register":
                registry.register_menu(reg(pid, load=load))
            else:
                registry.unregister_menu(pid)
            state = registry.get_state()
            assert state.current_load == sum(r.cognitive_load for r in state.participants.values())

    def test_unregister_unknown_is_noop(self, registry):
        on_unregistered = Mock()
        registry.on_menu_unregistered = on_unregistered

        assert registry.unregister_menu("ghost") is False
        on_unregistered.assert_not_called()

    def test_registration_hooks(self):
        registered, unregistered = Mock(), Mock()
        registry = AttentionRegistry(on_menu_registered=registered, on_menu_unregistered=unregistered)

        registry.register_menu(reg("A"))
        registry.unregister_menu("A")

        assert registered.call_args[0][0].id == "A"
        assert unregistered.call_args[0][0].id == "A"

    def test_failing_hook_does_not_break_registration(self):
        registry = AttentionRegistry(on_menu_registered=Mock(side_effect=RuntimeError("boom")))

        assert registry.register_menu(reg("A")) is True
        assert registry.is_menu_active("A") is True

    def test_update_budget(self, registry):
        assert registry.update_budget(4) is True
        assert registry.get_budget() == 4
        assert registry.update_budget(0) is False
        assert registry.get_budget() == 4


class TestAttention:
    """Test attention ownership and preemption"""

    def test_preemption_sequence(self, registry):
        registry.register_menu(reg("ctx", category="context"))
        registry.register_menu(reg("nav", category="navigation"))

        assert registry.request_attention("nav") is True
        assert registry.request_attention("ctx") is True
        assert registry.has_attention("ctx") is True
        assert registry.has_attention("nav") is False
        assert registry.request_attention("nav") is False

    def test_equal_priority_is_denied(self, registry):
        registry.register_menu(reg("d1"))
        registry.register_menu(reg("d2"))

        assert registry.request_attention("d1") is True
        assert registry.request_attention("d2") is False
        assert registry.get_attention_owner() == "d1"

    def test_unregistered_requester_denied(self, registry):
        assert registry.request_attention("ghost") is False
        assert registry.get_attention_owner() is None

    def test_owner_request_is_idempotent(self, registry):
        on_change = Mock()
        registry.on_attention_change = on_change
        registry.register_menu(reg("d1"))

        assert registry.request_attention("d1") is True
        assert registry.request_attention("d1") is True
        on_change.assert_called_once_with("d1")

    def test_preemption_hook_is_optional(self, registry):
        registry.register_menu(reg("ctx", category="context"))
        registry.register_menu(reg("tree", category="tree"))
        registry.request_attention("tree")

        assert registry.request_attention("ctx") is True

        preempted = Mock()
        registry.on_attention_preempted = preempted
        registry.release_attention("ctx")
        registry.request_attention("tree")
        registry.request_attention("ctx")
        preempted.assert_called_once_with("tree", "ctx")

    def test_release_by_non_owner_is_noop(self, registry):
        registry.register_menu(reg("a"))
        registry.register_menu(reg("b"))
        registry.request_attention("a")

        registry.release_attention("b")
        assert registry.get_attention_owner() == "a"

        registry.release_attention("a")
        assert registry.get_attention_owner() is None

    def test_unregister_owner_clears_attention(self, registry):
        on_change = Mock()
        registry.on_attention_change = on_change
        registry.register_menu(reg("a"))
        registry.request_attention("a")

        registry.unregister_menu("a")

        assert registry.get_attention_owner() is None
        on_change.assert_called_with(None)

    def test_unregister_hook_sees_attention_released(self, registry):
        seen = []
        registry.on_menu_unregistered = lambda registration: seen.append(
            (registration.id, registry.get_attention_owner())
        )
        registry.register_menu(reg("a"))
        registry.request_attention("a")

        registry.unregister_menu("a")

        assert seen == [("a", None)]

    def test_owner_is_always_registered(self, registry):
        registry.register_menu(reg("ctx", category="context"))
        registry.register_menu(reg("side", category="sidebar"))
        for step in ["side", "ctx", "side", "unregister:ctx", "side", "unregister:side"]:
            if step.startswith("unregister:"):
                registry.unregister_menu(step.split(":")[1])
            else:
                registry.request_attention(step)
            owner = registry.get_attention_owner()
            assert owner is None or registry.is_menu_active(owner)


class TestFocusStack:
    """Test focus stack"""

    def test_pop_on_empty_returns_none(self, registry):
        assert registry.pop_focus() is None
        assert registry.peek_focus() is None

    def test_lifo_order_and_unregistered_entries(self, registry):
        registry.push_focus("not-registered")
        registry.push_focus("b")

        assert registry.get_focus_stack() == ["not-registered", "b"]
        assert registry.pop_focus() == "b"
        assert registry.pop_focus() == "not-registered"

    def test_unregister_drops_focus_entries(self, registry):
        registry.register_menu(reg("a"))
        registry.push_focus("a")
        registry.push_focus("other")
        registry.push_focus("a")

        registry.unregister_menu("a")

        assert registry.get_focus_stack() == ["other"]
