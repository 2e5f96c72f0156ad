"""
Attention & Budget Registry
Tracks registered participants, the cognitive-load budget, the single attention
owner and the focus stack. Capacity outcomes are return values, never exceptions.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from .registry_models import CoordinationState, ParticipantRegistration

logger = logging.getLogger(__name__)

DEFAULT_MAX_COGNITIVE_LOAD = 15

LoadExceededHook = Callable[[int, int], None]
AttentionChangeHook = Callable[[Optional[str]], None]
# Extension point: called with (preempted_id, new_owner_id). Unset by default,
# in which case a preempted owner is dropped silently.
AttentionPreemptionHook = Callable[[str, str], None]
ParticipantHook = Callable[[ParticipantRegistration], None]


class AttentionRegistry:
    """Owner of participant registrations, attention and the focus stack"""

    def __init__(
        self,
        max_cognitive_load: int = DEFAULT_MAX_COGNITIVE_LOAD,
        on_load_exceeded: Optional[LoadExceededHook] = None,
        on_attention_change: Optional[AttentionChangeHook] = None,
        on_attention_preempted: Optional[AttentionPreemptionHook] = None,
        on_menu_registered: Optional[ParticipantHook] = None,
        on_menu_unregistered: Optional[ParticipantHook] = None,
    ):
        if max_cognitive_load < 1:
            raise ValueError(f"max_cognitive_load must be positive, got {max_cognitive_load}")

        self._participants: Dict[str, ParticipantRegistration] = {}
        self._focus_stack: List[str] = []
        self._attention_owner: Optional[str] = None
        self._budget = max_cognitive_load
        self._current_load = 0

        self.on_load_exceeded = on_load_exceeded
        self.on_attention_change = on_attention_change
        self.on_attention_preempted = on_attention_preempted
        self.on_menu_registered = on_menu_registered
        self.on_menu_unregistered = on_menu_unregistered

        logger.info(f"AttentionRegistry initialized (budget={max_cognitive_load})")

    # Registration

    def register_menu(
        self,
        registration: Union[ParticipantRegistration, Mapping[str, Any]]
    ) -> bool:
        """
        Register a participant against the cognitive-load budget

        Args:
            registration: Registration model or mapping with id, category, cognitive_load

        Returns:
            True if registered, False if malformed or over budget
        """
        try:
            if not isinstance(registration, ParticipantRegistration):
                registration = ParticipantRegistration.model_validate(registration)
        except ValidationError as e:
            logger.warning(f"Participant registration rejected: {e.error_count()} validation error(s): {e}")
            return False

        previous = self._participants.get(registration.id)
        previous_load = previous.cognitive_load if previous else 0
        new_total = self._current_load - previous_load + registration.cognitive_load

        if new_total > self._budget:
            logger.warning(
                f"Cognitive load budget exceeded registering {registration.id}: "
                f"{new_total} > {self._budget}"
            )
            self._notify(self.on_load_exceeded, new_total, self._budget)
            return False

        self._participants[registration.id] = registration
        self._current_load = new_total

        logger.debug(
            f"Registered {registration.id} ({registration.category.value}, "
            f"priority={registration.priority}, load={registration.cognitive_load}); "
            f"total load {self._current_load}/{self._budget}"
        )
        self._notify(self.on_menu_registered, registration)
        return True

    def unregister_menu(self, participant_id: str) -> bool:
        """Remove a participant, refunding its load and releasing its slots"""
        registration = self._participants.pop(participant_id, None)
        if registration is None:
            return False

        self._current_load -= registration.cognitive_load
        self._focus_stack = [entry for entry in self._focus_stack if entry != participant_id]

        if self._attention_owner == participant_id:
            self._set_attention_owner(None)

        logger.debug(f"Unregistered {participant_id}; total load {self._current_load}/{self._budget}")
        self._notify(self.on_menu_unregistered, registration)
        return True

    def is_menu_active(self, participant_id: str) -> bool:
        return participant_id in self._participants

    def get_registration(self, participant_id: str) -> Optional[ParticipantRegistration]:
        return self._participants.get(participant_id)

    def list_participants(self) -> List[ParticipantRegistration]:
        """Registered participants ordered by priority, then id"""
        return sorted(self._participants.values(), key=lambda r: (r.priority, r.id))

    # Attention

    def request_attention(self, participant_id: str) -> bool:
        """
        Request exclusive attention ownership

        A strictly higher-priority (lower-numbered) requester preempts the
        current owner; anything else is denied while an owner exists.

        Args:
            participant_id: Requesting participant

        Returns:
            True if the requester owns attention afterwards
        """
        requester = self._participants.get(participant_id)
        if requester is None:
            logger.warning(f"Attention requested by unregistered participant {participant_id}")
            return False

        owner_id = self._attention_owner
        if owner_id is None:
            self._set_attention_owner(participant_id)
            return True

        if owner_id == participant_id:
            return True

        owner = self._participants[owner_id]
        if requester.priority < owner.priority:
            logger.debug(
                f"{participant_id} (priority {requester.priority}) preempts "
                f"{owner_id} (priority {owner.priority})"
            )
            self._set_attention_owner(participant_id)
            self._notify(self.on_attention_preempted, owner_id, participant_id)
            return True

        logger.debug(f"Attention denied to {participant_id}; held by {owner_id}")
        return False

    def release_attention(self, participant_id: str) -> None:
        """Release attention; no-op unless participant_id is the owner"""
        if self._attention_owner == participant_id:
            self._set_attention_owner(None)

    def has_attention(self, participant_id: str) -> bool:
        return self._attention_owner is not None and self._attention_owner == participant_id

    def get_attention_owner(self) -> Optional[str]:
        return self._attention_owner

    def _set_attention_owner(self, participant_id: Optional[str]) -> None:
        self._attention_owner = participant_id
        self._notify(self.on_attention_change, participant_id)

    # Focus stack

    def push_focus(self, participant_id: str) -> None:
        self._focus_stack.append(participant_id)

    def pop_focus(self) -> Optional[str]:
        """Pop the most recent focus entry; None when the stack is empty"""
        if not self._focus_stack:
            return None
        return self._focus_stack.pop()

    def peek_focus(self) -> Optional[str]:
        return self._focus_stack[-1] if self._focus_stack else None

    def get_focus_stack(self) -> List[str]:
        return list(self._focus_stack)

    # Budget

    def get_cognitive_load(self) -> int:
        return self._current_load

    def get_budget(self) -> int:
        return self._budget

    def update_budget(self, max_cognitive_load: int) -> bool:
        """
        Change the budget for future registrations

        Lowering the budget below the current load does not evict anyone.
        """
        if max_cognitive_load < 1:
            logger.warning(f"Ignoring invalid cognitive load budget: {max_cognitive_load}")
            return False
        self._budget = max_cognitive_load
        logger.info(f"Cognitive load budget set to {max_cognitive_load} (current load {self._current_load})")
        return True

    def get_state(self) -> CoordinationState:
        """Snapshot of the registry"""
        return CoordinationState(
            participants=dict(self._participants),
            focus_stack=list(self._focus_stack),
            attention_owner=self._attention_owner,
            budget=self._budget,
            current_load=self._current_load,
        )

    def clear(self) -> None:
        """Drop every registration and slot (used on teardown)"""
        self._participants.clear()
        self._focus_stack.clear()
        self._attention_owner = None
        self._current_load = 0

    @staticmethod
    def _notify(hook: Optional[Callable[..., None]], *args: Any) -> None:
        if hook is None:
            return
        try:
            hook(*args)
        except Exception as e:
            logger.error(f"Registry hook failed: {e}")
