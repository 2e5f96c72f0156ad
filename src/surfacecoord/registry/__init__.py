"""
Attention & budget registry
"""

from .registry_models import (
    ParticipantCategory,
    CATEGORY_PRIORITY,
    priority_for_category,
    ParticipantRegistration,
    CoordinationState
)
from .attention_registry import (
    DEFAULT_MAX_COGNITIVE_LOAD,
    AttentionPreemptionHook,
    AttentionRegistry
)

__all__ = [
    "ParticipantCategory",
    "CATEGORY_PRIORITY",
    "priority_for_category",
    "ParticipantRegistration",
    "CoordinationState",
    "DEFAULT_MAX_COGNITIVE_LOAD",
    "AttentionPreemptionHook",
    "AttentionRegistry"
]
