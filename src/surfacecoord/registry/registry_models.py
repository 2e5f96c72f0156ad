"""
Participant Registry Models
Pydantic v2 models for participant registration and coordination state
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class ParticipantCategory(str, Enum):
    """Kinds of UI surfaces that compete for shared resources"""
    CONTEXT = "context"
    NAVIGATION = "navigation"
    DROPDOWN = "dropdown"
    TREE = "tree"
    SIDEBAR = "sidebar"
    BREADCRUMB = "breadcrumb"


# Fixed priority per category (1 = highest)
CATEGORY_PRIORITY: Dict[ParticipantCategory, int] = {
    ParticipantCategory.CONTEXT: 1,
    ParticipantCategory.NAVIGATION: 2,
    ParticipantCategory.DROPDOWN: 3,
    ParticipantCategory.TREE: 4,
    ParticipantCategory.SIDEBAR: 5,
    ParticipantCategory.BREADCRUMB: 10,
}


def priority_for_category(category: ParticipantCategory) -> int:
    """Priority derived from a participant category"""
    return CATEGORY_PRIORITY[ParticipantCategory(category)]


class ParticipantRegistration(BaseModel):
    """Registration of a participant with the attention registry"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    category: ParticipantCategory
    cognitive_load: int = Field(ge=1, le=10)

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        if not v.strip():
            raise ValueError("Participant id must not be blank")
        return v

    @computed_field
    @property
    def priority(self) -> int:
        return CATEGORY_PRIORITY[self.category]


class CoordinationState(BaseModel):
    """Point-in-time snapshot of the registry"""
    model_config = ConfigDict(frozen=True)

    participants: Dict[str, ParticipantRegistration] = Field(default_factory=dict)
    focus_stack: List[str] = Field(default_factory=list)
    attention_owner: Optional[str] = None
    budget: int
    current_load: int
