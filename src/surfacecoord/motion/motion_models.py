"""
Motion Budget Models
Animation requests, active animations and the motion budget
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MotionType(str, Enum):
    ENTER = "enter"
    EXIT = "exit"
    MOVE = "move"
    SCALE = "scale"
    FADE = "fade"
    SLIDE = "slide"
    BOUNCE = "bounce"


class DurationClass(str, Enum):
    INSTANT = "instant"
    FAST = "fast"
    STANDARD = "standard"
    SLOW = "slow"
    CUSTOM = "custom"


class TrustLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PerformanceMode(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MotionLevel(str, Enum):
    NONE = "none"
    REDUCED = "reduced"
    FULL = "full"


DURATION_MS: Dict[DurationClass, int] = {
    DurationClass.INSTANT: 0,
    DurationClass.FAST: 150,
    DurationClass.STANDARD: 300,
    DurationClass.SLOW: 500,
}

MOTION_TYPE_MULTIPLIER: Dict[MotionType, float] = {
    MotionType.FADE: 1.0,
    MotionType.SLIDE: 1.5,
    MotionType.MOVE: 1.5,
    MotionType.SCALE: 2.0,
    MotionType.BOUNCE: 3.0,
    MotionType.ENTER: 1.2,
    MotionType.EXIT: 1.0,
}

MAX_CUSTOM_DURATION_MS = 2000
BASE_MOTION_LOAD = 2
MAX_ANIMATION_WEIGHT = 10


class AnimationRequest(BaseModel):
    """Request to run one animation for a participant"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    participant_id: str = Field(min_length=1)
    motion_type: MotionType
    duration_class: DurationClass = DurationClass.STANDARD
    custom_duration_ms: Optional[float] = None
    priority: int = Field(default=5, ge=1, le=10)
    cognitive_load: int = Field(default=1, ge=1, le=10)
    trust_level: TrustLevel = TrustLevel.MEDIUM
    reducible: bool = True
    on_start: Optional[Callable[..., Any]] = None
    on_complete: Optional[Callable[..., Any]] = None
    timestamp: float = Field(ge=0)

    @field_validator('custom_duration_ms', mode='before')
    @classmethod
    def clamp_custom_duration(cls, v):
        if v is None:
            return v
        return min(max(float(v), 0.0), float(MAX_CUSTOM_DURATION_MS))


def estimate_duration_ms(request: AnimationRequest) -> float:
    """Duration of a request; a custom class without a value counts as standard"""
    if request.duration_class == DurationClass.CUSTOM:
        if request.custom_duration_ms is None:
            return DURATION_MS[DurationClass.STANDARD]
        return request.custom_duration_ms
    return DURATION_MS[request.duration_class]


def calculate_motion_weight(motion_type: MotionType, duration_ms: float, priority: int) -> int:
    """
    Cognitive weight charged against the motion budget

    Args:
        motion_type: Kind of motion
        duration_ms: Estimated duration
        priority: Request priority (1 = highest)

    Returns:
        Weight rounded half-up and clamped to 0..10
    """
    load = BASE_MOTION_LOAD * MOTION_TYPE_MULTIPLIER[MotionType(motion_type)]

    if duration_ms > 400:
        load += 2
    elif duration_ms > 200:
        load += 1

    load += max(0, 5 - priority) * 0.5

    return min(max(math.floor(load + 0.5), 0), MAX_ANIMATION_WEIGHT)


@dataclass
class ActiveAnimation:
    """An admitted animation and what it was charged"""
    request: AnimationRequest
    start_time: float
    estimated_end_time: float
    weight: int
    cleanup: Optional[Callable[[], None]] = None

    @property
    def participant_id(self) -> str:
        return self.request.participant_id


class MotionBudget(BaseModel):
    """Motion budget configuration"""
    model_config = ConfigDict(frozen=True)

    max_concurrent_animations: int = Field(default=3, ge=1, le=5)
    max_total_cognitive_load: int = Field(default=15, ge=5, le=20)
    performance_budget_ms: float = Field(default=16.67, ge=8.33, le=33.33)
    enable_gpu_acceleration: bool = True
    respect_reduced_motion: bool = True
