"""
Motion budget coordination
"""

from .motion_models import (
    MotionType,
    DurationClass,
    TrustLevel,
    PerformanceMode,
    MotionLevel,
    DURATION_MS,
    MOTION_TYPE_MULTIPLIER,
    AnimationRequest,
    ActiveAnimation,
    MotionBudget,
    estimate_duration_ms,
    calculate_motion_weight
)
from .reduction import (
    MotionReductionStrategy,
    AdvisoryReductionStrategy,
    NoReductionStrategy
)
from .motion_coordinator import MotionCoordinator

__all__ = [
    "MotionType",
    "DurationClass",
    "TrustLevel",
    "PerformanceMode",
    "MotionLevel",
    "DURATION_MS",
    "MOTION_TYPE_MULTIPLIER",
    "AnimationRequest",
    "ActiveAnimation",
    "MotionBudget",
    "estimate_duration_ms",
    "calculate_motion_weight",
    "MotionReductionStrategy",
    "AdvisoryReductionStrategy",
    "NoReductionStrategy",
    "MotionCoordinator"
]
