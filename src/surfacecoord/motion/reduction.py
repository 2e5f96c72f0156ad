"""
Motion reduction strategies
A strategy reports how much headroom could be freed by reducing active
animations when a new request does not fit the budget.
"""

from typing import Iterable, Protocol

from .motion_models import ActiveAnimation, AnimationRequest


class MotionReductionStrategy(Protocol):
    """Extension point consulted on every over-budget admission"""

    def advisory_headroom(
        self,
        request: AnimationRequest,
        active: Iterable[ActiveAnimation]
    ) -> int:
        ...


class AdvisoryReductionStrategy:
    """
    Counts reducible active animations of lower priority than the request

    Nothing is actually reduced; each candidate is credited one unit of
    headroom for the admission decision only.
    """

    def advisory_headroom(
        self,
        request: AnimationRequest,
        active: Iterable[ActiveAnimation]
    ) -> int:
        return sum(
            1 for animation in active
            if animation.request.priority > request.priority and animation.request.reducible
        )


class NoReductionStrategy:
    """Never credits headroom; admission is decided on the raw budget"""

    def advisory_headroom(
        self,
        request: AnimationRequest,
        active: Iterable[ActiveAnimation]
    ) -> int:
        return 0
