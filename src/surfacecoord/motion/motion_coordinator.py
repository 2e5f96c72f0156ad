"""
Motion Budget Coordinator
Admission control for animations: every admitted animation is charged a
cognitive weight against a shared budget, requests that do not fit wait in a
FIFO queue, and completions or cancellations drain that queue from the head.
"""

import logging
import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from surfacecoord.exceptions import MissingCollaboratorError
from surfacecoord.registry.attention_registry import AttentionRegistry
from surfacecoord.scheduling.timer_scheduler import AsyncioTimerScheduler, KeyedTimers, TimerScheduler

from .motion_models import (
    ActiveAnimation,
    AnimationRequest,
    MotionBudget,
    MotionLevel,
    MotionType,
    PerformanceMode,
    calculate_motion_weight,
    estimate_duration_ms
)
from .reduction import AdvisoryReductionStrategy, MotionReductionStrategy

logger = logging.getLogger(__name__)

REDUCED_MOTION_LOAD_RATIO = 0.8

AnimationHook = Callable[[AnimationRequest], None]
BudgetExceededHook = Callable[[int, int], None]


class MotionCoordinator:
    """Shared motion budget arbiter for all participants"""

    def __init__(
        self,
        registry: Optional[AttentionRegistry] = None,
        scheduler: Optional[TimerScheduler] = None,
        budget: Optional[Union[MotionBudget, Mapping[str, Any]]] = None,
        reduction_strategy: Optional[MotionReductionStrategy] = None,
        on_animation_start: Optional[AnimationHook] = None,
        on_animation_complete: Optional[AnimationHook] = None,
        on_budget_exceeded: Optional[BudgetExceededHook] = None,
        require_registered: bool = True,
        performance_mode: PerformanceMode = PerformanceMode.HIGH,
        prefers_reduced_motion: bool = False
    ):
        if require_registered and registry is None:
            raise MissingCollaboratorError("MotionCoordinator", "registry")

        if budget is None:
            budget = MotionBudget()
        elif not isinstance(budget, MotionBudget):
            budget = MotionBudget.model_validate(budget)

        self.registry = registry
        self.scheduler = scheduler or AsyncioTimerScheduler()
        self.budget = budget
        self.reduction_strategy = reduction_strategy or AdvisoryReductionStrategy()
        self.require_registered = require_registered
        self.on_animation_start = on_animation_start
        self.on_animation_complete = on_animation_complete
        self.on_budget_exceeded = on_budget_exceeded

        self._active: Dict[str, ActiveAnimation] = {}
        self._queue: Deque[AnimationRequest] = deque()
        self._current_load = 0
        self._motion_priority_owner: Optional[str] = None
        self._performance_mode = PerformanceMode(performance_mode)
        self._prefers_reduced_motion = prefers_reduced_motion
        self._paused = False
        self._completions = KeyedTimers(self.scheduler, name="motion-complete")

        logger.info(
            f"MotionCoordinator initialized (max_concurrent={budget.max_concurrent_animations}, "
            f"max_load={budget.max_total_cognitive_load})"
        )

    # Requests

    async def request_animation(
        self,
        request: Optional[Mapping[str, Any]] = None,
        **fields: Any
    ) -> Optional[str]:
        """
        Request an animation

        Args:
            request: Request fields (participant_id, motion_type, duration_class,
                custom_duration_ms, priority, cognitive_load, trust_level,
                reducible, on_start, on_complete); keyword fields override it

        Returns:
            Animation id (admitted or queued), or None when paused, invalid or
            the participant is not registered
        """
        if self._paused:
            return None

        data = dict(request or {})
        data.update(fields)
        data["id"] = f"motion-{uuid.uuid4().hex[:12]}"
        data["timestamp"] = self.scheduler.now_ms()

        try:
            validated = AnimationRequest.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Animation request validation failed: {e}")
            return None

        if self.require_registered and not self.registry.is_menu_active(validated.participant_id):
            logger.warning(f"Animation requested by unregistered participant {validated.participant_id}")
            return None

        duration, weight = self._measure(validated)

        if not self._fits(validated, weight):
            self._queue.append(validated)
            new_total = self._current_load + weight
            logger.debug(
                f"Animation {validated.id} queued (load {new_total}/"
                f"{self.budget.max_total_cognitive_load}, active {len(self._active)})"
            )
            if self.on_budget_exceeded is not None:
                try:
                    self.on_budget_exceeded(new_total, self.budget.max_total_cognitive_load)
                except Exception as e:
                    logger.error(f"Budget exceeded handler failed: {e}")
            return validated.id

        self._admit(validated, duration, weight)
        return validated.id

    def _measure(self, request: AnimationRequest) -> Tuple[float, int]:
        duration = estimate_duration_ms(request)
        return duration, calculate_motion_weight(request.motion_type, duration, request.priority)

    def _fits(self, request: AnimationRequest, weight: int) -> bool:
        new_total = self._current_load + weight
        active_count = len(self._active)
        if (
            new_total <= self.budget.max_total_cognitive_load
            and active_count < self.budget.max_concurrent_animations
        ):
            return True

        headroom = self.reduction_strategy.advisory_headroom(request, list(self._active.values()))
        if headroom:
            logger.debug(f"Advisory headroom of {headroom} for animation {request.id}")
        return (
            new_total - headroom <= self.budget.max_total_cognitive_load
            and active_count - headroom < self.budget.max_concurrent_animations
        )

    def _admit(self, request: AnimationRequest, duration: float, weight: int) -> None:
        now = self.scheduler.now_ms()
        self._active[request.id] = ActiveAnimation(
            request=request,
            start_time=now,
            estimated_end_time=now + duration,
            weight=weight
        )
        self._current_load += weight

        logger.debug(
            f"Animation {request.id} started for {request.participant_id} "
            f"({request.motion_type.value}, {duration}ms, weight {weight})"
        )
        self._invoke(request.on_start, request)
        self._invoke(self.on_animation_start, request)

        self._completions.schedule(request.id, duration, lambda: self._complete(request.id))

    def _complete(self, animation_id: str) -> None:
        animation = self._active.pop(animation_id, None)
        if animation is None:
            return
        self._current_load -= animation.weight

        logger.debug(f"Animation {animation_id} completed")
        self._invoke(animation.request.on_complete, animation.request)
        self._invoke(self.on_animation_complete, animation.request)
        self._drain_queue()

    def _drain_queue(self) -> int:
        """Admit queued requests from the head until one does not fit"""
        admitted = 0
        while self._queue:
            head = self._queue[0]
            duration, weight = self._measure(head)
            if not self._fits(head, weight):
                break
            self._queue.popleft()
            self._admit(head, duration, weight)
            admitted += 1
        return admitted

    @staticmethod
    def _invoke(callback: Optional[Callable[..., Any]], request: AnimationRequest) -> None:
        if callback is None:
            return
        try:
            callback(request)
        except Exception as e:
            logger.error(f"Animation callback failed for {request.id}: {e}")

    # Cancellation

    def cancel_animation(self, animation_id: str) -> bool:
        """Cancel an active or queued animation"""
        if self._remove_active(animation_id):
            self._drain_queue()
            return True

        for queued in self._queue:
            if queued.id == animation_id:
                self._queue.remove(queued)
                return True
        return False

    def cancel_animations_for_menu(self, participant_id: str) -> int:
        """Cancel every active and queued animation of a participant"""
        cancelled = 0
        for animation_id in [aid for aid, a in self._active.items() if a.participant_id == participant_id]:
            if self._remove_active(animation_id):
                cancelled += 1

        remaining = deque(r for r in self._queue if r.participant_id != participant_id)
        cancelled += len(self._queue) - len(remaining)
        self._queue = remaining

        if cancelled:
            self._drain_queue()
        return cancelled

    def _remove_active(self, animation_id: str) -> bool:
        animation = self._active.pop(animation_id, None)
        if animation is None:
            return False
        self._completions.cancel(animation_id)
        self._current_load -= animation.weight
        self._run_cleanup(animation)
        logger.debug(f"Animation {animation_id} cancelled")
        return True

    @staticmethod
    def _run_cleanup(animation: ActiveAnimation) -> None:
        if animation.cleanup is None:
            return
        try:
            animation.cleanup()
        except Exception as e:
            logger.error(f"Animation cleanup failed for {animation.request.id}: {e}")

    def attach_cleanup(self, animation_id: str, cleanup: Callable[[], None]) -> bool:
        """Register a cleanup to run if the active animation is cancelled"""
        animation = self._active.get(animation_id)
        if animation is None:
            return False
        animation.cleanup = cleanup
        return True

    # Motion control

    def pause_motion(self) -> None:
        self._paused = True

    def resume_motion(self) -> None:
        self._paused = False

    def is_paused(self) -> bool:
        return self._paused

    def should_animate(self, participant_id: str, motion_type: Optional[MotionType] = None) -> bool:
        """True if a participant may start motion now; saturation favours the priority owner"""
        if self._paused:
            return False
        saturated = (
            self._current_load >= self.budget.max_total_cognitive_load
            or len(self._active) >= self.budget.max_concurrent_animations
        )
        if saturated:
            return self._motion_priority_owner == participant_id
        return True

    def set_motion_priority(self, participant_id: str) -> bool:
        if self.registry is None:
            raise MissingCollaboratorError("MotionCoordinator", "registry")
        if not self.registry.is_menu_active(participant_id):
            return False
        self._motion_priority_owner = participant_id
        return True

    def release_motion_priority(self, participant_id: str) -> None:
        if self._motion_priority_owner == participant_id:
            self._motion_priority_owner = None

    def has_motion_priority(self, participant_id: str) -> bool:
        return self._motion_priority_owner is not None and self._motion_priority_owner == participant_id

    def get_motion_priority_owner(self) -> Optional[str]:
        return self._motion_priority_owner

    # Budget

    def update_budget(self, partial: Mapping[str, Any]) -> bool:
        """Merge a partial budget; a raised budget may admit queued requests"""
        try:
            self.budget = MotionBudget.model_validate({**self.budget.model_dump(), **dict(partial)})
        except ValidationError as e:
            logger.warning(f"Motion budget update validation failed: {e}")
            return False
        self._drain_queue()
        return True

    def get_budget_status(self) -> Dict[str, float]:
        max_load = self.budget.max_total_cognitive_load
        return {
            "used": self._current_load,
            "available": max_load - self._current_load,
            "percentage": (self._current_load / max_load) * 100,
        }

    def get_current_load(self) -> int:
        return self._current_load

    def set_performance_mode(self, mode: Union[PerformanceMode, str]) -> bool:
        try:
            self._performance_mode = PerformanceMode(mode)
        except ValueError:
            logger.warning(f"Ignoring unknown performance mode: {mode}")
            return False
        return True

    def get_performance_mode(self) -> PerformanceMode:
        return self._performance_mode

    def set_reduced_motion_preference(self, prefers_reduced_motion: bool) -> None:
        self._prefers_reduced_motion = prefers_reduced_motion

    def get_motion_level(self) -> MotionLevel:
        if self._current_load >= self.budget.max_total_cognitive_load * REDUCED_MOTION_LOAD_RATIO:
            return MotionLevel.REDUCED
        if self._performance_mode == PerformanceMode.LOW:
            return MotionLevel.REDUCED
        if self.budget.respect_reduced_motion and self._prefers_reduced_motion:
            return MotionLevel.REDUCED
        return MotionLevel.FULL

    # Queries

    def get_active_animation_count(self) -> int:
        return len(self._active)

    def get_active_animations(self) -> List[ActiveAnimation]:
        return list(self._active.values())

    def get_queue_length(self) -> int:
        return len(self._queue)

    def get_queued_requests(self) -> List[AnimationRequest]:
        return list(self._queue)

    def is_animating(self, participant_id: str) -> bool:
        return any(a.participant_id == participant_id for a in self._active.values())

    def dispose(self) -> None:
        """Cancel completion timers, run cleanups and drop all state"""
        self._completions.cancel_all()
        for animation in list(self._active.values()):
            self._run_cleanup(animation)
        self._active.clear()
        self._queue.clear()
        self._current_load = 0
        self._motion_priority_owner = None
        logger.info("MotionCoordinator disposed")
