"""
SurfaceCoord Visibility API
Read-only endpoints exposing coordination state
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from surfacecoord.coordination_system import CoordinationSystem

logger = logging.getLogger(__name__)


# API Models for responses
class ParticipantInfo(BaseModel):
    """Information about a registered participant"""
    participant_id: str = Field(description="Participant identifier")
    category: str = Field(description="Participant category")
    priority: int = Field(description="Priority derived from category (1 = highest)")
    cognitive_load: int = Field(description="Weight charged against the load budget")
    has_attention: bool = Field(description="Whether the participant owns attention")
    is_animating: bool = Field(description="Whether the participant has active animations")
    keyboard_enabled: bool = Field(description="Whether its key bindings are enabled")


class ActiveAnimationInfo(BaseModel):
    """Information about an admitted animation"""
    animation_id: str = Field(description="Animation identifier")
    participant_id: str = Field(description="Owning participant")
    motion_type: str = Field(description="Motion type")
    weight: int = Field(description="Charged cognitive weight")
    start_time: float = Field(description="Start time in ms")
    estimated_end_time: float = Field(description="Estimated end time in ms")


class MotionInfo(BaseModel):
    """Motion budget status"""
    used: int = Field(description="Charged load")
    available: int = Field(description="Remaining load")
    percentage: float = Field(description="Used share of the load budget")
    max_concurrent_animations: int = Field(description="Concurrency cap")
    motion_level: str = Field(description="Current motion level")
    paused: bool = Field(description="Whether new animations are refused")
    priority_owner: Optional[str] = Field(default=None, description="Motion priority owner")
    queue_length: int = Field(description="Queued animation requests")
    active: List[ActiveAnimationInfo] = Field(description="Active animations")


class AnnouncementInfo(BaseModel):
    """Information about an announcement"""
    announcement_id: str = Field(description="Announcement identifier")
    message: str = Field(description="Narrated text")
    priority: str = Field(description="Narration tier")
    category: str = Field(description="Announcement category")
    participant_id: Optional[str] = Field(default=None, description="Owning participant")
    timestamp: float = Field(description="Creation time in ms")
    queued: bool = Field(description="Whether it is waiting for a free slot")


class SystemEventInfo(BaseModel):
    """Entry of the unified event stream"""
    type: str = Field(description="Event type")
    participant_id: Optional[str] = Field(default=None, description="Participant concerned")
    timestamp: float = Field(description="Event time in ms")
    details: Dict[str, Any] = Field(description="Event payload")


class CoordinationVisibilityAPI:
    """Read-only API for coordination state"""

    def __init__(self, system: CoordinationSystem):
        self.system = system

        self.router = APIRouter(prefix="/api/v1/coordination", tags=["coordination"])
        self._register_endpoints()

        logger.info("CoordinationVisibilityAPI initialized")

    def _active_system(self) -> CoordinationSystem:
        if not self.system.is_active:
            raise HTTPException(status_code=503, detail=f"Coordination system is {self.system.state}")
        return self.system

    def _participant_info(self, registration) -> ParticipantInfo:
        system = self.system
        return ParticipantInfo(
            participant_id=registration.id,
            category=registration.category.value,
            priority=registration.priority,
            cognitive_load=registration.cognitive_load,
            has_attention=system.registry.has_attention(registration.id),
            is_animating=system.motion.is_animating(registration.id),
            keyboard_enabled=system.keyboard.is_handler_enabled(registration.id)
        )

    def _register_endpoints(self):
        """Register all API endpoints"""

        @self.router.get("/status", response_model=Dict[str, Any])
        async def get_status():
            """Snapshot of the coordination system"""
            return self.system.get_status()

        @self.router.get("/participants", response_model=List[ParticipantInfo])
        async def list_participants():
            """Registered participants ordered by priority"""
            system = self._active_system()
            return [self._participant_info(r) for r in system.registry.list_participants()]

        @self.router.get("/participants/{participant_id}", response_model=ParticipantInfo)
        async def get_participant(participant_id: str):
            """Details of one participant"""
            system = self._active_system()
            registration = system.registry.get_registration(participant_id)
            if registration is None:
                raise HTTPException(status_code=404, detail="Participant not found")
            return self._participant_info(registration)

        @self.router.get("/motion", response_model=MotionInfo)
        async def get_motion():
            """Motion budget status and active animations"""
            motion = self._active_system().motion
            status = motion.get_budget_status()
            return MotionInfo(
                used=status["used"],
                available=status["available"],
                percentage=status["percentage"],
                max_concurrent_animations=motion.budget.max_concurrent_animations,
                motion_level=motion.get_motion_level().value,
                paused=motion.is_paused(),
                priority_owner=motion.get_motion_priority_owner(),
                queue_length=motion.get_queue_length(),
                active=[
                    ActiveAnimationInfo(
                        animation_id=a.request.id,
                        participant_id=a.participant_id,
                        motion_type=a.request.motion_type.value,
                        weight=a.weight,
                        start_time=a.start_time,
                        estimated_end_time=a.estimated_end_time
                    )
                    for a in motion.get_active_animations()
                ]
            )

        @self.router.get("/announcements", response_model=List[AnnouncementInfo])
        async def list_announcements(
            participant_id: Optional[str] = Query(None, description="Filter by participant ID")
        ):
            """Active then queued announcements"""
            announcements = self._active_system().announcements
            entries = [(a, False) for a in announcements.get_active_announcements(participant_id)]
            entries += [
                (a, True) for a in announcements.get_queued_announcements()
                if participant_id is None or a.participant_id == participant_id
            ]
            return [
                AnnouncementInfo(
                    announcement_id=a.id,
                    message=a.message,
                    priority=a.priority.value,
                    category=a.category.value,
                    participant_id=a.participant_id,
                    timestamp=a.timestamp,
                    queued=queued
                )
                for a, queued in entries
            ]

        @self.router.get("/events", response_model=List[SystemEventInfo])
        async def list_events(
            limit: Optional[int] = Query(50, ge=0, description="Maximum number to return")
        ):
            """Most recent system events, oldest first"""
            return [
                SystemEventInfo(
                    type=event.type.value,
                    participant_id=event.participant_id,
                    timestamp=event.timestamp,
                    details=event.details
                )
                for event in self.system.get_events(limit=limit)
            ]

    def get_router(self) -> APIRouter:
        """Get the FastAPI router"""
        return self.router
