"""
Announcement Models
Narration announcements and announcement coordinator configuration
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnnouncementPriority(str, Enum):
    """Narration tier; each tier except OFF owns one narration channel"""
    POLITE = "polite"
    ASSERTIVE = "assertive"
    OFF = "off"


class AnnouncementCategory(str, Enum):
    NAVIGATION = "navigation"
    STATE_CHANGE = "state-change"
    ERROR = "error"
    SUCCESS = "success"
    INFORMATION = "information"
    WARNING = "warning"
    STATUS = "status"
    PROGRESS = "progress"


class VerbosityLevel(str, Enum):
    MINIMAL = "minimal"
    STANDARD = "standard"
    VERBOSE = "verbose"


class Announcement(BaseModel):
    """A single narration request after validation"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    message: str
    priority: AnnouncementPriority = AnnouncementPriority.POLITE
    category: AnnouncementCategory = AnnouncementCategory.INFORMATION
    participant_id: Optional[str] = None
    timestamp: float = Field(ge=0)
    duration: float = Field(default=0, ge=0, description="Auto-clear delay in ms; 0 keeps it until cleared")
    persistent: bool = False

    @field_validator('message')
    @classmethod
    def validate_message(cls, v):
        stripped = v.strip()
        if not stripped:
            raise ValueError("Announcement message must not be blank")
        return stripped

    @property
    def debounce_key(self) -> str:
        return f"{self.message}-{self.participant_id or 'global'}"


class AnnouncementConfig(BaseModel):
    """Announcement coordinator configuration"""
    model_config = ConfigDict(frozen=True)

    max_concurrent_announcements: int = Field(default=2, ge=1, le=5)
    debounce_delay_ms: float = Field(default=100, ge=0, le=1000)
    enable_spatial_announcements: bool = True
    enable_progress_announcements: bool = True
    verbosity_level: VerbosityLevel = VerbosityLevel.STANDARD
