"""
Keyboard Routing Models
Key configurations, handler bindings and the key event stand-in
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator

from surfacecoord.registry.registry_models import ParticipantCategory

logger = logging.getLogger(__name__)


class KeyboardAction(str, Enum):
    """Actions a key binding can dispatch"""
    OPEN = "open"
    CLOSE = "close"
    TOGGLE = "toggle"
    NAVIGATE_NEXT = "navigate-next"
    NAVIGATE_PREVIOUS = "navigate-previous"
    NAVIGATE_UP = "navigate-up"
    NAVIGATE_DOWN = "navigate-down"
    NAVIGATE_LEFT = "navigate-left"
    NAVIGATE_RIGHT = "navigate-right"
    SELECT = "select"
    ESCAPE = "escape"
    HOME = "home"
    END = "end"
    PAGE_UP = "page-up"
    PAGE_DOWN = "page-down"
    SEARCH = "search"
    EXPAND = "expand"
    COLLAPSE = "collapse"


class KeyModifiers(BaseModel):
    """Modifier state a binding requires; all must match exactly"""
    model_config = ConfigDict(frozen=True)

    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False


class KeyConfig(BaseModel):
    """Single key -> action binding"""
    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    modifiers: KeyModifiers = Field(default_factory=KeyModifiers)
    action: KeyboardAction
    prevent_default: bool = True
    stop_propagation: bool = True


ActionCallback = Callable[[KeyboardAction, Optional["KeyEvent"]], Any]


class KeyboardHandlerBinding(BaseModel):
    """Key bindings of one participant"""
    model_config = ConfigDict(frozen=True)

    participant_id: str = Field(min_length=1)
    category: ParticipantCategory
    priority: int = Field(ge=1, le=10)
    key_configs: List[KeyConfig] = Field(default_factory=list)
    on_action: Optional[Callable[..., Any]] = None
    enabled: bool = True

    @field_validator('participant_id')
    @classmethod
    def validate_participant_id(cls, v):
        if not v.strip():
            raise ValueError("participant_id must not be blank")
        return v


@dataclass
class KeyEvent:
    """Keyboard event delivered to the router"""
    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False
    default_prevented: bool = field(default=False, init=False)
    propagation_stopped: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    @property
    def has_modifiers(self) -> bool:
        return self.ctrl or self.shift or self.alt or self.meta

    def matches(self, config: KeyConfig) -> bool:
        """True if key and every modifier flag equal the config's"""
        if self.key != config.key:
            return False
        modifiers = config.modifiers
        return (
            self.ctrl == modifiers.ctrl
            and self.shift == modifiers.shift
            and self.alt == modifiers.alt
            and self.meta == modifiers.meta
        )


KeyListener = Callable[[KeyEvent], Any]


class KeyEventSource(Protocol):
    """Anything the router can attach its single listener to"""

    def add_listener(self, listener: KeyListener) -> None:
        ...

    def remove_listener(self, listener: KeyListener) -> None:
        ...


class KeyEventDispatcher:
    """Fan-out key event source used as the default attachment point"""

    def __init__(self):
        self._listeners: List[KeyListener] = []

    def add_listener(self, listener: KeyListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: KeyListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, event: KeyEvent) -> KeyEvent:
        """Deliver event to every listener in attachment order"""
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Key listener failed: {e}")
        return event
