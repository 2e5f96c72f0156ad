"""
Keyboard routing
"""

from .keyboard_models import (
    KeyboardAction,
    KeyModifiers,
    KeyConfig,
    KeyboardHandlerBinding,
    KeyEvent,
    KeyEventSource,
    KeyEventDispatcher
)
from .default_key_configs import DEFAULT_KEY_CONFIGS, default_key_configs
from .navigation_helpers import (
    get_next_navigable_item,
    get_previous_navigable_item,
    find_items_by_text
)
from .keyboard_router import (
    DEFAULT_TYPE_AHEAD_DELAY_MS,
    SEARCH_MODE_MESSAGE,
    KeyboardRouter
)

__all__ = [
    "KeyboardAction",
    "KeyModifiers",
    "KeyConfig",
    "KeyboardHandlerBinding",
    "KeyEvent",
    "KeyEventSource",
    "KeyEventDispatcher",
    "DEFAULT_KEY_CONFIGS",
    "default_key_configs",
    "get_next_navigable_item",
    "get_previous_navigable_item",
    "find_items_by_text",
    "DEFAULT_TYPE_AHEAD_DELAY_MS",
    "SEARCH_MODE_MESSAGE",
    "KeyboardRouter"
]
