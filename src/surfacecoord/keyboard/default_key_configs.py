"""
Default key bindings per participant category
"""

from typing import Dict, List, Tuple

from surfacecoord.registry.registry_models import ParticipantCategory

from .keyboard_models import KeyboardAction, KeyConfig

A = KeyboardAction

_DEFAULT_TABLES: Dict[ParticipantCategory, List[Tuple[str, KeyboardAction]]] = {
    ParticipantCategory.CONTEXT: [
        ("Escape", A.CLOSE),
        ("ArrowDown", A.NAVIGATE_NEXT),
        ("ArrowUp", A.NAVIGATE_PREVIOUS),
        ("Enter", A.SELECT),
        (" ", A.SELECT),
        ("Home", A.HOME),
        ("End", A.END),
    ],
    ParticipantCategory.NAVIGATION: [
        ("Escape", A.CLOSE),
        ("ArrowRight", A.NAVIGATE_RIGHT),
        ("ArrowLeft", A.NAVIGATE_LEFT),
        ("ArrowDown", A.NAVIGATE_DOWN),
        ("ArrowUp", A.NAVIGATE_UP),
        ("Enter", A.SELECT),
        (" ", A.SELECT),
        ("Home", A.HOME),
        ("End", A.END),
    ],
    ParticipantCategory.DROPDOWN: [
        ("Escape", A.CLOSE),
        ("ArrowDown", A.NAVIGATE_NEXT),
        ("ArrowUp", A.NAVIGATE_PREVIOUS),
        ("Enter", A.SELECT),
        (" ", A.TOGGLE),
        ("Home", A.HOME),
        ("End", A.END),
    ],
    ParticipantCategory.BREADCRUMB: [
        ("ArrowRight", A.NAVIGATE_NEXT),
        ("ArrowLeft", A.NAVIGATE_PREVIOUS),
        ("Home", A.HOME),
        ("End", A.END),
        ("Enter", A.SELECT),
    ],
    ParticipantCategory.TREE: [
        ("ArrowDown", A.NAVIGATE_NEXT),
        ("ArrowUp", A.NAVIGATE_PREVIOUS),
        ("ArrowRight", A.EXPAND),
        ("ArrowLeft", A.COLLAPSE),
        ("Enter", A.SELECT),
        (" ", A.TOGGLE),
        ("Home", A.HOME),
        ("End", A.END),
    ],
    ParticipantCategory.SIDEBAR: [
        ("ArrowDown", A.NAVIGATE_NEXT),
        ("ArrowUp", A.NAVIGATE_PREVIOUS),
        ("Enter", A.SELECT),
        (" ", A.SELECT),
        ("Home", A.HOME),
        ("End", A.END),
    ],
}

DEFAULT_KEY_CONFIGS: Dict[ParticipantCategory, Tuple[KeyConfig, ...]] = {
    category: tuple(KeyConfig(key=key, action=action) for key, action in table)
    for category, table in _DEFAULT_TABLES.items()
}


def default_key_configs(category: ParticipantCategory) -> List[KeyConfig]:
    """Default bindings for a category, in match order"""
    return list(DEFAULT_KEY_CONFIGS[ParticipantCategory(category)])
