"""
Coordination Configuration
Per-coordinator option bundles and the layered loader
(defaults < JSON file < environment < explicit overrides).
"""

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from surfacecoord.announcements.announcement_models import AnnouncementConfig
from surfacecoord.motion.motion_models import MotionBudget

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = "SURFACECOORD_CONFIG"

# Environment variable -> (section, field)
ENV_OVERRIDES: Dict[str, tuple] = {
    "SURFACECOORD_MAX_COGNITIVE_LOAD": ("registry", "max_cognitive_load"),
    "SURFACECOORD_TYPEAHEAD_DELAY_MS": ("keyboard", "type_ahead_delay_ms"),
    "SURFACECOORD_DEBOUNCE_DELAY_MS": ("announcements", "debounce_delay_ms"),
    "SURFACECOORD_VERBOSITY": ("announcements", "verbosity_level"),
    "SURFACECOORD_DEBUG": (None, "debug"),
}


class RegistryOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_cognitive_load: int = Field(default=15, ge=1)


class FocusOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    announce_changes: bool = True


class KeyboardOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    enable_type_ahead: bool = True
    type_ahead_delay_ms: float = Field(default=1000, ge=0)


class CoordinationConfig(BaseModel):
    """Complete configuration of a coordination system"""
    model_config = ConfigDict(frozen=True)

    registry: RegistryOptions = Field(default_factory=RegistryOptions)
    focus: FocusOptions = Field(default_factory=FocusOptions)
    keyboard: KeyboardOptions = Field(default_factory=KeyboardOptions)
    announcements: AnnouncementConfig = Field(default_factory=AnnouncementConfig)
    motion: MotionBudget = Field(default_factory=MotionBudget)
    render_delay_ms: float = Field(default=10, ge=0)
    render_on_promotion: bool = False
    require_registered_motion: bool = True
    event_history_limit: int = Field(default=256, ge=1)
    debug: bool = False


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _deep_merge(dict(merged[key]), value)
        else:
            merged[key] = value
    return merged


def _load_config_file(config_file: str) -> Dict[str, Any]:
    try:
        with open(config_file, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load coordination config from {config_file}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.error(f"Coordination config in {config_file} must be a JSON object")
        return {}
    logger.info(f"Loaded coordination config from {config_file}")
    return data


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for variable, (section, field_name) in ENV_OVERRIDES.items():
        value = env.get(variable)
        if value is None:
            continue
        if field_name == "debug":
            overrides["debug"] = value.lower() in ('true', '1', 'yes', 'on')
        else:
            overrides.setdefault(section, {})[field_name] = value
    return overrides


def _apply_layer(data: Dict[str, Any], layer: Dict[str, Any], source: str) -> Dict[str, Any]:
    """Merge a layer, keeping the previous data if the result does not validate"""
    if not layer:
        return data
    layered = _deep_merge(data, layer)
    try:
        CoordinationConfig.model_validate(layered)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid configuration from {source}: {e}")
        return data
    return layered


def load_coordination_config(
    config_file: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    **overrides: Any
) -> CoordinationConfig:
    """
    Build the effective configuration

    Args:
        config_file: JSON file path; defaults to $SURFACECOORD_CONFIG
        env: Environment mapping; defaults to os.environ
        **overrides: Section mappings (or top-level fields) applied last

    Returns:
        Validated configuration

    Raises:
        ValidationError: If explicit overrides are invalid
    """
    env = os.environ if env is None else env
    data: Dict[str, Any] = {}

    config_file = config_file or env.get(CONFIG_FILE_ENV)
    if config_file:
        data = _apply_layer(data, _load_config_file(config_file), f"file {config_file}")

    data = _apply_layer(data, _env_overrides(env), "environment")

    if overrides:
        data = _deep_merge(data, {
            key: value.model_dump() if isinstance(value, BaseModel) else value
            for key, value in overrides.items()
        })

    return CoordinationConfig.model_validate(data)
