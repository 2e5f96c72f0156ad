"""
Feature Flags for SurfaceCoord
Runtime toggles for optional coordination behaviour, read from environment
variables and an optional JSON file. Instances are injected; there is no
process-wide instance.
"""

import os
import logging
import json
from typing import Dict, Any, List, Mapping, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

FLAG_ENV_PREFIX = "SURFACECOORD_FLAG_"
FLAGS_CONFIG_ENV = "SURFACECOORD_FEATURE_FLAGS_CONFIG"

_TRUTHY = ('true', '1', 'yes', 'on')


@dataclass
class FeatureFlagDefinition:
    """Definition of a feature flag"""
    key: str
    description: str
    default_value: bool
    owner: str
    risk_level: str = 'low'
    dependencies: List[str] = field(default_factory=list)


FLAG_DEFINITIONS: Dict[str, FeatureFlagDefinition] = {
    definition.key: definition for definition in (
        FeatureFlagDefinition(
            key='debug_trace_enabled',
            description='Mirror every system event to the debug trace sink',
            default_value=False,
            owner='platform_team'
        ),
        FeatureFlagDefinition(
            key='type_ahead_enabled',
            description='Enter typeahead search mode on printable keystrokes',
            default_value=True,
            owner='accessibility_team'
        ),
        FeatureFlagDefinition(
            key='progress_announcements_enabled',
            description='Narrate progress announcements',
            default_value=True,
            owner='accessibility_team'
        ),
        FeatureFlagDefinition(
            key='motion_enabled',
            description='Admit new animations; disabled pauses the motion coordinator',
            default_value=True,
            owner='motion_team',
            risk_level='medium'
        ),
    )
}


class FeatureFlags:
    """Feature flag set evaluated against its dependencies"""

    def __init__(
        self,
        config_file: Optional[str] = None,
        overrides: Optional[Mapping[str, bool]] = None
    ):
        self._flags: Dict[str, Dict[str, Any]] = {}
        self._load_default_flags()
        self._load_configuration(config_file)
        for flag_key, value in (overrides or {}).items():
            self.set_flag(flag_key, value)
        self._log_flag_status()

    def _load_default_flags(self):
        """Load default flag definitions"""
        self._flags = {
            key: {
                'description': definition.description,
                'default_value': definition.default_value,
                'current_value': definition.default_value,
                'dependencies': list(definition.dependencies),
                'risk_level': definition.risk_level,
                'owner': definition.owner
            }
            for key, definition in FLAG_DEFINITIONS.items()
        }

    def _load_configuration(self, config_file: Optional[str]):
        """Layer the JSON file, then environment variables, over the defaults"""
        config_file = config_file or os.getenv(FLAGS_CONFIG_ENV)
        if config_file and os.path.exists(config_file):
            try:
                with open(config_file, 'r') as f:
                    file_config = json.load(f)
                for flag_key, flag_config in file_config.items():
                    if flag_key not in self._flags:
                        logger.warning(f"Ignoring unknown feature flag in {config_file}: {flag_key}")
                        continue
                    if isinstance(flag_config, dict):
                        self._flags[flag_key].update(flag_config)
                    else:
                        self._flags[flag_key]['current_value'] = bool(flag_config)
                logger.info(f"Loaded feature flags from {config_file}")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load feature flags from {config_file}: {e}")

        for flag_key in self._flags:
            env_value = os.getenv(f'{FLAG_ENV_PREFIX}{flag_key.upper()}')
            if env_value is not None:
                self._flags[flag_key]['current_value'] = env_value.lower() in _TRUTHY

    def _log_flag_status(self):
        enabled_flags = [key for key, config in self._flags.items() if config['current_value']]
        logger.info(f"Feature flags loaded. Enabled: {enabled_flags}")

    def is_enabled(self, flag_key: str) -> bool:
        """
        Check if a feature flag is enabled

        Args:
            flag_key: Feature flag key

        Returns:
            True if the flag and all of its dependencies are enabled
        """
        if flag_key not in self._flags:
            logger.warning(f"Unknown feature flag: {flag_key}")
            return False

        flag_config = self._flags[flag_key]
        if not flag_config['current_value']:
            return False

        for dependency in flag_config['dependencies']:
            if not self.is_enabled(dependency):
                logger.debug(f"Feature flag {flag_key} disabled due to dependency {dependency}")
                return False

        return True

    def set_flag(self, flag_key: str, value: bool) -> None:
        if flag_key not in self._flags:
            raise KeyError(f"Unknown feature flag: {flag_key}")
        self._flags[flag_key]['current_value'] = bool(value)

    def get_flag_info(self, flag_key: str) -> Optional[Dict[str, Any]]:
        """Get detailed information about a feature flag"""
        return self._flags.get(flag_key)

    def get_all_flags(self) -> Dict[str, Dict[str, Any]]:
        return {key: dict(config) for key, config in self._flags.items()}

    def enabled_flags(self) -> Dict[str, bool]:
        """Effective value of every flag"""
        return {key: self.is_enabled(key) for key in self._flags}

    def is_debug_trace_enabled(self) -> bool:
        return self.is_enabled('debug_trace_enabled')

    def is_type_ahead_enabled(self) -> bool:
        return self.is_enabled('type_ahead_enabled')

    def is_progress_announcements_enabled(self) -> bool:
        return self.is_enabled('progress_announcements_enabled')

    def is_motion_enabled(self) -> bool:
        return self.is_enabled('motion_enabled')
