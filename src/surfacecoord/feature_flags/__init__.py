"""
SurfaceCoord Feature Flags
Runtime toggles for optional coordination behaviour
"""

from .feature_flags import FeatureFlags, FeatureFlagDefinition, FLAG_DEFINITIONS

__all__ = ['FeatureFlags', 'FeatureFlagDefinition', 'FLAG_DEFINITIONS']
