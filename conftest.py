"""
Pytest configuration for SurfaceCoord
Registers custom markers and tags timer-driven test modules
"""

import pytest

# Test modules whose behaviour is driven by the virtual timer scheduler
TIMING_MODULES = {
    'test_timer_scheduler',
    'test_announcement_coordinator',
    'test_motion_coordinator',
    'test_keyboard_router',
    'test_coordination_system',
}


def pytest_configure(config):
    """Add custom markers"""
    config.addinivalue_line(
        "markers", "timing: Tests driven by the virtual timer scheduler (never sleep)"
    )
    config.addinivalue_line(
        "markers", "api: Tests that exercise the HTTP visibility surface"
    )


def pytest_collection_modifyitems(config, items):
    """Mark timing tests automatically based on module name"""
    for item in items:
        module_name = item.module.__name__.rsplit('.', 1)[-1]
        if module_name in TIMING_MODULES:
            item.add_marker(pytest.mark.timing)
