"""
Pytest configuration and shared fixtures for the stagbc test suite.

This module provides the markers, small grids and configurations used
across the unit and integration tests.
"""

import pytest

from stagbc.boundary.rules import StepContext
from stagbc.config import BCConfig
from stagbc.grid import StaggeredGrid

# =============================================================================
# Test Configuration
# =============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (cross-component)")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test paths."""
    for item in items:
        test_path = str(item.fspath)

        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)


# =============================================================================
# Grid Fixtures
# =============================================================================

DOMAIN = [(0.0, 4.0), (0.0, 2.0), (-3.0, 0.0)]


@pytest.fixture
def serial_grid():
    """4 x 2 x 3 cells on a single rank."""
    return StaggeredGrid.uniform(DOMAIN, (4, 2, 3))


@pytest.fixture
def split_grid():
    """Same domain split over two ranks along x."""
    return StaggeredGrid.uniform(DOMAIN, (4, 2, 3), (2, 1, 1))


@pytest.fixture
def serial_sub(serial_grid):
    return serial_grid.subgrid(0)


# =============================================================================
# Context and Configuration Fixtures
# =============================================================================


@pytest.fixture
def step():
    """Step context at t = 0.5 with a unit step."""
    return StepContext(time=0.5, dt=1.0)


@pytest.fixture
def empty_config():
    return BCConfig()


@pytest.fixture
def temp_dir(tmp_path):
    """Temporary directory for file-based tests."""
    return tmp_path
