"""Shared pytest configuration and fixtures for the time-lapse test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring a physical capture device"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require a physical capture device",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if item.get_closest_marker("hardware") is not None:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fake_clock():
    """Millisecond clock that only moves when the code under test sleeps."""
    from tests.infrastructure.mocks.clock_mocks import FakeClock
    return FakeClock()


@pytest.fixture
def frames_dir(tmp_path) -> Path:
    """Folder holding two replay frames: a.png (red) then b.png (blue)."""
    from tests.infrastructure.helpers.generators import BLUE, RED, write_png

    folder = tmp_path / "replay"
    write_png(folder / "a.png", RED)
    write_png(folder / "b.png", BLUE)
    return folder
