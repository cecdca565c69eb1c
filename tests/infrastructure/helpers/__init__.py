"""Test data generators.

Usage:
    from tests.infrastructure.helpers import write_png, RED

    write_png(tmp_path / "frames" / "a.png", RED, size=(4, 3))
"""

from pathlib import Path

from tests.infrastructure.helpers.generators import (
    BLUE,
    GREEN,
    RED,
    make_snapshot,
    write_manifest,
    write_png,
)

HELPERS_DIR = Path(__file__).parent

__all__ = [
    "BLUE",
    "GREEN",
    "RED",
    "make_snapshot",
    "write_manifest",
    "write_png",
    "HELPERS_DIR",
]
