"""Snapshot application layer."""

from .config import Manifest, ManifestConfig, ManifestError, ManifestExport, load_manifest
from .controller import RunController
from .image_logger import ImageLogger, OutputError
from .snapshot import SnapshotApp

__all__ = [
    "ImageLogger",
    "Manifest",
    "ManifestConfig",
    "ManifestError",
    "ManifestExport",
    "OutputError",
    "RunController",
    "SnapshotApp",
    "load_manifest",
]
