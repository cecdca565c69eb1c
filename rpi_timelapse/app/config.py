"""Typed manifest for the snapshot and assemble commands.

The manifest is a ``key = value`` file. Keys are grouped by a dotted section
prefix::

    config.output_folder = ./frames
    config.log_folder = ./logs
    config.lock_file = ./snapshot.lock
    config.sample_interval = 60000   # ms between frames
    config.sample_idle = 500         # ms between clock checks
    config.use_ntp = true

    export.export_file = ./timelapse.webm
    export.export_framerate = 24

    settings.backend = v4l2
    settings.device = /dev/video0
    settings.resolution = 1280x720
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Mapping, TypeVar

from rpi_timelapse.core.config_manager import parse_bool, read_config
from rpi_timelapse.core.errors import TimelapseError
from rpi_timelapse.core.time_sync import DEFAULT_NTP_HOST

CONFIG_PREFIX = "config."
EXPORT_PREFIX = "export."
SETTINGS_PREFIX = "settings."

DEFAULT_EXPORT_FILE = "output.webm"
DEFAULT_EXPORT_FRAMERATE = 24

T = TypeVar("T")


class ManifestError(TimelapseError):
    """The manifest is missing a value or holds a malformed one."""


@dataclass(slots=True)
class ManifestConfig:
    output_folder: str
    log_folder: str
    lock_file: str
    sample_interval: int
    sample_idle: int
    use_ntp: bool = False
    ntp_host: str = DEFAULT_NTP_HOST


@dataclass(slots=True)
class ManifestExport:
    export_file: str = DEFAULT_EXPORT_FILE
    export_framerate: int = DEFAULT_EXPORT_FRAMERATE


@dataclass(slots=True)
class Manifest:
    config: ManifestConfig
    export: ManifestExport = field(default_factory=ManifestExport)
    settings: Dict[str, str] = field(default_factory=dict)


def _section(values: Mapping[str, str], prefix: str) -> Dict[str, str]:
    return {key[len(prefix):]: value for key, value in values.items() if key.startswith(prefix)}


def _required(section: Mapping[str, str], prefix: str, key: str) -> str:
    value = section.get(key, "").strip()
    if not value:
        raise ManifestError(f"manifest is missing '{prefix}{key}'")
    return value


def _typed(section: Mapping[str, str], prefix: str, key: str, parse: Callable[[str], T], default: T) -> T:
    raw = section.get(key, "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError as exc:
        raise ManifestError(f"invalid value {raw!r} for '{prefix}{key}'") from exc


def _non_negative(raw: str) -> int:
    value = int(raw)
    if value < 0:
        raise ValueError(raw)
    return value


def _positive(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise ValueError(raw)
    return value


def manifest_from_mapping(values: Mapping[str, str]) -> Manifest:
    config = _section(values, CONFIG_PREFIX)
    export = _section(values, EXPORT_PREFIX)

    for key in ("sample_interval", "sample_idle"):
        _required(config, CONFIG_PREFIX, key)

    return Manifest(
        config=ManifestConfig(
            output_folder=_required(config, CONFIG_PREFIX, "output_folder"),
            log_folder=_required(config, CONFIG_PREFIX, "log_folder"),
            lock_file=_required(config, CONFIG_PREFIX, "lock_file"),
            sample_interval=_typed(config, CONFIG_PREFIX, "sample_interval", _non_negative, 0),
            sample_idle=_typed(config, CONFIG_PREFIX, "sample_idle", _non_negative, 0),
            use_ntp=_typed(config, CONFIG_PREFIX, "use_ntp", parse_bool, False),
            ntp_host=config.get("ntp_host", "").strip() or DEFAULT_NTP_HOST,
        ),
        export=ManifestExport(
            export_file=export.get("export_file", "").strip() or DEFAULT_EXPORT_FILE,
            export_framerate=_typed(export, EXPORT_PREFIX, "export_framerate", _positive, DEFAULT_EXPORT_FRAMERATE),
        ),
        settings=_section(values, SETTINGS_PREFIX),
    )


def load_manifest(path: Path) -> Manifest:
    try:
        values = read_config(Path(path))
    except OSError as exc:
        raise ManifestError(f"unable to read manifest {path}: {exc}") from exc
    return manifest_from_mapping(values)


__all__ = [
    "Manifest",
    "ManifestConfig",
    "ManifestError",
    "ManifestExport",
    "load_manifest",
    "manifest_from_mapping",
]
