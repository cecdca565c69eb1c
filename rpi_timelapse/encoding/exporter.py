"""Assemble captured frames into a lossless VP9 video with the ffmpeg CLI."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Union

from rpi_timelapse.core.errors import TimelapseError
from rpi_timelapse.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_timelapse.core.resource_folder import ResourceFolder

DEFAULT_OUTPUT_NAME = "output.webm"
STDERR_TAIL_LINES = 20


class EncodingError(TimelapseError):
    """Base class for video assembly failures."""


class RenderError(EncodingError):
    """ffmpeg could not be started or did not produce the video."""


def ffmpeg_binary() -> str:
    return "ffmpeg.exe" if sys.platform == "win32" else "ffmpeg"


def build_ffmpeg_command(pattern: str, output: Union[str, Path], framerate: int) -> List[str]:
    return [
        ffmpeg_binary(),
        "-y",
        "-framerate", str(framerate),
        "-pattern_type", "glob",
        "-i", pattern,
        "-c:v", "libvpx-vp9",
        "-pix_fmt", "yuva420p",  # keeps the alpha plane
        "-lossless", "1",
        str(output),
    ]


def resolve_output_path(export_file: Union[str, Path]) -> Path:
    """Return ``export_file`` with a canonical parent directory.

    An empty name falls back to ``output.webm``. The parent must exist.
    """
    raw = str(export_file).strip()
    candidate = Path(raw or ".")
    if not raw or raw.endswith(("/", "\\")) or candidate.name in ("", ".."):
        parent, name = candidate, DEFAULT_OUTPUT_NAME
    else:
        parent, name = candidate.parent, candidate.name
    try:
        return parent.resolve(strict=True) / name
    except (OSError, RuntimeError) as exc:
        raise RenderError(f"unable to resolve '{export_file}' to an absolute path: {exc}") from exc


def export_video(
    folder: ResourceFolder,
    pattern: str,
    output: Union[str, Path],
    framerate: int,
    *,
    timeout: Optional[float] = None,
    logger: LoggerLike = None,
) -> Path:
    """Render every file in ``folder`` matching ``pattern`` into ``output``."""
    log = ensure_structured_logger(logger, fallback_name="Exporter")
    if framerate <= 0:
        raise RenderError(f"framerate must be positive (got {framerate})")

    workdir = folder.basepath()
    output_path = Path(output)
    cmd = build_ffmpeg_command(pattern, output_path, framerate)
    log.info("rendering %s from %s/%s at %d fps", output_path, workdir, pattern, framerate)
    log.debug("running %s", " ".join(cmd))

    try:
        result = subprocess.run(
            cmd,
            cwd=str(workdir),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise RenderError(f"{cmd[0]} is required for video export but was not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise RenderError(f"{cmd[0]} did not finish within {timeout}s") from exc
    except OSError as exc:
        raise RenderError(f"unable to start {cmd[0]}: {exc}") from exc

    if result.returncode != 0:
        tail = "\n".join((result.stderr or "").strip().splitlines()[-STDERR_TAIL_LINES:])
        raise RenderError(f"{cmd[0]} exited with status {result.returncode}: {tail}")

    log.info("video encoding finished: %s", output_path)
    return output_path


__all__ = [
    "DEFAULT_OUTPUT_NAME",
    "EncodingError",
    "RenderError",
    "build_ffmpeg_command",
    "export_video",
    "ffmpeg_binary",
    "resolve_output_path",
]
