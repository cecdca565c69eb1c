"""Capture session lifecycle shared by every backend.

State machine::

    UNINITIALIZED --initialize--> READY --next--> STREAMING --next--> STREAMING
          |                                 \\            /
          +--(open fails)--> FAILED           +--shutdown--> CLOSED

Every resource a backend acquires is registered on ``self._resources`` (an
ExitStack) right after acquisition. Unwinding the stack is the single release
path: it runs on ``shutdown()`` and on any failure inside ``initialize()``,
releasing in reverse acquisition order and at most once.
"""

from __future__ import annotations

import abc
import contextlib
import enum
from typing import Mapping, Optional, Union

from rpi_timelapse.core.config_map import ConfigMap
from rpi_timelapse.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_timelapse.hardware.errors import NotReady
from rpi_timelapse.hardware.frame import Frame

SettingsLike = Union[ConfigMap, Mapping[str, object]]


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    STREAMING = "streaming"
    FAILED = "failed"
    CLOSED = "closed"


class BackendKind(enum.Enum):
    DEVICE = "device"
    REPLAY = "replay"


class CaptureSession(abc.ABC):
    """Base class for the closed set of capture backends."""

    kind: BackendKind

    def __init__(self, *, logger: LoggerLike = None) -> None:
        self._logger = ensure_structured_logger(logger, fallback_name=type(self).__name__)
        self._state = SessionState.UNINITIALIZED
        self._resources = contextlib.ExitStack()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state in (SessionState.READY, SessionState.STREAMING)

    # ------------------------------------------------------------------
    # Public lifecycle

    def initialize(self, settings: SettingsLike) -> None:
        if self._state is not SessionState.UNINITIALIZED:
            raise NotReady(f"cannot initialize a {self._state.value} session")
        config = settings if isinstance(settings, ConfigMap) else ConfigMap(settings)
        try:
            self._open(config)
        except BaseException:
            self._state = SessionState.FAILED
            try:
                self._release()
            except Exception:
                self._logger.exception("releasing a partially opened %s session failed", self.kind.value)
            raise
        self._state = SessionState.READY
        self._logger.info("%s session ready", self.kind.value)

    def next(self) -> Frame:
        """Block until one frame is available and return it."""
        if not self.is_open:
            raise NotReady(f"next() called on a {self._state.value} session; call initialize() first")
        frame = self._read()
        self._state = SessionState.STREAMING
        return frame

    def shutdown(self) -> None:
        if self._state is SessionState.CLOSED:
            return
        try:
            self._release()
        finally:
            self._state = SessionState.CLOSED
            self._logger.info("%s session closed", self.kind.value)

    def __enter__(self) -> "CaptureSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.shutdown()
        return None

    # ------------------------------------------------------------------
    # Backend hooks

    @abc.abstractmethod
    def _open(self, config: ConfigMap) -> None:
        """Acquire resources, registering each release on ``self._resources``."""

    @abc.abstractmethod
    def _read(self) -> Frame:
        """Produce one frame; only called while the session is open."""

    def _release(self) -> None:
        self._resources.close()


__all__ = ["BackendKind", "CaptureSession", "SessionState", "SettingsLike"]
