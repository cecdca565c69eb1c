"""Capture loop: tick, grab, persist, check for cancellation."""

from __future__ import annotations

import time
from typing import Iterator, Protocol

from rpi_timelapse.core.lock_file import RunLock
from rpi_timelapse.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_timelapse.core.scheduler import TimeSnapshot
from rpi_timelapse.hardware.frame import Frame
from rpi_timelapse.hardware.session import CaptureSession


class FrameSink(Protocol):
    def save(self, frame: Frame, snapshot: TimeSnapshot) -> object:
        ...


class RunController:
    """Drive one capture run until the schedule ends or the run lock disappears.

    Cancellation is cooperative: the lock is checked once per sample, after the
    frame has been persisted, so removing it mid-sample lets that sample finish.
    """

    def __init__(
        self,
        scheduler: Iterator[TimeSnapshot],
        camera: CaptureSession,
        run_lock: RunLock,
        sink: FrameSink,
        *,
        logger: LoggerLike = None,
    ) -> None:
        self._scheduler = scheduler
        self._camera = camera
        self._run_lock = run_lock
        self._sink = sink
        self._logger = ensure_structured_logger(logger, fallback_name="RunController")

    def run(self) -> int:
        samples = 0
        try:
            for snapshot in self._scheduler:
                self._logger.info("snapshot start: %s", snapshot.utc.isoformat())
                started = time.monotonic()

                frame = self._camera.next()
                self._logger.info("captured %dx%d", frame.width, frame.height)
                self._sink.save(frame, snapshot)
                samples += 1

                self._logger.info("snapshot end %dms", int((time.monotonic() - started) * 1000))
                if not self._run_lock.is_locked():
                    self._logger.info("lock removed, halting capture")
                    break
        except BaseException:
            self._shutdown_quietly()
            raise

        self._camera.shutdown()
        self._logger.info("capture finished after %d samples", samples)
        return samples

    def _shutdown_quietly(self) -> None:
        try:
            self._camera.shutdown()
        except Exception:
            self._logger.exception("camera shutdown after a failed run also failed")


__all__ = ["FrameSink", "RunController"]
