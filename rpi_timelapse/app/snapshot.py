"""Snapshot application: wires the manifest into one capture run."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rpi_timelapse.core.config_map import ConfigMap
from rpi_timelapse.core.lock_file import RunLock
from rpi_timelapse.core.logging_utils import LoggerLike, ensure_structured_logger
from rpi_timelapse.core.resource_folder import ResourceFolder
from rpi_timelapse.core.scheduler import Clock, ScheduleConfig, Scheduler, Sleeper, TimeLookup
from rpi_timelapse.hardware import CameraFactory

from .config import Manifest
from .controller import RunController
from .image_logger import ImageLogger

LOG_FILENAME = "app.log"


class SnapshotApp:
    """Capture frames on the manifest's schedule until the run lock is removed.

    Creating the app creates the output and log folders. ``clock``, ``sleep``
    and ``ntp_lookup`` are handed to the scheduler unchanged.
    """

    def __init__(
        self,
        manifest: Manifest,
        *,
        logger: LoggerLike = None,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleeper] = None,
        ntp_lookup: Optional[TimeLookup] = None,
    ) -> None:
        self.manifest = manifest
        self.logger = ensure_structured_logger(logger, fallback_name="SnapshotApp")
        self.output = ResourceFolder(manifest.config.output_folder).require()
        self.log_folder = ResourceFolder(manifest.config.log_folder).require()
        self._clock = clock
        self._sleep = sleep
        self._ntp_lookup = ntp_lookup

    @property
    def log_path(self) -> Path:
        return self.log_folder.path(LOG_FILENAME)

    def build_scheduler(self) -> Scheduler:
        config = self.manifest.config
        scheduler = Scheduler(
            ScheduleConfig(interval=config.sample_interval, idle=config.sample_idle),
            clock=self._clock,
            sleep=self._sleep,
            logger=self.logger.getChild("scheduler"),
        )
        if config.use_ntp:
            scheduler.sync_network_time(config.ntp_host, lookup=self._ntp_lookup)
        return scheduler

    def run(self) -> int:
        config = self.manifest.config
        self.logger.info(
            "starting capture: interval %dms, idle %dms, output %s",
            config.sample_interval,
            config.sample_idle,
            self.output.basepath(),
        )

        factory = CameraFactory(ConfigMap(self.manifest.settings), logger=self.logger.getChild("camera"))
        camera = factory.create_camera()

        run_lock = RunLock(config.lock_file)
        # The schedule is anchored once the device is open.
        try:
            scheduler = self.build_scheduler()
            run_lock.lock()
        except BaseException:
            camera.shutdown()
            raise
        self.logger.info("run lock %s acquired; delete it to stop capturing", run_lock.path)

        sink = ImageLogger(self.output, logger=self.logger.getChild("images"))
        controller = RunController(scheduler, camera, run_lock, sink, logger=self.logger.getChild("controller"))
        return controller.run()


__all__ = ["LOG_FILENAME", "SnapshotApp"]
