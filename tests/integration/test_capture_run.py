"""End-to-end capture run against the replay backend in real time."""

from __future__ import annotations

import pytest
from PIL import Image

from rpi_timelapse.app.controller import RunController
from rpi_timelapse.app.image_logger import ImageLogger
from rpi_timelapse.core.config_map import ConfigMap
from rpi_timelapse.core.lock_file import RunLock
from rpi_timelapse.core.resource_folder import ResourceFolder
from rpi_timelapse.core.scheduler import ScheduleConfig, Scheduler
from rpi_timelapse.hardware import CameraFactory, SessionState
from tests.infrastructure.helpers import BLUE, RED

INTERVAL = 500


@pytest.mark.slow
def test_replay_run_with_real_clock(tmp_path, frames_dir):
    scheduler = Scheduler(ScheduleConfig(interval=INTERVAL, idle=20, max_samples=4))
    camera = CameraFactory(
        ConfigMap({"use_mock": "true", "use_mock_folder": str(frames_dir), "use_mock_repeat_frames": "true"})
    ).create_camera()
    lock = RunLock(tmp_path / "run.lock")
    lock.lock()
    output = ResourceFolder(tmp_path / "out").require()

    elapsed = []

    class TrackingLogger(ImageLogger):
        def save(self, frame, snapshot):
            elapsed.append(snapshot.elapsed)
            return super().save(frame, snapshot)

    samples = RunController(scheduler, camera, lock, TrackingLogger(output)).run()

    assert samples == 4
    assert camera.state is SessionState.CLOSED
    for index, value in enumerate(elapsed, start=1):
        assert value > INTERVAL * index
        assert value // INTERVAL == index

    colors = []
    for path in output.enumerate_files():
        with Image.open(path) as image:
            colors.append(image.getpixel((0, 0)))
    assert colors == [RED, BLUE, RED, BLUE]
