"""Unit tests for the snapshot application wiring."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from rpi_timelapse.app import snapshot as snapshot_module
from rpi_timelapse.app.config import Manifest, ManifestConfig
from rpi_timelapse.app.snapshot import SnapshotApp
from rpi_timelapse.core.errors import ClockSyncError, LockError
from rpi_timelapse.hardware.errors import InvalidSettings
from tests.infrastructure.mocks.clock_mocks import FakeClock


def make_manifest(tmp_path, frames_dir, *, use_ntp=False, lock_file=None, repeat=True):
    return Manifest(
        config=ManifestConfig(
            output_folder=str(tmp_path / "out"),
            log_folder=str(tmp_path / "logs"),
            lock_file=str(lock_file or tmp_path / "run.lock"),
            sample_interval=1000,
            sample_idle=100,
            use_ntp=use_ntp,
        ),
        settings={
            "use_mock": "true",
            "use_mock_folder": str(frames_dir),
            "use_mock_repeat_frames": "true" if repeat else "false",
        },
    )


def stop_after(output_dir, lock_path, frames):
    """Sleep hook that deletes the lock once ``frames`` PNGs exist."""

    def hook(_clock):
        if len(list(output_dir.glob("*.png"))) >= frames:
            lock_path.unlink(missing_ok=True)

    return hook


class TestSnapshotAppSetup:

    def test_creates_folders(self, tmp_path, frames_dir):
        app = SnapshotApp(make_manifest(tmp_path, frames_dir))
        assert (tmp_path / "out").is_dir()
        assert (tmp_path / "logs").is_dir()
        assert app.log_path == tmp_path / "logs" / "app.log"


class TestSnapshotAppRun:

    def test_captures_until_lock_removed(self, tmp_path, frames_dir):
        clock = FakeClock()
        clock.on_sleep = stop_after(tmp_path / "out", tmp_path / "run.lock", 2)
        app = SnapshotApp(make_manifest(tmp_path, frames_dir), clock=clock, sleep=clock.sleep)

        samples = app.run()

        # The lock disappears while waiting for the third tick, so the third
        # sample still completes before the loop notices.
        assert samples == 3
        assert len(list((tmp_path / "out").glob("*.png"))) == 3
        assert not (tmp_path / "run.lock").exists()

    def test_ntp_reference_names_frames(self, tmp_path, frames_dir):
        clock = FakeClock()
        clock.on_sleep = stop_after(tmp_path / "out", tmp_path / "run.lock", 0)
        app = SnapshotApp(
            make_manifest(tmp_path, frames_dir, use_ntp=True),
            clock=clock,
            sleep=clock.sleep,
            ntp_lookup=lambda host: 1_600_000_000.0,
        )

        assert app.run() == 1
        names = [path.name for path in (tmp_path / "out").glob("*.png")]
        assert names == ["1600000001010-20200913T122641Z.png"]

    def test_ntp_failure_is_fatal_before_capture(self, tmp_path, frames_dir, monkeypatch):
        camera = MagicMock()
        factory = MagicMock()
        factory.return_value.create_camera.return_value = camera
        monkeypatch.setattr(snapshot_module, "CameraFactory", factory)

        def lookup(host):
            raise ClockSyncError("no answer")

        app = SnapshotApp(make_manifest(tmp_path, frames_dir, use_ntp=True), ntp_lookup=lookup)

        with pytest.raises(ClockSyncError):
            app.run()
        camera.next.assert_not_called()
        camera.shutdown.assert_called_once_with()
        assert not (tmp_path / "run.lock").exists()

    def test_device_open_time_does_not_count_toward_first_interval(self, tmp_path, frames_dir, monkeypatch):
        clock = FakeClock()
        clock.on_sleep = stop_after(tmp_path / "out", tmp_path / "run.lock", 0)
        real_factory = snapshot_module.CameraFactory

        class SlowOpenFactory(real_factory):
            def create_camera(self):
                camera = super().create_camera()
                clock.advance(5000)
                return camera

        monkeypatch.setattr(snapshot_module, "CameraFactory", SlowOpenFactory)
        app = SnapshotApp(
            make_manifest(tmp_path, frames_dir, use_ntp=True),
            clock=clock,
            sleep=clock.sleep,
            ntp_lookup=lambda host: 1_600_000_000.0,
        )

        assert app.run() == 1
        names = [path.name for path in (tmp_path / "out").glob("*.png")]
        assert names == ["1600000001010-20200913T122641Z.png"]

    def test_camera_failure_leaves_no_lock(self, tmp_path):
        app = SnapshotApp(make_manifest(tmp_path, tmp_path / "missing"))
        with pytest.raises(InvalidSettings):
            app.run()
        assert not (tmp_path / "run.lock").exists()

    def test_lock_failure_shuts_camera_down(self, tmp_path, frames_dir, monkeypatch):
        camera = MagicMock()
        factory = MagicMock()
        factory.return_value.create_camera.return_value = camera
        monkeypatch.setattr(snapshot_module, "CameraFactory", factory)
        manifest = make_manifest(tmp_path, frames_dir, lock_file=tmp_path / "no" / "such" / "run.lock")

        with pytest.raises(LockError):
            SnapshotApp(manifest).run()

        camera.shutdown.assert_called_once_with()
        camera.next.assert_not_called()
