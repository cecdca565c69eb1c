"""Unit tests for the snapshot and assemble entry points."""

from __future__ import annotations

import sys
from types import SimpleNamespace

import pytest

from rpi_timelapse.cli import assemble, common, snapshot
from rpi_timelapse.core.errors import TimelapseError
from rpi_timelapse.encoding import exporter
from tests.infrastructure.helpers import write_manifest, write_png


@pytest.fixture
def logging_calls(monkeypatch):
    """Record configure_logging calls instead of touching the root logger."""
    calls = []

    def fake_configure(level, **kwargs):
        calls.append(dict(kwargs, level=level))

    monkeypatch.setattr(common, "configure_logging", fake_configure)
    monkeypatch.setattr(snapshot, "configure_logging", fake_configure)
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    return calls


def replay_manifest(tmp_path, frames_dir, **config):
    values = {
        "output_folder": tmp_path / "out",
        "log_folder": tmp_path / "logs",
        "lock_file": tmp_path / "run.lock",
        "sample_interval": 0,
        "sample_idle": 0,
    }
    values.update(config)
    return write_manifest(
        tmp_path / "manifest.txt",
        config=values,
        export={"export_file": tmp_path / "clip.webm", "export_framerate": 10},
        settings={"use_mock": "true", "use_mock_folder": frames_dir},
    )


# =============================================================================
# Common arguments
# =============================================================================


class TestCommonArguments:

    def test_defaults(self):
        args = snapshot.build_parser().parse_args(["manifest.txt"])
        assert args.log_level == "info"
        assert args.log_file is None
        assert args.console_output is True

    def test_no_console(self):
        args = snapshot.build_parser().parse_args(["manifest.txt", "--no-console", "--log-level", "debug"])
        assert args.console_output is False
        assert args.log_level == "debug"

    def test_manifest_required(self):
        with pytest.raises(SystemExit):
            snapshot.build_parser().parse_args([])


# =============================================================================
# rpi-timelapse-snapshot
# =============================================================================


class TestSnapshotMain:

    def test_missing_manifest_exits_1(self, tmp_path, logging_calls):
        assert snapshot.main([str(tmp_path / "absent.txt")]) == 1

    def test_success_exits_0_and_logs_to_app_log(self, tmp_path, frames_dir, logging_calls, monkeypatch):
        class FakeApp:
            def __init__(self, manifest):
                self.manifest = manifest
                self.log_path = tmp_path / "logs" / "app.log"

            def run(self):
                return 3

        monkeypatch.setattr(snapshot, "SnapshotApp", FakeApp)

        assert snapshot.main([str(replay_manifest(tmp_path, frames_dir))]) == 0
        assert logging_calls[-1]["log_file"] == tmp_path / "logs" / "app.log"
        assert logging_calls[-1]["console"] is True

    def test_run_error_exits_1(self, tmp_path, frames_dir, logging_calls, monkeypatch):
        class FailingApp:
            def __init__(self, manifest):
                self.log_path = tmp_path / "app.log"

            def run(self):
                raise TimelapseError("boom")

        monkeypatch.setattr(snapshot, "SnapshotApp", FailingApp)
        assert snapshot.main([str(replay_manifest(tmp_path, frames_dir))]) == 1

    def test_replay_running_dry_exits_1(self, tmp_path, frames_dir, logging_calls):
        manifest = replay_manifest(tmp_path, frames_dir)

        assert snapshot.main([str(manifest), "--no-console"]) == 1

        assert len(list((tmp_path / "out").glob("*.png"))) == 2
        assert logging_calls[-1]["console"] is False


# =============================================================================
# rpi-timelapse-assemble
# =============================================================================


class TestAssembleMain:

    def test_exports_png_frames(self, tmp_path, frames_dir, logging_calls, monkeypatch):
        write_png(tmp_path / "out" / "1-a.png")
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append((cmd, kwargs))
            return SimpleNamespace(returncode=0, stdout="", stderr="")

        monkeypatch.setattr(exporter.subprocess, "run", fake_run)

        assert assemble.main([str(replay_manifest(tmp_path, frames_dir))]) == 0

        cmd, kwargs = calls[0]
        assert cmd[cmd.index("-i") + 1] == "*.png"
        assert cmd[cmd.index("-framerate") + 1] == "10"
        assert cmd[-1] == str(tmp_path.resolve() / "clip.webm")
        assert kwargs["cwd"] == str(tmp_path / "out")

    def test_missing_output_folder_exits_1(self, tmp_path, frames_dir, logging_calls):
        assert assemble.main([str(replay_manifest(tmp_path, frames_dir))]) == 1

    def test_ffmpeg_failure_exits_1(self, tmp_path, frames_dir, logging_calls, monkeypatch):
        (tmp_path / "out").mkdir()
        monkeypatch.setattr(
            exporter.subprocess,
            "run",
            lambda cmd, **kwargs: SimpleNamespace(returncode=1, stdout="", stderr="Unknown encoder 'libvpx-vp9'"),
        )
        assert assemble.main([str(replay_manifest(tmp_path, frames_dir))]) == 1
