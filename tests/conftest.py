from __future__ import annotations

import stat
from pathlib import Path

import pytest

from simlaunch.core.session import LaunchSession
from simlaunch.models.launch import LaunchRequest, LogChannel


@pytest.fixture
def app_bundle(tmp_path: Path) -> Path:
    bundle = tmp_path / "build" / "KitchenSink.app"
    bundle.mkdir(parents=True)
    return bundle


@pytest.fixture
def crash_dir(tmp_path: Path) -> Path:
    path = tmp_path / "DiagnosticReports"
    path.mkdir()
    return path


@pytest.fixture
def sim_app_dir(tmp_path: Path) -> Path:
    path = tmp_path / "iPhone Simulator"
    path.mkdir()
    return path


@pytest.fixture
def make_launcher(tmp_path: Path):
    """Write a fake launcher shell script and return its path."""

    def _make(body: str, name: str = "ios-sim") -> Path:
        script = tmp_path / "bin" / name
        script.parent.mkdir(exist_ok=True)
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


class Recorder:
    """Collects forwarded lines and delivered outcomes."""

    def __init__(self) -> None:
        self.lines: list[tuple[LogChannel, str]] = []
        self.outcomes: list = []

    def sink(self, channel: LogChannel, text: str) -> None:
        self.lines.append((channel, text))

    def callback(self, outcome) -> None:
        self.outcomes.append(outcome)

    def texts(self, channel: LogChannel | None = None) -> list[str]:
        return [text for ch, text in self.lines if channel is None or ch == channel]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def make_session(app_bundle, crash_dir, sim_app_dir, recorder):
    """Build a session whose simulator stop is a no-op."""

    def _make(launcher: Path, **request_kwargs) -> LaunchSession:
        request_kwargs.setdefault("sdk", "17.2")
        request = LaunchRequest(app_path=app_bundle, **request_kwargs)
        return LaunchSession(
            request,
            launcher=launcher,
            sink=recorder.sink,
            callback=recorder.callback,
            sim_app_dir=sim_app_dir,
            crash_dir=crash_dir,
            stopper=lambda: None,
            poll_interval=0.02,
        )

    return _make
