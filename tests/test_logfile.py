"""Tests for the app log file watcher."""

import asyncio
from pathlib import Path

import pytest

from simlaunch.core.logfile import LogFileWatcher, find_app_log
from simlaunch.core.router import LogRouter
from simlaunch.models.launch import LaunchRequest, LogChannel


def _install(sim_app_dir: Path, uuid: str, log_name: str | None = None) -> Path:
    container = sim_app_dir / "Applications" / uuid
    (container / "KitchenSink.app").mkdir(parents=True)
    (container / "Documents").mkdir()
    if log_name:
        log = container / "Documents" / log_name
        log.write_text("")
        return log
    return container


def test_find_app_log_waits_for_log_file(sim_app_dir):
    assert find_app_log(sim_app_dir, "KitchenSink") is None

    _install(sim_app_dir, "AAA")
    assert find_app_log(sim_app_dir, "KitchenSink") is None

    log = _install(sim_app_dir, "BBB", "app-1.log")
    assert find_app_log(sim_app_dir, "KitchenSink") == log


def test_find_app_log_in_missing_directory(tmp_path):
    assert find_app_log(tmp_path / "missing", "KitchenSink") is None


@pytest.mark.asyncio
async def test_watcher_streams_log_created_after_start(sim_app_dir, recorder):
    done = False
    router = LogRouter(
        LogChannel.LOG_FILE,
        LaunchRequest(app_path=Path("KitchenSink.app")),
        finish=lambda outcome: None,
        sink=recorder.sink,
    )
    watcher = LogFileWatcher(
        sim_app_dir, "KitchenSink", router, is_done=lambda: done, poll_interval=0.01
    )
    task = asyncio.create_task(watcher.run())

    await asyncio.sleep(0.05)
    log = _install(sim_app_dir, "CCC", "app.log")
    with log.open("a") as f:
        f.write("first line\npartial")
        f.flush()
        await asyncio.sleep(0.1)
        f.write(" done\n")

    for _ in range(100):
        if len(recorder.lines) == 2:
            break
        await asyncio.sleep(0.01)

    assert recorder.lines == [
        (LogChannel.LOG_FILE, "first line"),
        (LogChannel.LOG_FILE, "partial done"),
    ]
    assert watcher.path == log
    assert watcher.is_open

    done = True
    await asyncio.wait_for(task, timeout=1)
    assert not watcher.is_open


@pytest.mark.asyncio
async def test_watcher_stops_searching_when_session_completes(sim_app_dir, recorder):
    done = False
    router = LogRouter(
        LogChannel.LOG_FILE,
        LaunchRequest(app_path=Path("KitchenSink.app")),
        finish=lambda outcome: None,
        sink=recorder.sink,
    )
    watcher = LogFileWatcher(
        sim_app_dir, "KitchenSink", router, is_done=lambda: done, poll_interval=0.01
    )
    task = asyncio.create_task(watcher.run())

    await asyncio.sleep(0.05)
    done = True
    await asyncio.wait_for(task, timeout=1)

    assert watcher.path is None
    assert recorder.lines == []
