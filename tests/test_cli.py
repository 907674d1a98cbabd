"""Tests for the command line front end."""

import json

import pytest
from typer.testing import CliRunner

from simlaunch import __version__
from simlaunch.cli.main import app
from simlaunch.utils.config import reload_config

runner = CliRunner()
visibility_calls = []


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path, sim_app_dir, crash_dir):
    visibility_calls.clear()
    monkeypatch.setattr("simlaunch.core.simulator.stop", lambda *args, **kwargs: None)
    monkeypatch.setattr(
        "simlaunch.core.simulator.set_window_visibility",
        lambda app, hide: visibility_calls.append((app, hide)),
    )
    monkeypatch.setattr("simlaunch.utils.config.CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.setenv("SIMLAUNCH_SIM_APP_DIR", str(sim_app_dir))
    monkeypatch.setenv("SIMLAUNCH_CRASH_DIR", str(crash_dir))
    reload_config()
    yield
    reload_config()


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"simlaunch {__version__}" in result.stdout


def test_launch_success_json(monkeypatch, make_launcher, app_bundle):
    body = "echo TI_MOCHA_RESULT_START\necho '{\"total\": 2}'\necho TI_MOCHA_RESULT_STOP\nexec sleep 5"
    monkeypatch.setenv("SIMLAUNCH_LAUNCHER", str(make_launcher(body)))

    result = runner.invoke(
        app, ["simulator", "launch", str(app_bundle), "--sdk", "17.2", "--unit", "--json"]
    )

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"kind": "success", "payload": {"total": 2}}


def test_launch_failure_exit_code(monkeypatch, make_launcher, app_bundle):
    monkeypatch.setenv("SIMLAUNCH_LAUNCHER", str(make_launcher("echo hello\nexit 5")))

    result = runner.invoke(app, ["simulator", "launch", str(app_bundle), "--sdk", "17.2"])

    assert result.exit_code == 1
    assert "hello" in result.stdout
    assert "exited with 5" in result.stdout


@pytest.mark.parametrize(
    ("flags", "hidden"),
    [(["--hide"], True), (["--show"], False), (["--auto-exit"], True), ([], False)],
)
def test_launch_sets_window_visibility(monkeypatch, make_launcher, app_bundle, flags, hidden):
    monkeypatch.setenv("SIMLAUNCH_LAUNCHER", str(make_launcher("exit 0")))

    result = runner.invoke(app, ["simulator", "launch", str(app_bundle), "--sdk", "17.2", *flags])

    assert result.exit_code == 0, result.output
    assert visibility_calls == [("Simulator", hidden)]


def test_launch_without_sdk_reports_error(monkeypatch, make_launcher, app_bundle):
    monkeypatch.setenv("SIMLAUNCH_LAUNCHER", str(make_launcher("exit 0")))

    result = runner.invoke(app, ["simulator", "launch", str(app_bundle)])

    assert result.exit_code == 1
    assert "No SDK specified" in result.stdout


def test_launch_without_launcher_reports_missing_tool(monkeypatch, app_bundle, tmp_path):
    monkeypatch.setenv("SIMLAUNCH_LAUNCHER", str(tmp_path / "nowhere"))
    monkeypatch.setenv("PATH", str(tmp_path))

    result = runner.invoke(app, ["simulator", "launch", str(app_bundle), "--sdk", "17.2"])

    assert result.exit_code == 1
    assert "Required tool not found: ios-sim" in result.stdout


def test_stop_command():
    result = runner.invoke(app, ["simulator", "stop"])

    assert result.exit_code == 0
    assert "Simulator stopped" in result.stdout
