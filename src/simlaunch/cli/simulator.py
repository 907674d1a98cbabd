"""CLI commands for launching and stopping the simulator."""

import asyncio
import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.json import JSON

from simlaunch.core import simulator
from simlaunch.core.session import launch
from simlaunch.exceptions import SimlaunchError
from simlaunch.models.launch import (
    Crashed,
    LaunchOutcome,
    LaunchRequest,
    LogChannel,
    TimedOut,
)
from simlaunch.utils.config import get_config_value, get_default_timeout_ms
from simlaunch.utils.deps import get_launcher_path
from simlaunch.utils.output import console

app = typer.Typer(no_args_is_help=True)


def _print_line(channel: LogChannel, text: str) -> None:
    console.print_log_line(channel.value, text)


def _report(outcome: LaunchOutcome) -> None:
    """Display the outcome of a launch."""
    if outcome.ok:
        console.print_success(outcome.describe())
        if outcome.payload is not None:
            console.print(JSON.from_data(outcome.payload))
        return

    if isinstance(outcome, TimedOut):
        console.print_warning(outcome.describe())
        return

    console.print_error(outcome.describe())
    if isinstance(outcome, Crashed):
        console.print_info(f"Crash report: {outcome.report.path}")
        console.print_info(f"Text report: {outcome.report.text_path}")


@app.command("launch")
def launch_app(
    app_path: Path = typer.Argument(
        ...,
        help="Path to the .app bundle to launch.",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    sdk: str = typer.Option(
        None,
        "--sdk",
        "-s",
        help="SDK version to launch with (default: config 'default_sdk').",
    ),
    hide: bool | None = typer.Option(
        None,
        "--hide/--show",
        help="Hide the simulator window (default: hidden with --auto-exit).",
    ),
    auto_exit: bool = typer.Option(
        False,
        "--auto-exit",
        help="Finish when the app logs AUTO_EXIT.",
    ),
    unit: bool = typer.Option(
        False,
        "--unit",
        "-u",
        help="Collect the test results block from the app log.",
    ),
    timeout: int = typer.Option(
        None,
        "--timeout",
        "-t",
        min=1,
        help="Fail after this many milliseconds without log output.",
    ),
    no_retina: bool = typer.Option(False, "--no-retina", help="Launch without --retina."),
    no_tall: bool = typer.Option(False, "--no-tall", help="Launch without --tall."),
    no_64bit: bool = typer.Option(
        False, "--no-64bit", help="Launch without --sim-64bit."
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the outcome as JSON (suppresses log lines).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Show debug logging.",
    ),
) -> None:
    """Launch an app in the simulator and wait until it finishes.

    Log output of the launcher and of the app's own log file is printed as it
    arrives. Exits 0 when the launch finished normally and 1 otherwise.
    """
    console.set_json_mode(json_output)
    console.setup_logging(verbose)

    try:
        launcher = get_launcher_path()
        request = LaunchRequest(
            app_path=app_path,
            sdk=sdk or get_config_value("default_sdk"),
            hide=hide,
            auto_exit=auto_exit,
            unit=unit,
            timeout_ms=timeout or get_default_timeout_ms(),
            retina=not no_retina,
            tall=not no_tall,
            sim64bit=not no_64bit,
        )
        outcome = asyncio.run(launch(request, launcher=launcher, sink=_print_line))
    except KeyboardInterrupt:
        simulator.stop()
        raise typer.Exit(130) from None
    except (SimlaunchError, ValidationError) as e:
        console.print_error(str(e))
        raise typer.Exit(1) from None

    if json_output:
        typer.echo(json.dumps(outcome.model_dump(mode="json"), indent=2))
    else:
        _report(outcome)

    if not outcome.ok:
        raise typer.Exit(1)


@app.command("stop")
def stop_simulator() -> None:
    """Stop a running simulator (no-op when none is running)."""
    simulator.stop()
    console.print_success("Simulator stopped")
