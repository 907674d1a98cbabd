"""Simulator control: stopping, launch arguments, and install cleanup."""

import glob
import logging
import shutil
from pathlib import Path

from simlaunch.exceptions import ProcessError
from simlaunch.models.launch import LaunchRequest
from simlaunch.utils.process import run_tool

logger = logging.getLogger(__name__)

DEFAULT_SIMULATOR_APP = "Simulator"

# Leftover simulator daemons and launchers from a previous run
STALE_PROCESS_PATTERN = "launchd_sim|ios-sim"

STOP_TIMEOUT = 10.0


def stop(simulator_app: str = DEFAULT_SIMULATOR_APP) -> None:
    """Stop a running simulator.

    Quits the simulator app, then kills any leftover simulator processes.
    Safe to call when nothing is running; never raises.
    """
    commands = [
        ["osascript", "-e", f'tell app "{simulator_app}" to quit'],
        ["pkill", "-9", "-f", STALE_PROCESS_PATTERN],
    ]
    for command in commands:
        try:
            run_tool(command, check=False, timeout=STOP_TIMEOUT)
        except ProcessError as e:
            logger.debug("Ignoring failed stop command: %s", e)


def build_launch_args(request: LaunchRequest, sdk: str) -> list[str]:
    """Build the launcher argument list for a request."""
    args = ["launch", str(request.app_path), "--sdk", sdk]
    if request.retina:
        args.append("--retina")
    if request.tall:
        args.append("--tall")
    if request.sim64bit:
        args.append("--sim-64bit")
    return args


def remove_stale_installs(sim_app_dir: Path, app_name: str) -> list[Path]:
    """Delete previously installed copies of an app (and their logs).

    Returns:
        The removed install directories.
    """
    try:
        installs = sorted(sim_app_dir.rglob(f"{glob.escape(app_name)}.app"))
    except OSError:
        return []

    removed = []
    for install in installs:
        if install.is_dir():
            logger.debug("Removing stale install %s", install)
            shutil.rmtree(install, ignore_errors=True)
            removed.append(install)
    return removed


def set_window_visibility(simulator_app: str, hide: bool) -> None:
    """Hide or bring forward the simulator window. Best-effort."""
    if hide:
        script = (
            'tell application "System Events" to set visible of process '
            f'"{simulator_app}" to false'
        )
    else:
        script = f'tell application "{simulator_app}" to activate'

    try:
        run_tool(["osascript", "-e", script], check=False, timeout=STOP_TIMEOUT)
    except ProcessError as e:
        logger.debug("Could not change simulator visibility: %s", e)
