"""Simulator directory detection utilities."""

import os
from pathlib import Path

from simlaunch.utils.config import get_config_value

SIM_APP_DIR_ENV_VAR = "SIMLAUNCH_SIM_APP_DIR"
CRASH_DIR_ENV_VAR = "SIMLAUNCH_CRASH_DIR"


def _resolve_dir(env_var: str, config_key: str, default: Path) -> Path:
    if value := os.environ.get(env_var):
        return Path(value).expanduser()

    cfg_value = get_config_value(config_key)
    if isinstance(cfg_value, str) and cfg_value:
        return Path(cfg_value).expanduser()

    return default


def get_sim_app_dir() -> Path:
    """Get the per-user directory where the simulator installs applications.

    Checks the SIMLAUNCH_SIM_APP_DIR environment variable, then the
    ``sim_app_dir`` config key, then the default location.

    Returns:
        Path to the simulator's application-support directory. It may not
        exist yet.
    """
    return _resolve_dir(
        SIM_APP_DIR_ENV_VAR,
        "sim_app_dir",
        Path.home() / "Library" / "Application Support" / "iPhone Simulator",
    )


def get_crash_dir() -> Path:
    """Get the per-user directory where the OS writes crash reports.

    Checks the SIMLAUNCH_CRASH_DIR environment variable, then the
    ``crash_dir`` config key, then the default location.

    Returns:
        Path to the diagnostic reports directory. It may not exist yet.
    """
    return _resolve_dir(
        CRASH_DIR_ENV_VAR,
        "crash_dir",
        Path.home() / "Library" / "Logs" / "DiagnosticReports",
    )
