"""External tool resolution."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Final

from simlaunch.exceptions import ToolNotFoundError
from simlaunch.utils.config import get_config_value

LAUNCHER_ENV_VAR: Final[str] = "SIMLAUNCH_LAUNCHER"
LAUNCHER_CONFIG_KEY: Final[str] = "launcher_path"
LAUNCHER_NAME: Final[str] = "ios-sim"
LAUNCHER_INSTALL_HINT: Final[str] = (
    "https://github.com/ios-control/ios-sim — set SIMLAUNCH_LAUNCHER, "
    "configure ~/.simlaunch/config.json, or add ios-sim to PATH"
)


def _resolve_executable(raw_value: str | None) -> Path | None:
    if not raw_value:
        return None

    candidate = Path(raw_value).expanduser()
    if candidate.is_file() and os.access(candidate, os.X_OK):
        return candidate

    if candidate.is_dir():
        nested = candidate / LAUNCHER_NAME
        if nested.is_file() and os.access(nested, os.X_OK):
            return nested

    return None


def resolve_launcher() -> Path | None:
    """Resolve the simulator launcher via env/config/PATH."""

    path = _resolve_executable(os.environ.get(LAUNCHER_ENV_VAR))
    if path is None:
        cfg_value = get_config_value(LAUNCHER_CONFIG_KEY)
        path = _resolve_executable(cfg_value if isinstance(cfg_value, str) else None)

    if path is not None:
        return path

    found = shutil.which(LAUNCHER_NAME)
    if found:
        return Path(found)

    return None


def get_launcher_path() -> Path:
    """Get the full path to the simulator launcher.

    Returns:
        Path to the launcher executable.

    Raises:
        ToolNotFoundError: If the launcher is not found.
    """
    path = resolve_launcher()
    if path is None:
        raise ToolNotFoundError(LAUNCHER_NAME, LAUNCHER_INSTALL_HINT)
    return path
