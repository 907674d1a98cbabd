"""Discovery and tailing of the app's own log file inside the simulator."""

import asyncio
import glob
import logging
from collections.abc import Callable
from pathlib import Path

import aiofiles

from simlaunch.core.router import LogRouter

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.05
LOG_SUFFIX = ".log"


def find_app_log(sim_app_dir: Path, app_name: str) -> Path | None:
    """Find the log file of an installed app.

    The simulator creates the log in the ``Documents`` directory next to the
    installed ``<app_name>.app``. Several installed copies may exist; the
    first one with a log file wins.

    Returns:
        Path to the log file, or None if it does not exist yet.
    """
    try:
        installs = sorted(sim_app_dir.rglob(f"{glob.escape(app_name)}.app"))
    except OSError:
        return None

    for install in installs:
        documents = install.parent / "Documents"
        try:
            logs = sorted(p for p in documents.iterdir() if p.suffix == LOG_SUFFIX)
        except OSError:
            continue
        # Only one log file per app is supported
        if logs and logs[0].is_file():
            return logs[0]

    return None


class LogFileWatcher:
    """Waits for the app log file to appear, then streams it into a router."""

    def __init__(
        self,
        sim_app_dir: Path,
        app_name: str,
        router: LogRouter,
        *,
        is_done: Callable[[], bool],
        poll_interval: float = POLL_INTERVAL,
    ):
        self.sim_app_dir = sim_app_dir
        self.app_name = app_name
        self.router = router
        self.poll_interval = poll_interval
        self.path: Path | None = None
        self._is_done = is_done
        self._handle = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    async def run(self) -> None:
        """Search for the log file until found or the session ends, then tail it."""
        try:
            path = await self._wait_for_log()
            if path is None:
                return
            self.path = path
            logger.debug("Tailing app log %s", path)
            self._handle = await aiofiles.open(
                path, "r", encoding="utf-8", errors="replace"
            )
            await self._tail()
        finally:
            await self.close()

    async def _wait_for_log(self) -> Path | None:
        while not self._is_done():
            path = await asyncio.to_thread(find_app_log, self.sim_app_dir, self.app_name)
            if self._is_done():
                return None
            if path is not None:
                return path
            await asyncio.sleep(self.poll_interval)
        return None

    async def _tail(self) -> None:
        partial = ""
        while not self._is_done():
            chunk = await self._handle.readline()
            if not chunk:
                await asyncio.sleep(self.poll_interval)
                continue
            if not chunk.endswith("\n"):
                # The app is still writing this line
                partial += chunk
                continue
            line, partial = partial + chunk, ""
            if self._is_done():
                return
            self.router.route(line.rstrip("\r\n"))

    async def close(self) -> None:
        """Close the tailed file, if open."""
        handle, self._handle = self._handle, None
        if handle is not None:
            await handle.close()
