"""Launcher process spawning and output pumping."""

import asyncio
import contextlib
import logging
import signal
from collections.abc import Awaitable, Callable
from pathlib import Path

from simlaunch.core.router import LogRouter

logger = logging.getLogger(__name__)

# Simulator logs can carry long lines (stack traces, JSON results).
STREAM_LIMIT = 1024 * 1024


def split_returncode(returncode: int) -> tuple[int | None, str | None]:
    """Split an asyncio return code into (exit_code, signal_name).

    A negative return code means the process was killed by a signal.
    """
    if returncode >= 0:
        return returncode, None
    try:
        return None, signal.Signals(-returncode).name
    except ValueError:
        return None, f"SIG{-returncode}"


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r\n")


class ProcessWatcher:
    """Runs the launcher and feeds its output streams into routers."""

    def __init__(
        self,
        executable: Path,
        args: list[str],
        *,
        stdout_router: LogRouter,
        stderr_router: LogRouter,
        on_close: Callable[[int | None, str | None], Awaitable[None]],
    ):
        """Initialize the watcher.

        Args:
            executable: Launcher executable.
            args: Launcher arguments.
            stdout_router: Router fed with stdout lines.
            stderr_router: Router fed with stderr lines.
            on_close: Awaited with (exit_code, signal_name) once the process
                exited and both streams are drained.
        """
        self.executable = executable
        self.args = args
        self.stdout_router = stdout_router
        self.stderr_router = stderr_router
        self._on_close = on_close
        self.process: asyncio.subprocess.Process | None = None

    @property
    def command(self) -> list[str]:
        return [str(self.executable), *self.args]

    async def spawn(self) -> None:
        """Start the launcher.

        Raises:
            OSError: If the executable cannot be started.
        """
        self.process = await asyncio.create_subprocess_exec(
            *self.command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
        )
        logger.debug("Spawned launcher (pid %s)", self.process.pid)

    async def watch(self) -> None:
        """Pump both output streams, then report the exit."""
        if self.process is None:
            raise RuntimeError("watch() called before spawn()")

        await asyncio.gather(
            self._pump(self.process.stdout, self.stdout_router),
            self._pump(self.process.stderr, self.stderr_router),
        )
        returncode = await self.process.wait()
        exit_code, signal_name = split_returncode(returncode)
        logger.debug("Launcher closed (exit=%s, signal=%s)", exit_code, signal_name)
        await self._on_close(exit_code, signal_name)

    @staticmethod
    async def _pump(stream: asyncio.StreamReader | None, router: LogRouter) -> None:
        if stream is None:
            return
        # Holds the head of a line longer than the stream limit
        overflow = bytearray()
        while True:
            try:
                raw = await stream.readuntil(b"\n")
            except asyncio.LimitOverrunError as e:
                overflow += await stream.read(e.consumed)
                continue
            except asyncio.IncompleteReadError as e:
                # EOF: route a trailing line without newline
                if overflow or e.partial:
                    router.route(_decode(overflow + e.partial))
                return
            if overflow:
                logger.debug("Routing over-long line (%d bytes)", len(overflow) + len(raw))
                raw = bytes(overflow + raw)
                overflow.clear()
            router.route(_decode(raw))

    def terminate(self) -> None:
        """Kill the launcher if it is still running."""
        if self.process is None or self.process.returncode is not None:
            return
        with contextlib.suppress(ProcessLookupError):
            self.process.kill()
