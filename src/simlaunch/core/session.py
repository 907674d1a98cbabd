"""Launch session: runs the simulator and reports exactly one outcome."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from simlaunch.core import simulator
from simlaunch.core.crash import CrashSnapshot
from simlaunch.core.logfile import POLL_INTERVAL, LogFileWatcher
from simlaunch.core.process import ProcessWatcher
from simlaunch.core.router import LineSink, LogRouter
from simlaunch.core.watchdog import Watchdog
from simlaunch.exceptions import LaunchError, SessionStateError
from simlaunch.models.launch import (
    Crashed,
    CrashReport,
    ExitedNonZero,
    LaunchOutcome,
    LaunchRequest,
    LogChannel,
    ProcessFailed,
    SessionState,
    SignalTerminated,
    Success,
    TimedOut,
)
from simlaunch.models.toolchain import Toolchain
from simlaunch.utils.deps import get_launcher_path
from simlaunch.utils.paths import get_crash_dir, get_sim_app_dir

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[LaunchOutcome], None]

# How long to wait for background work after the outcome is known
DRAIN_TIMEOUT = 5.0


class LaunchSession:
    """One simulator launch.

    The session owns the launcher process, the log file watcher and the
    watchdog. All of them report into ``complete()``, which accepts the
    first outcome and discards the rest.
    """

    def __init__(
        self,
        request: LaunchRequest,
        *,
        launcher: Path,
        toolchains: Sequence[Toolchain] = (),
        sink: LineSink | None = None,
        callback: OutcomeCallback | None = None,
        sim_app_dir: Path | None = None,
        crash_dir: Path | None = None,
        stopper: Callable[[], None] | None = None,
        poll_interval: float = POLL_INTERVAL,
    ):
        """Initialize a launch session.

        Args:
            request: What to launch and how.
            launcher: Path to the simulator launcher executable.
            toolchains: Installed toolchains; the first one is the default.
            sink: Receives forwarded log lines as (channel, text).
            callback: Receives the outcome, exactly once.
            sim_app_dir: Simulator application-support directory.
            crash_dir: Directory the OS writes crash reports to.
            stopper: Stops the simulator. Defaults to ``simulator.stop`` for
                the session's simulator app.
            poll_interval: Log file search/tail interval in seconds.
        """
        self.request = request
        self.launcher = launcher
        self.toolchains = list(toolchains)
        self.sim_app_dir = sim_app_dir or get_sim_app_dir()
        self.crash_dir = crash_dir or get_crash_dir()
        self.poll_interval = poll_interval
        self._callback = callback
        self._stopper = stopper or (lambda: simulator.stop(self.simulator_app))

        self.state = SessionState.IDLE
        self.completed = False
        self.outcome: LaunchOutcome | None = None

        self.routers = {
            channel: LogRouter(
                channel,
                request,
                finish=self.complete,
                sink=sink,
                is_done=lambda: self.completed,
            )
            for channel in LogChannel
        }

        self.crashes: CrashSnapshot | None = None
        self.process: ProcessWatcher | None = None
        self.log_watcher: LogFileWatcher | None = None
        self.watchdog: Watchdog | None = None

        self._loop: asyncio.AbstractEventLoop | None = None
        self._done: asyncio.Future[LaunchOutcome] | None = None
        self._watchdog_task: asyncio.Task | None = None
        self._tasks: list[asyncio.Task] = []

    @property
    def last_activity(self) -> float:
        """Most recent activity across all log sources."""
        return max(router.last_activity for router in self.routers.values())

    @property
    def toolchain(self) -> Toolchain | None:
        return self.toolchains[0] if self.toolchains else None

    @property
    def simulator_app(self) -> str:
        """Process name of the simulator app this session drives."""
        if self.toolchain is not None and self.toolchain.simulator_app:
            return self.toolchain.simulator_app
        return simulator.DEFAULT_SIMULATOR_APP

    def resolve_sdk(self) -> str:
        """Return the requested SDK, or the default toolchain's version.

        Raises:
            LaunchError: If neither is available.
        """
        if self.request.sdk:
            return self.request.sdk
        if self.toolchain is not None:
            return self.toolchain.version
        raise LaunchError("No SDK specified and no toolchain available")

    def _spawn_task(self, coro) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        task.add_done_callback(self._task_finished)
        self._tasks.append(task)
        return task

    def _task_finished(self, task: asyncio.Task) -> None:
        if task.cancelled() or task.exception() is None:
            return
        exc = task.exception()
        logger.error("Launch task failed: %s", exc, exc_info=exc)
        self.complete(ProcessFailed(error=f"internal error: {exc}"))

    async def start(self) -> None:
        """Stop any running simulator and start the launch.

        Raises:
            SessionStateError: If the session was already started.
            LaunchError: If the request cannot be launched.
        """
        if self.state != SessionState.IDLE:
            raise SessionStateError(f"Session already {self.state.value}")

        if not self.request.app_path.exists():
            raise LaunchError(f"App bundle not found: {self.request.app_path}")
        sdk = self.resolve_sdk()

        self._loop = asyncio.get_running_loop()
        self._done = self._loop.create_future()
        self.state = SessionState.LAUNCHING

        # Make sure no simulator is left over from a previous run
        await asyncio.to_thread(self._stop_simulator)
        await asyncio.to_thread(
            simulator.remove_stale_installs, self.sim_app_dir, self.request.name
        )

        self.crashes = CrashSnapshot(self.crash_dir)

        args = simulator.build_launch_args(self.request, sdk)
        logger.debug("Launching %s with args: %s", self.launcher, " ".join(args))

        self.process = ProcessWatcher(
            self.launcher,
            args,
            stdout_router=self.routers[LogChannel.STDOUT],
            stderr_router=self.routers[LogChannel.STDERR],
            on_close=self._on_process_close,
        )
        try:
            await self.process.spawn()
        except OSError as e:
            self.complete(ProcessFailed(error=f"failed to start {self.launcher}: {e}"))
            return

        self.state = SessionState.RUNNING
        self._spawn_task(self.process.watch())

        self.log_watcher = LogFileWatcher(
            self.sim_app_dir,
            self.request.name,
            self.routers[LogChannel.LOG_FILE],
            is_done=lambda: self.completed,
            poll_interval=self.poll_interval,
        )
        self._spawn_task(self.log_watcher.run())

        if self.request.timeout_ms:
            self.watchdog = Watchdog(
                self.request.timeout_ms,
                lambda: self.last_activity,
                self._on_watchdog_expired,
            )
            self._watchdog_task = self._spawn_task(self.watchdog.run())

        self._spawn_task(
            asyncio.to_thread(
                simulator.set_window_visibility,
                self.simulator_app,
                self.request.hidden,
            )
        )

    async def wait(self) -> LaunchOutcome:
        """Wait for the outcome, then for background work to wind down."""
        if self._done is None:
            raise SessionStateError("Session was not started")
        outcome = await asyncio.shield(self._done)
        await self._drain()
        return outcome

    async def run(self) -> LaunchOutcome:
        """Start the session and wait for its outcome."""
        await self.start()
        return await self.wait()

    async def _drain(self) -> None:
        pending = [task for task in self._tasks if not task.done()]
        if not pending:
            return
        _, still_pending = await asyncio.wait(pending, timeout=DRAIN_TIMEOUT)
        for task in still_pending:
            task.cancel()
        if still_pending:
            await asyncio.gather(*still_pending, return_exceptions=True)

    def complete(self, outcome: LaunchOutcome) -> None:
        """Finish the session with ``outcome``.

        Only the first call has any effect.
        """
        if self.completed:
            logger.debug("Discarding late outcome: %s", outcome.describe())
            return
        self.completed = True
        self.state = SessionState.COMPLETED
        self.outcome = outcome
        logger.debug("Launch completed: %s", outcome.describe())

        loop = self._loop or asyncio.get_running_loop()

        if self._watchdog_task is not None:
            self._watchdog_task.cancel()
            self._watchdog_task = None
        # The log watcher checks the guard on every step and closes its file
        if self.process is not None:
            self.process.terminate()

        stop_task = loop.create_task(asyncio.to_thread(self._stop_simulator))
        self._tasks.append(stop_task)

        if self._callback is not None:
            callback, self._callback = self._callback, None
            loop.call_soon(callback, outcome)
        if self._done is not None and not self._done.done():
            self._done.set_result(outcome)

    def _stop_simulator(self) -> None:
        try:
            self._stopper()
        except Exception as e:
            logger.debug("Ignoring simulator stop failure: %s", e)

    async def _check_crash(self) -> CrashReport | None:
        if self.crashes is None:
            return None
        return await asyncio.to_thread(self.crashes.check)

    async def _on_process_close(self, exit_code: int | None, signal_name: str | None) -> None:
        if self.completed:
            return
        # The crash reporter may only just have written its report
        report = await self._check_crash()
        if report is not None:
            self.complete(Crashed(report=report))
        elif signal_name:
            self.complete(SignalTerminated(signal=signal_name))
        elif exit_code:
            self.complete(ExitedNonZero(exit_code=exit_code))
        else:
            self.complete(Success())

    def _on_watchdog_expired(self) -> None:
        if not self.completed:
            self._spawn_task(self._finish_timed_out())

    async def _finish_timed_out(self) -> None:
        report = await self._check_crash()
        if report is not None:
            self.complete(Crashed(report=report))
        else:
            self.complete(TimedOut())


async def launch(
    request: LaunchRequest,
    *,
    launcher: Path | None = None,
    toolchains: Sequence[Toolchain] = (),
    sink: LineSink | None = None,
    callback: OutcomeCallback | None = None,
    sim_app_dir: Path | None = None,
    crash_dir: Path | None = None,
) -> LaunchOutcome:
    """Launch an app in the simulator and wait for the outcome.

    Args:
        request: What to launch and how.
        launcher: Launcher executable. Resolved via env/config/PATH if None.
        toolchains: Installed toolchains; the first one is the default.
        sink: Receives forwarded log lines as (channel, text).
        callback: Receives the outcome, exactly once.
        sim_app_dir: Override for the simulator application-support directory.
        crash_dir: Override for the crash report directory.

    Returns:
        The launch outcome.

    Raises:
        ToolNotFoundError: If no launcher is given and none can be found.
        LaunchError: If the request cannot be launched.
    """
    session = LaunchSession(
        request,
        launcher=launcher or get_launcher_path(),
        toolchains=toolchains,
        sink=sink,
        callback=callback,
        sim_app_dir=sim_app_dir,
        crash_dir=crash_dir,
    )
    return await session.run()
