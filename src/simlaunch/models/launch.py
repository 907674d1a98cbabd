"""Pydantic models for simulator launch requests and outcomes."""

from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LogChannel(StrEnum):
    """Origin of a forwarded log line."""

    STDOUT = "stdout"
    STDERR = "stderr"
    LOG_FILE = "log file"


class SessionState(StrEnum):
    """Lifecycle state of a launch session."""

    IDLE = "idle"
    LAUNCHING = "launching"
    RUNNING = "running"
    COMPLETED = "completed"


class LaunchRequest(BaseModel):
    """Parameters of a single simulator launch."""

    model_config = ConfigDict(frozen=True)

    app_path: Path
    """Path to the application bundle (e.g., build/Foo.app)."""

    sdk: str | None = None
    """Platform/SDK identifier. Defaults to the default toolchain's version."""

    hide: bool | None = None
    """Run the simulator window hidden. Defaults to True when auto_exit is set."""

    auto_exit: bool = False
    """Finish as soon as the app logs the auto-exit sentinel."""

    unit: bool = False
    """Collect the structured test-result block from the log output."""

    timeout_ms: int | None = Field(default=None, gt=0)
    """Watchdog window in milliseconds. No watchdog when None."""

    retina: bool = True
    tall: bool = True
    sim64bit: bool = True

    @model_validator(mode="before")
    @classmethod
    def _hide_when_auto_exit(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("auto_exit") and data.get("hide") is None:
            return {**data, "hide": True}
        return data

    @property
    def name(self) -> str:
        """Display name: bundle base name without its extension."""
        return self.app_path.stem

    @property
    def hidden(self) -> bool:
        """Whether the simulator window should be hidden."""
        return bool(self.hide)


class CrashReport(BaseModel):
    """A crash report written by the OS crash reporter."""

    model_config = ConfigDict(ser_json_bytes="base64")

    path: Path
    """Path to the binary (plist) report."""

    text_path: Path
    """Path to the companion human-readable report."""

    contents: dict[str, Any] = Field(default_factory=dict)
    """Parsed plist contents."""


class Success(BaseModel):
    """The launch finished normally."""

    kind: Literal["success"] = "success"

    payload: Any = None
    """Structured test results, when a result block was captured."""

    @property
    def ok(self) -> bool:
        return True

    def describe(self) -> str:
        if self.payload is None:
            return "launch finished"
        return "launch finished with test results"


class Crashed(BaseModel):
    """The app crashed and the OS wrote a crash report."""

    kind: Literal["crashed"] = "crashed"
    report: CrashReport

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return "launch crashed"


class TimedOut(BaseModel):
    """No log activity within the watchdog window."""

    kind: Literal["timed_out"] = "timed_out"

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return "launch timed out"


class SignalTerminated(BaseModel):
    """The launcher was killed by a signal."""

    kind: Literal["signal_terminated"] = "signal_terminated"
    signal: str

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"signal received: {self.signal}"


class ProcessFailed(BaseModel):
    """The launcher could not be started."""

    kind: Literal["process_failed"] = "process_failed"
    error: str

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return self.error


class ExitedNonZero(BaseModel):
    """The launcher exited with a non-zero code."""

    kind: Literal["exited_non_zero"] = "exited_non_zero"
    exit_code: int

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"exited with {self.exit_code}"


LaunchOutcome = Annotated[
    Success | Crashed | TimedOut | SignalTerminated | ProcessFailed | ExitedNonZero,
    Field(discriminator="kind"),
]
