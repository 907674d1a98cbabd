"""Typed exception hierarchy for simlaunch."""


class SimlaunchError(Exception):
    """Base exception for all simlaunch errors."""

    pass


class ToolNotFoundError(SimlaunchError):
    """Raised when a required external tool is not installed."""

    def __init__(self, tool: str, install_hint: str | None = None):
        self.tool = tool
        self.install_hint = install_hint
        message = f"Required tool not found: {tool}"
        if install_hint:
            message += f"\nInstall: {install_hint}"
        super().__init__(message)


class ProcessError(SimlaunchError):
    """Raised when a subprocess command fails."""

    def __init__(self, command: list[str], returncode: int, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        cmd_str = " ".join(command)
        super().__init__(f"Command failed (exit {returncode}): {cmd_str}\n{stderr}")


class LaunchError(SimlaunchError):
    """Raised when a launch cannot be started."""

    pass


class SessionStateError(LaunchError):
    """Raised when a session is started twice."""

    pass
