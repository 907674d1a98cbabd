"""Pydantic models for installed toolchains."""

from pathlib import Path

from pydantic import BaseModel


class Toolchain(BaseModel):
    """An installed toolchain (e.g., an Xcode install), as found by discovery."""

    path: Path
    """Developer directory of the toolchain."""

    version: str
    """Toolchain version (e.g., 15.2). Doubles as the default SDK."""

    build: str
    """Build identifier (e.g., 15C500b)."""

    simulator_app: str = "Simulator"
    """Process name of the simulator application."""

    @property
    def id(self) -> str:
        """Unique toolchain identifier."""
        return f"{self.version}:{self.build}"
