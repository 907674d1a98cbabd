"""Crash report detection by diffing the diagnostic reports directory."""

import logging
import plistlib
from pathlib import Path
from xml.parsers.expat import ExpatError

from simlaunch.models.launch import CrashReport

logger = logging.getLogger(__name__)

CRASH_REPORT_SUFFIX = ".plist"


def snapshot(crash_dir: Path) -> set[str]:
    """Return the names of crash reports currently in ``crash_dir``.

    An unreadable or missing directory yields an empty set.
    """
    try:
        return {
            entry.name
            for entry in crash_dir.iterdir()
            if entry.suffix == CRASH_REPORT_SUFFIX
        }
    except OSError:
        return set()


def diff(before: set[str], after: set[str]) -> str | None:
    """Return the first report name that appears in ``after`` only."""
    added = sorted(after - before)
    return added[0] if added else None


def text_report_path(report_path: Path) -> Path:
    """Path of the human-readable report that accompanies a plist report.

    The text report lives next to the plist, named without the leading
    character and without the ``.plist`` extension.
    """
    return report_path.with_name(report_path.name[1:].removesuffix(CRASH_REPORT_SUFFIX))


def load_report(crash_dir: Path, name: str) -> CrashReport:
    """Load a crash report from ``crash_dir``.

    A report that cannot be read or parsed (e.g., still being flushed) is
    returned with empty contents.
    """
    path = crash_dir / name
    contents: dict = {}
    try:
        with path.open("rb") as f:
            data = plistlib.load(f)
        if isinstance(data, dict):
            contents = data
    except (OSError, ValueError, ExpatError) as e:
        logger.debug("Could not parse crash report %s: %s", path, e)

    return CrashReport(path=path, text_path=text_report_path(path), contents=contents)


class CrashSnapshot:
    """Baseline of crash reports, taken before launch."""

    def __init__(self, crash_dir: Path):
        self.crash_dir = crash_dir
        self.baseline = snapshot(crash_dir)

    def check(self) -> CrashReport | None:
        """Re-snapshot and return the newly written report, if any."""
        name = diff(self.baseline, snapshot(self.crash_dir))
        if name is None:
            return None
        logger.debug("New crash report detected: %s", name)
        return load_report(self.crash_dir, name)
