"""Line router: marker detection and forwarding of simulator log output."""

import json
import logging
import re
import time
from collections.abc import Callable
from typing import Any

from simlaunch.models.launch import LaunchOutcome, LaunchRequest, LogChannel, Success

logger = logging.getLogger(__name__)

AUTO_EXIT_MARKER = "AUTO_EXIT"
RESULT_BEGIN_MARKER = "TI_MOCHA_RESULT_START"
RESULT_END_MARKER = "TI_MOCHA_RESULT_STOP"

# The app handed control back to SpringBoard (home button, app quit).
TERMINATION_PATTERN = re.compile(r"Terminating in response to SpringBoard")

LineSink = Callable[[LogChannel, str], None]


def parse_payload(lines: list[str]) -> Any:
    """Parse the lines of a result block as one JSON document.

    An empty or malformed block yields an empty dict.
    """
    text = "\n".join(lines).strip()
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError as e:
        logger.debug("Discarding malformed test result block: %s", e)
        return {}


class LogRouter:
    """Routes the lines of one log source.

    Marker lines are turned into completion signals, lines inside a result
    block are buffered, and everything else goes to the sink.
    """

    def __init__(
        self,
        channel: LogChannel,
        request: LaunchRequest,
        *,
        finish: Callable[[LaunchOutcome], None],
        sink: LineSink | None = None,
        is_done: Callable[[], bool] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the router.

        Args:
            channel: Label attached to forwarded lines.
            request: Launch request (auto_exit and unit flags).
            finish: Called with the outcome when a marker ends the launch.
            sink: Receives ordinary lines as (channel, text).
            is_done: Returns True once the owning session has completed.
            clock: Monotonic clock used for the activity timestamp.
        """
        self.channel = channel
        self.auto_exit = request.auto_exit
        self.unit = request.unit
        self._finish = finish
        self._sink = sink
        self._is_done = is_done or (lambda: False)
        self._clock = clock

        self.last_activity = clock()
        self.in_block = False
        self.block_lines: list[str] = []
        self.stopped = False

    def _signal(self, outcome: LaunchOutcome) -> None:
        self.stopped = True
        self._finish(outcome)

    def route(self, line: str) -> None:
        """Route one line of output."""
        self.last_activity = self._clock()

        if self.stopped or self._is_done():
            return

        message = line.strip()

        if self.auto_exit and message == AUTO_EXIT_MARKER:
            self._signal(Success())
            return

        if TERMINATION_PATTERN.search(line):
            self._signal(Success())
            return

        if self.unit and message == RESULT_BEGIN_MARKER:
            self.in_block = True
            self.block_lines = []
            return

        if self.in_block and message == RESULT_END_MARKER:
            self.in_block = False
            lines, self.block_lines = self.block_lines, []
            self._signal(Success(payload=parse_payload(lines)))
            return

        if self.in_block:
            self.block_lines.append(line)
            return

        if self._sink is not None:
            self._sink(self.channel, line)
