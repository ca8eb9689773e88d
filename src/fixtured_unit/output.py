"""Routing of log output into the current test's output channel.

The root container is shared by every test, but each test has its own
output channel. InjectableOutputSink is a single logging handler registered
in the container; each test injects its channel on start and ejects it on
teardown, so records always land in the output of the test that is running.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import Protocol, override

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class OutputChannel(Protocol):
    """Per-test output destination."""

    def write_line(self, message: str) -> None:
        """Write a single line of output."""
        ...


class CapturedOutput:
    """Output channel that keeps every line and echoes it to stdout.

    Echoing goes to whatever ``sys.stdout`` is at write time, so pytest's
    per-test capture shows the lines alongside a failing test.
    """

    def __init__(self, echo: bool = True) -> None:
        self.lines: list[str] = []
        self._echo = echo

    def write_line(self, message: str) -> None:
        """Record a line and optionally echo it."""
        self.lines.append(message)
        if self._echo:
            print(message, file=sys.stdout)

    @property
    def text(self) -> str:
        """All captured lines joined with newlines."""
        return "\n".join(self.lines)


class InjectableOutputSink(logging.Handler):
    """Logging handler that forwards records to an injected output channel.

    Records emitted while no channel is injected are dropped.
    """

    def __init__(self, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        self._channel: OutputChannel | None = None
        self._channel_lock = threading.Lock()

    @property
    def channel(self) -> OutputChannel | None:
        """Currently injected output channel."""
        return self._channel

    def inject(self, channel: OutputChannel) -> None:
        """Route subsequent records to ``channel``."""
        with self._channel_lock:
            self._channel = channel

    def eject(self, channel: OutputChannel) -> bool:
        """Stop routing to ``channel`` if it is still the injected one.

        Returns:
            True if the channel was removed, False if another channel had
            already replaced it.

        """
        with self._channel_lock:
            if self._channel is not channel:
                return False
            self._channel = None
            return True

    @override
    def emit(self, record: logging.LogRecord) -> None:
        channel = self._channel
        if channel is None:
            return
        try:
            channel.write_line(self.format(record))
        except Exception:
            self.handleError(record)
