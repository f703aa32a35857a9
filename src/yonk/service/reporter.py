"""Status event reporting.

The controller emits one event per operation; reporters decide whether it
goes to syslog, the terminal, or a list in tests.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

from yonk.logging import NOTICE
from yonk.service.base import Outcome

logger = logging.getLogger("yonk.status")

_LEVELS = {
    Outcome.OK: NOTICE,
    Outcome.SKIPPED: logging.INFO,
    Outcome.FAILED: logging.ERROR,
}

# Terminal label and color per outcome
_LABELS = {
    Outcome.OK: (" ok ", "green"),
    Outcome.SKIPPED: ("skip", "yellow"),
    Outcome.FAILED: ("fail", "red"),
}


class StatusReporter(Protocol):
    """Consumer of lifecycle status events."""

    def begin(self, verb: str, description: str, silent: bool) -> None:
        """An operation is about to block (e.g., 'Starting foo...')."""
        ...

    def progress(self, silent: bool) -> None:
        """One progress step of a blocking operation."""
        ...

    def report(
        self, verb: str, description: str, outcome: Outcome, silent: bool
    ) -> None:
        """Final outcome of an operation."""
        ...

    def note(self, text: str, silent: bool) -> None:
        """A plain status message (e.g., 'foo already running')."""
        ...


class SyslogReporter:
    """Reporter that logs outcomes through the 'yonk.status' logger.

    configure_logging() attaches a syslog handler, so these records reach
    syslog regardless of the silent flag.
    """

    def begin(self, verb: str, description: str, silent: bool) -> None:
        pass

    def progress(self, silent: bool) -> None:
        pass

    def report(
        self, verb: str, description: str, outcome: Outcome, silent: bool
    ) -> None:
        logger.log(_LEVELS[outcome], "%s %s: %s", verb, description, outcome.value)

    def note(self, text: str, silent: bool) -> None:
        logger.debug(text)


class TerminalReporter(SyslogReporter):
    """Reporter that also renders init-style status lines on a console.

    Example:
        Start OpenBSD Secure Shell server                    [ ok ]
    """

    def __init__(self, console: Console | None = None):
        self._console = console or Console(stderr=True)
        self._pending = False

    def begin(self, verb: str, description: str, silent: bool) -> None:
        if silent:
            return
        self._rewind()
        self._console.print(f"{verb} {description}...", end="", markup=False)
        self._pending = True

    def progress(self, silent: bool) -> None:
        if not silent:
            self._console.print(".", end="", markup=False)

    def report(
        self, verb: str, description: str, outcome: Outcome, silent: bool
    ) -> None:
        super().report(verb, description, outcome, silent)
        if silent:
            return

        self._rewind()
        label, color = _LABELS[outcome]
        head = f"{verb} {description}"
        status = Text.assemble("[", (label, color), "]")
        width = max(self._console.width - len(status), len(head) + 1)
        line = Text(head.ljust(width))
        line.append_text(status)
        self._console.print(line, soft_wrap=True)

    def note(self, text: str, silent: bool) -> None:
        super().note(text, silent)
        if not silent:
            self._rewind()
            self._console.print(text, markup=False)

    def _rewind(self) -> None:
        """Replace a pending 'Starting foo...' line."""
        if not self._pending:
            return
        self._pending = False
        if self._console.is_terminal:
            self._console.control(
                Control.move_to_column(0),
                Control((ControlType.ERASE_IN_LINE, 2)),
            )
        else:
            self._console.print()


@dataclass
class RecordingReporter:
    """Reporter that records events in memory."""

    events: list[tuple[str, str, Outcome, bool]] = field(default_factory=list)
    progress_count: int = 0
    begun: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def begin(self, verb: str, description: str, silent: bool) -> None:
        self.begun.append(verb)

    def progress(self, silent: bool) -> None:
        self.progress_count += 1

    def report(
        self, verb: str, description: str, outcome: Outcome, silent: bool
    ) -> None:
        self.events.append((verb, description, outcome, silent))

    def note(self, text: str, silent: bool) -> None:
        self.notes.append(text)

    @property
    def outcomes(self) -> list[Outcome]:
        return [event[2] for event in self.events]
