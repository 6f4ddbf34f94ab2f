"""Typed terminal messages (``say``) rendered through Rich.

Each message carries a type that decides its label and colour:

    [INFO] Using library ...
    [WARN] Skipping etc/foo.cfg; destination is up-to-date.
    [FAIL] Aborting (unexpected response).

Failures and cancellations go to the error console. Every message is
mirrored to the module logger so a run can be reconstructed from logs.
"""

from __future__ import annotations

import logging
from enum import Enum

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


class MessageType(Enum):
    """Message categories; the value is the printed label."""

    INFO = "INFO"
    STRT = "STRT"
    WARN = "WARN"
    FAIL = "FAIL"
    CNCL = "CNCL"
    OK = "OK"
    END = "END"
    DEBUG = "DEBUG"
    EMPTY = "EMPTY"


STYLES: dict[MessageType, str] = {
    MessageType.INFO: "cyan",
    MessageType.STRT: "bold blue",
    MessageType.WARN: "yellow",
    MessageType.FAIL: "bold red",
    MessageType.CNCL: "magenta",
    MessageType.OK: "green",
    MessageType.END: "bold blue",
    MessageType.DEBUG: "dim",
    MessageType.EMPTY: "",
}

LOG_LEVELS: dict[MessageType, int] = {
    MessageType.WARN: logging.WARNING,
    MessageType.FAIL: logging.ERROR,
    MessageType.DEBUG: logging.DEBUG,
}

_ERROR_TYPES = {MessageType.FAIL, MessageType.CNCL}


class Messenger:
    """Print typed messages to the terminal."""

    def __init__(
        self,
        console: Console | None = None,
        err_console: Console | None = None,
        *,
        verbose: bool = False,
        quiet: bool = False,
    ) -> None:
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.verbose = verbose
        self.quiet = quiet

    def say(self, kind: MessageType, text: str) -> None:
        logger.log(LOG_LEVELS.get(kind, logging.INFO), "%s %s", kind.value, text)

        if self.quiet or (kind is MessageType.DEBUG and not self.verbose):
            return

        target = self.err_console if kind in _ERROR_TYPES else self.console
        if kind is MessageType.EMPTY:
            target.print(escape(text), soft_wrap=True, highlight=False)
            return

        label = f"[{kind.value:<4}]"
        target.print(
            f"[{STYLES[kind]}]{escape(label)}[/] {escape(text)}",
            soft_wrap=True,
            highlight=False,
        )

    def info(self, text: str) -> None:
        self.say(MessageType.INFO, text)

    def start(self, text: str) -> None:
        self.say(MessageType.STRT, text)

    def warning(self, text: str) -> None:
        self.say(MessageType.WARN, text)

    def fail(self, text: str) -> None:
        self.say(MessageType.FAIL, text)

    def cancel(self, text: str) -> None:
        self.say(MessageType.CNCL, text)

    def ok(self, text: str) -> None:
        self.say(MessageType.OK, text)

    def end(self, text: str) -> None:
        self.say(MessageType.END, text)

    def debug(self, text: str) -> None:
        self.say(MessageType.DEBUG, text)


def quiet_messenger() -> Messenger:
    """Return a messenger that only logs, for library callers without a terminal."""
    return Messenger(quiet=True)
