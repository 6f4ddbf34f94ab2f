"""Answers to interactive questions, independent of how they are asked."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

YES_ANSWERS = {"Y", "YES"}


class Choice(Enum):
    """Answer to an OK/Redo/Quit question."""

    CONTINUE = "continue"
    REDO = "redo"
    QUIT = "quit"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, answer: str) -> "Choice":
        """Map a typed answer to a choice; an empty answer means OK."""
        normalized = answer.strip().upper()
        if normalized in {"", "OK", "O", "C", "CONTINUE"}:
            return cls.CONTINUE
        if normalized in {"R", "REDO"}:
            return cls.REDO
        if normalized in {"Q", "QUIT", "EXIT"}:
            return cls.QUIT
        return cls.UNKNOWN


def parse_yes_no(answer: str, default: bool) -> bool:
    """``y``/``yes`` and ``n``/``no`` in any case; empty keeps *default*, anything else is no."""
    normalized = answer.strip().upper()
    if not normalized:
        return default
    return normalized in YES_ANSWERS


class Prompter(Protocol):
    """Asks the user questions; the deployment session only talks to this."""

    def ask(self, label: str, default: str | None = None) -> str: ...

    def ask_yes_no(self, question: str, default: bool = False) -> bool: ...

    def ask_ok_redo_quit(self, question: str) -> Choice: ...
