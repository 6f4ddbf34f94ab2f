"""Permission modes for deployed files, resolved by longest-prefix rules.

A rule applies to its prefix and everything beneath it. When several rules
apply, the one with the longest prefix wins, so a narrow subtree (the
shared tools directory) can override a broad one (the library tree). Two
different prefixes of equal length can only match the same path if one is
a user-edited duplicate; the first rule defined then wins.

Rules are written as pipe-delimited rows::

    /usr/local/lib/testadura|644|755|Implementation only
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Sequence

from testadura.core.errors import PermissionRuleError

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644
DEFAULT_DIR_MODE = 0o755

MAX_MODE = 0o7777


class FileKind(Enum):
    FILE = "file"
    DIRECTORY = "dir"


def _parse_mode(text: str, row: str) -> int:
    text = text.strip()
    try:
        mode = int(text, 8)
    except ValueError:
        raise PermissionRuleError(f"Invalid octal mode {text!r} in rule: {row!r}") from None
    if not 0 <= mode <= MAX_MODE:
        raise PermissionRuleError(f"Mode {text!r} out of range in rule: {row!r}")
    return mode


@dataclass(frozen=True)
class PermissionRule:
    """File and directory modes for everything under ``prefix``."""

    prefix: str
    file_mode: int
    dir_mode: int
    description: str = ""

    def __post_init__(self) -> None:
        if not self.prefix.startswith("/"):
            raise PermissionRuleError(f"Rule prefix must be absolute: {self.prefix!r}")
        if len(self.prefix) > 1 and self.prefix.endswith("/"):
            raise PermissionRuleError(f"Rule prefix must not end with '/': {self.prefix!r}")
        for mode in (self.file_mode, self.dir_mode):
            if not 0 <= mode <= MAX_MODE:
                raise PermissionRuleError(f"Mode {mode:o} out of range for {self.prefix!r}")

    @classmethod
    def from_row(cls, row: str) -> "PermissionRule":
        """Build a rule from a ``prefix|file|dir|description`` row."""
        fields = row.split("|")
        if len(fields) < 3:
            raise PermissionRuleError(f"Expected 'prefix|file|dir|description', got: {row!r}")
        prefix = fields[0].strip()
        description = "|".join(fields[3:]).strip()
        return cls(
            prefix=prefix,
            file_mode=_parse_mode(fields[1], row),
            dir_mode=_parse_mode(fields[2], row),
            description=description,
        )

    def matches(self, path: str) -> bool:
        if self.prefix == "/":
            return path.startswith("/")
        return path == self.prefix or path.startswith(self.prefix + "/")

    def mode_for(self, kind: FileKind) -> int:
        return self.dir_mode if kind is FileKind.DIRECTORY else self.file_mode

    def to_row(self) -> str:
        return f"{self.prefix}|{self.file_mode:o}|{self.dir_mode:o}|{self.description}"


DEFAULT_RULE_ROWS: tuple[str, ...] = (
    "/usr/local/bin|755|755|User entry points",
    "/usr/local/sbin|755|755|Admin entry points",
    "/etc/update-motd.d|755|755|Executed by system",
    "/usr/local/lib/testadura|644|755|Implementation only",
    "/usr/local/lib/testadura/common/tools|755|755|Implementation only",
    "/etc/testadura|640|750|Configuration",
    "/var/lib/testadura|600|700|Application state",
)

DEFAULT_RULES: tuple[PermissionRule, ...] = tuple(
    PermissionRule.from_row(row) for row in DEFAULT_RULE_ROWS
)


def parse_permission_rules(lines: Iterable[str]) -> tuple[PermissionRule, ...]:
    """Parse rule rows, skipping blank lines and ``#`` comments."""
    rules: list[PermissionRule] = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        rules.append(PermissionRule.from_row(stripped))
    return tuple(rules)


def load_permission_rules(path: Path) -> tuple[PermissionRule, ...]:
    """Load a user-edited rule table; every row is validated up front."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PermissionRuleError(f"Cannot read permission rules {path}: {exc}") from exc
    rules = parse_permission_rules(text.splitlines())
    logger.debug("Loaded %d permission rules from %s", len(rules), path)
    return rules


def find_rule(path: str, rules: Sequence[PermissionRule] = DEFAULT_RULES) -> PermissionRule | None:
    """Return the rule with the longest prefix matching *path*, if any."""
    best: PermissionRule | None = None
    for rule in rules:
        if not rule.matches(path):
            continue
        # Strict comparison: on equal length the earlier rule stays.
        if best is None or len(rule.prefix) > len(best.prefix):
            best = rule
    return best


def resolve_mode(
    path: str,
    kind: FileKind,
    rules: Sequence[PermissionRule] = DEFAULT_RULES,
) -> int:
    """Return the mode for *path* (absolute, relative to the target root).

    Falls back to 644 for files and 755 for directories when no rule applies.
    """
    rule = find_rule(path, rules)
    if rule is None:
        return DEFAULT_DIR_MODE if kind is FileKind.DIRECTORY else DEFAULT_FILE_MODE
    return rule.mode_for(kind)
