"""Plain ``KEY=VALUE`` files used for script config and state.

Config files are user-editable settings, state files are script-managed
data; both share this format:

- one ``KEY=VALUE`` per line, keys match ``[A-Za-z_][A-Za-z0-9_]*``
- the value is everything after the first ``=``, stored literally
- blank lines and ``#`` comments are ignored when loading

Writes go to a temp file in the same directory followed by ``os.replace``.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_valid_key(key: str) -> bool:
    return bool(KEY_PATTERN.match(key))


def _parse_line(line: str) -> tuple[str, str] | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    key, value = stripped.split("=", 1)
    key = key.strip()
    if not is_valid_key(key):
        return None
    return key, value


class KeyValueStore:
    """A ``KEY=VALUE`` text file with load/get/set/unset/reset operations."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, str]:
        """Return every valid key of the file; a missing file is empty."""
        if not self.path.is_file():
            return {}
        values: dict[str, str] = {}
        for line in self.path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_line(line)
            if parsed is None:
                continue
            key, value = parsed
            values[key] = value
        return values

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.load().get(key, default)

    def set(self, key: str, value: str) -> None:
        """Set *key*, dropping earlier lines for it and appending the new one."""
        if not is_valid_key(key):
            raise ValueError(f"Invalid key name: {key!r}")
        lines = [line for line in self._read_lines() if not self._defines(line, key)]
        lines.append(f"{key}={value}")
        self._write_lines(lines)
        logger.debug("Set %s in %s", key, self.path)

    def unset(self, key: str) -> None:
        """Remove *key*; the file itself goes away once nothing is left."""
        if not is_valid_key(key):
            raise ValueError(f"Invalid key name: {key!r}")
        if not self.path.is_file():
            return
        lines = [line for line in self._read_lines() if not self._defines(line, key)]
        if not any(line.strip() for line in lines):
            self.path.unlink()
            return
        self._write_lines(lines)

    def reset(self) -> None:
        self.path.unlink(missing_ok=True)

    def _read_lines(self) -> list[str]:
        if not self.path.is_file():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    @staticmethod
    def _defines(line: str, key: str) -> bool:
        head, sep, _ = line.partition("=")
        return bool(sep) and head.strip() == key

    def _write_lines(self, lines: list[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write("".join(f"{line}\n" for line in lines))
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
