from __future__ import annotations

import io
import os
from pathlib import Path

from rich.console import Console

from testadura.core.messages import Messenger

# Well in the past, so anything written during a test is newer.
OLD_MTIME = 1_000_000_000


def write_file(root: Path, relative: str, content: str = "x\n", mode: int = 0o644) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.chmod(path, mode)
    os.utime(path, (OLD_MTIME, OLD_MTIME))
    return path


def snapshot(root: Path) -> dict[str, tuple[int, int, bytes | str]]:
    """Mode, mtime and content (or link target) of everything under *root*."""
    entries: dict[str, tuple[int, int, bytes | str]] = {}
    if not root.exists():
        return entries
    for path in sorted(root.rglob("*")):
        st = path.lstat()
        if path.is_symlink():
            payload: bytes | str = os.readlink(path)
        elif path.is_file():
            payload = path.read_bytes()
        else:
            payload = b""
        entries[path.relative_to(root).as_posix()] = (st.st_mode, st.st_mtime_ns, payload)
    return entries


class CapturedMessenger(Messenger):
    """Messenger writing to in-memory buffers."""

    def __init__(self, *, verbose: bool = False) -> None:
        self.out = io.StringIO()
        self.err = io.StringIO()
        super().__init__(
            Console(file=self.out, width=200, color_system=None),
            Console(file=self.err, width=200, color_system=None),
            verbose=verbose,
        )

    @property
    def text(self) -> str:
        return self.out.getvalue() + self.err.getvalue()
