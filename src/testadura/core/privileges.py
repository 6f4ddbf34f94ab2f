"""Privilege preconditions."""

from __future__ import annotations

import os

from testadura.core.errors import PrivilegeError


def is_root() -> bool:
    return os.geteuid() == 0


def require_root() -> None:
    """Raise :class:`PrivilegeError` unless the effective user is root."""
    if not is_root():
        raise PrivilegeError("Run as root (sudo).")
