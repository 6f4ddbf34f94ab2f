"""Exceptions shared by the deployment tooling.

Fatal conditions and user aborts are raised as :class:`DeployError`
subclasses; the CLI layer turns them into a message and exit status 1.
Per-file problems never raise past the engines' file loops.
"""

from __future__ import annotations


class DeployError(RuntimeError):
    """Base class for errors that end a deployment run."""


class PrivilegeError(DeployError):
    """Raised when the process lacks the privileges a run requires."""


class SourceRootMissingError(DeployError):
    """Raised when the source root does not exist or is not a directory."""


class PermissionRuleError(DeployError, ValueError):
    """Raised when a permission rule row cannot be parsed or validated."""


class SessionAborted(DeployError):
    """Raised when the user quits, or answers a prompt unexpectedly."""


__all__ = [
    "DeployError",
    "PermissionRuleError",
    "PrivilegeError",
    "SessionAborted",
    "SourceRootMissingError",
]
