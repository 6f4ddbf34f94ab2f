"""Eligibility of workspace files for deployment.

Keeps drafts, backups, private and hidden material and loose top-level
files out of a deployment:

- ``README``              top-level file, no directory component
- ``usr/bin/_draft``      private basename
- ``etc/app.cfg.old``     backup
- ``.git/config``         hidden directory segment
- ``usr/_wip/tool``       private directory segment

Deploy and undeploy share this predicate, so undeploy never removes a file
deploy would not have installed.
"""

from __future__ import annotations

from pathlib import PurePosixPath

HIDDEN_MARKER = "."
PRIVATE_MARKER = "_"
BACKUP_SUFFIX = ".old"


def is_eligible(relative_path: str | PurePosixPath) -> bool:
    """Return True when *relative_path* (relative to the source root) may be deployed."""
    parts = PurePosixPath(relative_path).parts
    if len(parts) < 2:
        return False

    name = parts[-1]
    if name.startswith(PRIVATE_MARKER) or name.endswith(BACKUP_SUFFIX):
        return False

    for segment in parts[:-1]:
        if segment.startswith((HIDDEN_MARKER, PRIVATE_MARKER)):
            return False
    return True
