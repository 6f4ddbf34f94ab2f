"""Executable symlinks in the shared binary directory.

``link_executables`` finds executable files in the deployed library tree
(the ``templates`` subtree is pruned) and links each one into the shared
bin directory as ``td-<name without extension>``. Link targets are
relative, so the bin directory and library tree can be relocated together,
e.g. inside a staging root.

``unlink_executables`` removes ``td-*`` symlinks, but only those whose
target resolves into the library tree. Links a user created by hand in the
same directory survive.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

from testadura.core.constants import LINK_PREFIX
from testadura.core.messages import Messenger, quiet_messenger

logger = logging.getLogger(__name__)

PRUNED_SUBTREE = "templates"
PRIVATE_LINK_PREFIXES = (f"{LINK_PREFIX}_", f"{LINK_PREFIX}.", "td.")
EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class LinkAction(Enum):
    LINK = "link"
    UNCHANGED = "unchanged"
    SKIP_PRIVATE = "skip-private"
    UNLINK = "unlink"
    SKIP_FOREIGN = "skip-foreign"
    FAILED = "failed"


@dataclass(frozen=True)
class LinkDecision:
    """The outcome for one symlink in the bin directory."""

    link_path: Path
    target: str
    action: LinkAction
    error: str | None = None


@dataclass
class LinkReport:
    library_root: Path
    bin_dir: Path
    dry_run: bool = False
    decisions: list[LinkDecision] = field(default_factory=list)

    def with_action(self, action: LinkAction) -> list[LinkDecision]:
        return [d for d in self.decisions if d.action is action]

    @property
    def linked(self) -> list[LinkDecision]:
        return self.with_action(LinkAction.LINK)

    @property
    def unlinked(self) -> list[LinkDecision]:
        return self.with_action(LinkAction.UNLINK)


def link_name(executable: Path) -> str:
    """``create-workspace.sh`` -> ``td-create-workspace``."""
    return f"{LINK_PREFIX}{executable.stem}"


def is_private_link_name(name: str) -> bool:
    return name.startswith(PRIVATE_LINK_PREFIXES)


def is_executable_file(path: Path) -> bool:
    """Regular (non-symlink) file with execute permission for user, group and other."""
    try:
        st = path.lstat()
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode) and (st.st_mode & EXECUTE_BITS) == EXECUTE_BITS


def find_executables(library_root: Path) -> Iterator[Path]:
    """Yield executable files under *library_root*, sorted, skipping ``templates/``."""
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(library_root):
        current = Path(dirpath)
        if current == library_root and PRUNED_SUBTREE in dirnames:
            dirnames.remove(PRUNED_SUBTREE)
        for filename in filenames:
            candidate = current / filename
            if is_executable_file(candidate):
                found.append(candidate)
    yield from sorted(found)


def _relative_target(executable: Path, bin_dir: Path) -> str:
    return os.path.relpath(os.path.realpath(executable), os.path.realpath(bin_dir))


def _ensure_link(link_path: Path, target: str) -> LinkAction:
    """Create or replace *link_path* -> *target* (``ln -sfn``)."""
    if link_path.is_symlink():
        if os.readlink(link_path) == target:
            return LinkAction.UNCHANGED
        link_path.unlink()
    elif link_path.is_dir():
        raise IsADirectoryError(f"A directory is in the way: {link_path}")
    elif link_path.exists():
        link_path.unlink()
    link_path.symlink_to(target)
    return LinkAction.LINK


def link_executables(
    library_root: Path,
    bin_dir: Path,
    *,
    dry_run: bool = False,
    messenger: Messenger | None = None,
) -> LinkReport:
    """Create ``td-*`` symlinks in *bin_dir* for executables under *library_root*."""
    say = messenger or quiet_messenger()
    report = LinkReport(library_root=library_root, bin_dir=bin_dir, dry_run=dry_run)
    if not library_root.is_dir():
        logger.debug("No library tree at %s; nothing to link", library_root)
        return report

    say.start(f"Creating symlinks in {bin_dir} for executables under {library_root}")
    if dry_run:
        say.info(f"Would have ensured directory exists: {bin_dir}")
    else:
        bin_dir.mkdir(parents=True, exist_ok=True)

    for executable in find_executables(library_root):
        name = link_name(executable)
        link_path = bin_dir / name
        target = _relative_target(executable, bin_dir)

        if is_private_link_name(name):
            logger.debug("action=skip-private link=%s", link_path)
            report.decisions.append(LinkDecision(link_path, target, LinkAction.SKIP_PRIVATE))
            continue

        logger.info("action=link link=%s target=%s dry_run=%s", link_path, target, dry_run)
        if dry_run:
            say.info(f"Would have linked {link_path} -> {target}")
            report.decisions.append(LinkDecision(link_path, target, LinkAction.LINK))
            continue

        try:
            action = _ensure_link(link_path, target)
        except OSError as exc:
            say.fail(f"Failed to link {link_path}: {exc}")
            report.decisions.append(LinkDecision(link_path, target, LinkAction.FAILED, error=str(exc)))
            continue
        if action is LinkAction.UNCHANGED:
            say.ok(f"{link_path} -> {target}")
        else:
            say.info(f"Linking {link_path} -> {target}")
        report.decisions.append(LinkDecision(link_path, target, action))

    say.end("Symlink creation complete.")
    return report


def resolve_link_target(link_path: Path) -> tuple[str, Path]:
    """Return the recorded target of *link_path* and its canonical absolute path."""
    recorded = os.readlink(link_path)
    if os.path.isabs(recorded):
        resolved = os.path.realpath(recorded)
    else:
        resolved = os.path.realpath(link_path.parent / recorded)
    return recorded, Path(resolved)


def is_within(path: Path, root: Path) -> bool:
    """True when *path* lies strictly beneath *root*."""
    return path != root and path.is_relative_to(root)


def unlink_executables(
    library_root: Path,
    bin_dir: Path,
    *,
    dry_run: bool = False,
    messenger: Messenger | None = None,
) -> LinkReport:
    """Remove ``td-*`` symlinks in *bin_dir* that point into *library_root*."""
    say = messenger or quiet_messenger()
    report = LinkReport(library_root=library_root, bin_dir=bin_dir, dry_run=dry_run)
    if not bin_dir.is_dir():
        logger.debug("No bin directory at %s; nothing to unlink", bin_dir)
        return report

    canonical_root = Path(os.path.realpath(library_root))
    say.start(f"Removing symlinks in {bin_dir} pointing into {library_root}")

    for link_path in sorted(bin_dir.glob(f"{LINK_PREFIX}*")):
        if not link_path.is_symlink():
            continue

        recorded, resolved = resolve_link_target(link_path)
        if not is_within(resolved, canonical_root):
            logger.info("action=skip-foreign link=%s target=%s", link_path, resolved)
            say.info(f"Leaving {link_path} -> {resolved}; not part of {library_root}")
            report.decisions.append(LinkDecision(link_path, recorded, LinkAction.SKIP_FOREIGN))
            continue

        logger.info("action=unlink link=%s target=%s dry_run=%s", link_path, resolved, dry_run)
        if dry_run:
            say.info(f"Would remove {link_path}")
            report.decisions.append(LinkDecision(link_path, recorded, LinkAction.UNLINK))
            continue

        say.warning(f"Removing symlink {link_path} -> {resolved}")
        try:
            link_path.unlink()
        except OSError as exc:
            say.fail(f"Failed to remove {link_path}: {exc}")
            report.decisions.append(LinkDecision(link_path, recorded, LinkAction.FAILED, error=str(exc)))
            continue
        report.decisions.append(LinkDecision(link_path, recorded, LinkAction.UNLINK))

    say.end("Symlink cleanup complete.")
    return report
