"""Deploy and undeploy a workspace tree onto a target root.

``deploy_tree`` mirrors every eligible file of the source tree to
``target_root / relative_path``:

- INSTALL: the destination is missing, or the source is strictly newer
- SKIP_UP_TO_DATE: otherwise

Installing creates the parent directory with its resolved mode and copies
the content over the destination before applying the file mode. The copy
gets a fresh modification time, so a second run with no source changes
skips every file.

``undeploy_tree`` walks the same tree through the same filter and removes
the destination files that exist. It never removes directories.

Both record one decision per file in a report. Dry runs record the same
decisions but leave the filesystem untouched. A failure on one file is
recorded and the walk continues; only a missing source root is fatal.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterator, Sequence

from testadura.core.errors import SourceRootMissingError
from testadura.core.messages import Messenger, quiet_messenger
from testadura.deploy.filters import is_eligible
from testadura.deploy.permissions import DEFAULT_RULES, FileKind, PermissionRule, resolve_mode

logger = logging.getLogger(__name__)


class DeployAction(Enum):
    INSTALL = "install"
    SKIP_UP_TO_DATE = "skip"
    FAILED = "failed"


class UndeployAction(Enum):
    REMOVE = "remove"
    SKIP_MISSING = "skip"
    FAILED = "failed"


@dataclass(frozen=True)
class DeploymentUnit:
    """A source file discovered during the walk."""

    relative_path: str
    source: Path

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def mtime_ns(self) -> int:
        return self.source.stat().st_mtime_ns


@dataclass(frozen=True)
class DeploymentTarget:
    """Where a unit lands and with which modes."""

    destination: Path
    file_mode: int
    dir_mode: int


@dataclass(frozen=True)
class FileDecision:
    """The outcome for one source file."""

    relative_path: str
    source: Path
    destination: Path | None
    action: DeployAction | UndeployAction
    mode: int | None = None
    dir_mode: int | None = None
    error: str | None = None


@dataclass
class _TreeReport:
    source_root: Path
    target_root: Path
    dry_run: bool = False
    decisions: list[FileDecision] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)

    def with_action(self, action: DeployAction | UndeployAction) -> list[FileDecision]:
        return [d for d in self.decisions if d.action is action]

    @property
    def failed(self) -> list[FileDecision]:
        return [d for d in self.decisions if d.error is not None]

    @property
    def succeeded(self) -> bool:
        """True when at least one file was processed; per-file failures don't count against it."""
        return bool(self.decisions)


@dataclass
class DeployReport(_TreeReport):
    """Decisions of a deploy run (or planned decisions in dry-run mode)."""

    @property
    def installed(self) -> list[FileDecision]:
        return self.with_action(DeployAction.INSTALL)

    @property
    def skipped(self) -> list[FileDecision]:
        return self.with_action(DeployAction.SKIP_UP_TO_DATE)


@dataclass
class UndeployReport(_TreeReport):
    """Decisions of an undeploy run (or planned decisions in dry-run mode)."""

    @property
    def removed(self) -> list[FileDecision]:
        return self.with_action(UndeployAction.REMOVE)

    @property
    def missing(self) -> list[FileDecision]:
        return self.with_action(UndeployAction.SKIP_MISSING)


def _require_source_root(source_root: Path) -> Path:
    if not source_root.is_dir():
        raise SourceRootMissingError(f"Source root does not exist or is not a directory: {source_root}")
    return source_root


def relative_to_root(path: Path, root: Path) -> str | None:
    """Return *path* relative to *root* as a POSIX string, or None if it escapes."""
    try:
        rel = path.relative_to(root)
    except ValueError:
        return None
    if not rel.parts or rel.is_absolute() or ".." in rel.parts:
        return None
    return rel.as_posix()


def iter_source_files(source_root: Path) -> Iterator[Path]:
    """Yield regular files under *source_root*, sorted by relative path."""
    files = [p for p in source_root.rglob("*") if p.is_file() and not p.is_symlink()]

    def sort_key(path: Path) -> str:
        return relative_to_root(path, source_root) or str(path)

    yield from sorted(files, key=sort_key)


def _walk_units(
    source_root: Path,
    report: _TreeReport,
    say: Messenger,
    failed_action: DeployAction | UndeployAction,
) -> Iterator[DeploymentUnit]:
    """Walk the tree, recording escapes and ineligible paths on *report*."""
    for path in iter_source_files(source_root):
        rel = relative_to_root(path, source_root)
        if rel is None:
            say.fail(f"Bad relative path: file='{path}' source_root='{source_root}'")
            report.decisions.append(
                FileDecision(
                    relative_path=str(path),
                    source=path,
                    destination=None,
                    action=failed_action,
                    error="file is outside the source root",
                )
            )
            continue
        if not is_eligible(rel):
            logger.debug("action=ignore rel=%s", rel)
            report.ignored.append(rel)
            continue
        yield DeploymentUnit(relative_path=rel, source=path)


def plan_target(
    unit: DeploymentUnit,
    target_root: Path,
    rules: Sequence[PermissionRule] = DEFAULT_RULES,
) -> DeploymentTarget:
    """Compute destination and modes for *unit* under *target_root*."""
    rel = PurePosixPath(unit.relative_path)
    return DeploymentTarget(
        destination=target_root / unit.relative_path,
        file_mode=resolve_mode(f"/{rel}", FileKind.FILE, rules),
        dir_mode=resolve_mode(f"/{rel.parent}", FileKind.DIRECTORY, rules),
    )


def needs_install(unit: DeploymentUnit, destination: Path) -> bool:
    """Install when the destination is missing or strictly older than the source."""
    if not destination.exists():
        return True
    return unit.mtime_ns > destination.stat().st_mtime_ns


def install_file(source: Path, target: DeploymentTarget) -> None:
    """Create the parent with its mode, then copy and chmod the file."""
    parent = target.destination.parent
    parent.mkdir(parents=True, exist_ok=True)
    os.chmod(parent, target.dir_mode)
    shutil.copyfile(source, target.destination)
    os.chmod(target.destination, target.file_mode)


def _deploy_unit(
    unit: DeploymentUnit,
    target_root: Path,
    rules: Sequence[PermissionRule],
    dry_run: bool,
    say: Messenger,
) -> FileDecision:
    target = plan_target(unit, target_root, rules)
    decision = FileDecision(
        relative_path=unit.relative_path,
        source=unit.source,
        destination=target.destination,
        action=DeployAction.INSTALL,
        mode=target.file_mode,
        dir_mode=target.dir_mode,
    )

    try:
        install = needs_install(unit, target.destination)
    except OSError as exc:
        say.fail(f"Cannot compare {unit.relative_path}: {exc}")
        return _failed(decision, DeployAction.FAILED, exc)

    if not install:
        logger.info("action=skip rel=%s dest=%s", unit.relative_path, target.destination)
        say.warning(f"Skipping {unit.relative_path}; destination is up-to-date.")
        return FileDecision(
            relative_path=unit.relative_path,
            source=unit.source,
            destination=target.destination,
            action=DeployAction.SKIP_UP_TO_DATE,
            mode=target.file_mode,
            dir_mode=target.dir_mode,
        )

    logger.info(
        "action=install rel=%s dest=%s mode=%04o dir_mode=%04o dry_run=%s",
        unit.relative_path,
        target.destination,
        target.file_mode,
        target.dir_mode,
        dry_run,
    )
    if dry_run:
        say.info(
            f"Would have installed {unit.source} --> {target.destination}, "
            f"with {target.file_mode:o} permissions"
        )
        return decision

    say.info(f"{unit.name} --> {target.destination} {target.file_mode:o}")
    try:
        install_file(unit.source, target)
    except OSError as exc:
        say.fail(f"Failed to install {unit.relative_path}: {exc}")
        return _failed(decision, DeployAction.FAILED, exc)
    return decision


def _failed(
    decision: FileDecision,
    action: DeployAction | UndeployAction,
    exc: OSError,
) -> FileDecision:
    return FileDecision(
        relative_path=decision.relative_path,
        source=decision.source,
        destination=decision.destination,
        action=action,
        mode=decision.mode,
        dir_mode=decision.dir_mode,
        error=str(exc),
    )


def deploy_tree(
    source_root: Path,
    target_root: Path,
    *,
    dry_run: bool = False,
    rules: Sequence[PermissionRule] = DEFAULT_RULES,
    messenger: Messenger | None = None,
) -> DeployReport:
    """Install every eligible file of *source_root* under *target_root*.

    Args:
        source_root: Workspace tree to deploy (must exist).
        target_root: Root the relative paths are installed under.
        dry_run: If True, report decisions without touching the filesystem.
        rules: Permission rule table used to resolve modes.
        messenger: Where per-file messages go; silent when omitted.

    Returns:
        DeployReport with one decision per eligible file.

    Raises:
        SourceRootMissingError: If *source_root* is not a directory.
    """
    say = messenger or quiet_messenger()
    _require_source_root(source_root)
    report = DeployReport(source_root=source_root, target_root=target_root, dry_run=dry_run)

    say.start(f"Starting deployment from {source_root} to {target_root}")
    for unit in _walk_units(source_root, report, say, DeployAction.FAILED):
        report.decisions.append(_deploy_unit(unit, target_root, rules, dry_run, say))
    say.end("Deployment complete.")
    return report


def _undeploy_unit(unit: DeploymentUnit, target_root: Path, dry_run: bool, say: Messenger) -> FileDecision:
    destination = target_root / unit.relative_path
    decision = FileDecision(
        relative_path=unit.relative_path,
        source=unit.source,
        destination=destination,
        action=UndeployAction.REMOVE,
    )

    try:
        present = destination.exists()
    except OSError as exc:
        say.fail(f"Cannot check {unit.relative_path}: {exc}")
        return _failed(decision, UndeployAction.FAILED, exc)

    if not present:
        logger.info("action=skip rel=%s dest=%s", unit.relative_path, destination)
        say.info(f"Skipping {unit.relative_path}; does not exist.")
        return FileDecision(
            relative_path=unit.relative_path,
            source=unit.source,
            destination=destination,
            action=UndeployAction.SKIP_MISSING,
        )

    logger.info("action=remove rel=%s dest=%s dry_run=%s", unit.relative_path, destination, dry_run)
    if dry_run:
        say.info(f"Would have removed {destination}")
        return decision

    say.warning(f"Removing {destination}")
    try:
        destination.unlink()
    except OSError as exc:
        say.fail(f"Failed to remove {destination}: {exc}")
        return _failed(decision, UndeployAction.FAILED, exc)
    return decision


def undeploy_tree(
    source_root: Path,
    target_root: Path,
    *,
    dry_run: bool = False,
    messenger: Messenger | None = None,
) -> UndeployReport:
    """Remove from *target_root* the files a deploy of *source_root* installs.

    Raises:
        SourceRootMissingError: If *source_root* is not a directory.
    """
    say = messenger or quiet_messenger()
    _require_source_root(source_root)
    report = UndeployReport(source_root=source_root, target_root=target_root, dry_run=dry_run)

    say.start(f"Starting undeploy of {source_root} from {target_root}")
    for unit in _walk_units(source_root, report, say, UndeployAction.FAILED):
        report.decisions.append(_undeploy_unit(unit, target_root, dry_run, say))
    say.end("Undeploy complete.")
    return report
