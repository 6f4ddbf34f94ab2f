"""One ``deploy-workspace`` invocation, from parameters to symlinks.

The session moves through a small state machine::

    COLLECT_SOURCE -> VALIDATE_SOURCE -> COLLECT_REST -> CONFIRM -> DONE
          ^                 |                               |
          +------ Redo -----+---------------- Redo ---------+

Parameters come from flags first, then from the state saved by the previous
run, then from built-in defaults. Nothing is persisted or touched on disk
until the user answers Continue at the confirmation step; Quit (or any
unexpected answer) aborts with :class:`SessionAborted`.

With ``assume_yes`` no questions are asked at all: flags and saved state
decide, and an implausible source root aborts instead of prompting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Sequence

from rich.table import Table

from testadura.core.constants import EXPECTED_SOURCE_SUBTREES, FRAMEWORK_LIB_DIR, SHARED_BIN_DIR
from testadura.core.errors import SessionAborted, SourceRootMissingError
from testadura.core.kvstore import KeyValueStore
from testadura.core.messages import Messenger
from testadura.core.privileges import require_root
from testadura.core.prompts import Choice, Prompter
from testadura.deploy.engine import DeployReport, UndeployReport, deploy_tree, undeploy_tree
from testadura.deploy.linker import LinkReport, link_executables, unlink_executables
from testadura.deploy.permissions import DEFAULT_RULES, PermissionRule

logger = logging.getLogger(__name__)

STATE_LAST_RUN = "last_deploy_run"
STATE_LAST_SOURCE = "last_deploy_source"
STATE_LAST_TARGET = "last_deploy_target"
STATE_LAST_LINK_EXES = "last_deploy_link_exes"

MAX_REDOS = 10


@dataclass
class DeployParameters:
    """Everything one run needs; ``None`` means "not decided yet"."""

    source_root: Path | None = None
    target_root: Path | None = None
    link_exes: bool | None = None
    undeploy: bool = False
    dry_run: bool = False
    verbose: bool = False
    assume_yes: bool = False

    def _require_target(self) -> Path:
        if self.target_root is None:
            raise ValueError("target_root has not been resolved")
        return self.target_root

    @property
    def library_root(self) -> Path:
        return self._require_target() / FRAMEWORK_LIB_DIR

    @property
    def bin_dir(self) -> Path:
        return self._require_target() / SHARED_BIN_DIR


@dataclass
class SessionResult:
    parameters: DeployParameters
    tree_report: DeployReport | UndeployReport
    link_report: LinkReport | None = None


class SessionStep(Enum):
    COLLECT_SOURCE = auto()
    VALIDATE_SOURCE = auto()
    COLLECT_REST = auto()
    CONFIRM = auto()
    DONE = auto()


def looks_like_source_root(path: Path) -> bool:
    """A workspace source root carries ``etc/`` and/or ``usr/`` at its top."""
    return any((path / name).is_dir() for name in EXPECTED_SOURCE_SUBTREES)


def _as_path(answer: str, default: str) -> Path:
    return Path((answer.strip() or default)).expanduser()


class DeploymentSession:
    """Collect parameters, confirm, then deploy or undeploy."""

    def __init__(
        self,
        parameters: DeployParameters,
        *,
        state: KeyValueStore,
        prompter: Prompter,
        messenger: Messenger,
        user_home: Path,
        rules: Sequence[PermissionRule] = DEFAULT_RULES,
        privilege_check: Callable[[], None] = require_root,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.parameters = parameters
        self.state = state
        self.prompter = prompter
        self.messenger = messenger
        self.user_home = user_home
        self.rules = rules
        self.privilege_check = privilege_check
        self.clock = clock or (lambda: datetime.now().astimezone())

    def run(self) -> SessionResult:
        """Check privileges, collect and confirm parameters, then execute."""
        self.privilege_check()
        params = self.collect_parameters()
        return self.execute(params)

    # -- parameter collection -------------------------------------------

    def _defaults(self) -> tuple[str, str, bool]:
        saved = self.state.load()
        source = saved.get(STATE_LAST_SOURCE) or str(self.user_home / "dev")
        target = saved.get(STATE_LAST_TARGET) or "/"
        link_exes = saved.get(STATE_LAST_LINK_EXES, "0").strip() == "1"
        return source, target, link_exes

    def _abort(self, choice: Choice) -> SessionAborted:
        if choice is Choice.QUIT:
            message = "Aborting as per user request."
            self.messenger.cancel(message)
        else:
            message = "Aborting (unexpected response)."
            self.messenger.fail(message)
        return SessionAborted(message)

    def collect_parameters(self) -> DeployParameters:
        """Resolve source, target and link-exes, and get the user's go-ahead.

        Returns a fully resolved copy of the session parameters; the state
        file is updated only when this returns.
        """
        given = self.parameters
        default_source, default_target, default_link = self._defaults()

        source = given.source_root
        target = given.target_root
        link_exes = given.link_exes
        ask_link = given.link_exes is None
        redos = 0

        step = SessionStep.COLLECT_SOURCE
        while step is not SessionStep.DONE:
            if step is SessionStep.COLLECT_SOURCE:
                if source is None:
                    if given.assume_yes:
                        source = _as_path("", default_source)
                    else:
                        answer = self.prompter.ask("Workspace source root", default_source)
                        source = _as_path(answer, default_source)
                step = SessionStep.VALIDATE_SOURCE

            elif step is SessionStep.VALIDATE_SOURCE:
                if not source.is_dir():
                    raise SourceRootMissingError(
                        f"Source root does not exist or is not a directory: {source}"
                    )
                if looks_like_source_root(source):
                    self.messenger.info(f"Source root '{source}' looks valid.")
                    step = SessionStep.COLLECT_REST
                    continue

                self.messenger.warning(
                    f"Source root '{source}' doesn't look valid; should contain 'etc/' and/or 'usr/'."
                )
                if given.assume_yes:
                    self.messenger.fail("Refusing to continue without confirmation (--yes).")
                    raise SessionAborted(f"Source root '{source}' doesn't look like a workspace.")
                choice = self.prompter.ask_ok_redo_quit("Continue anyway?")
                if choice is Choice.CONTINUE:
                    step = SessionStep.COLLECT_REST
                elif choice is Choice.REDO:
                    redos = self._count_redo(redos)
                    source = None
                    step = SessionStep.COLLECT_SOURCE
                else:
                    raise self._abort(choice)

            elif step is SessionStep.COLLECT_REST:
                if target is None:
                    if given.assume_yes:
                        target = _as_path("", default_target)
                    else:
                        answer = self.prompter.ask("Target root folder", default_target)
                        target = _as_path(answer, default_target)
                if ask_link:
                    current = default_link if link_exes is None else link_exes
                    if given.assume_yes:
                        link_exes = current
                    else:
                        link_exes = self.prompter.ask_yes_no(
                            f"Create executable symlinks in {target / SHARED_BIN_DIR}?",
                            default=current,
                        )
                step = SessionStep.CONFIRM

            elif step is SessionStep.CONFIRM:
                resolved = replace(given, source_root=source, target_root=target, link_exes=link_exes)
                self.messenger.console.print(render_summary(resolved))
                choice = Choice.CONTINUE if given.assume_yes else self.prompter.ask_ok_redo_quit(
                    "Continue with deployment?"
                )
                if choice is Choice.CONTINUE:
                    self.messenger.info("Proceeding with deployment.")
                    self.persist(resolved)
                    self.parameters = resolved
                    step = SessionStep.DONE
                elif choice is Choice.REDO:
                    redos = self._count_redo(redos)
                    default_source, default_target = str(source), str(target)
                    default_link = bool(link_exes)
                    source = target = link_exes = None
                    ask_link = True
                    step = SessionStep.COLLECT_SOURCE
                else:
                    raise self._abort(choice)

        return self.parameters

    def _count_redo(self, redos: int) -> int:
        redos += 1
        if redos > MAX_REDOS:
            self.messenger.fail(f"Giving up after {MAX_REDOS} redos.")
            raise SessionAborted(f"Too many redos (limit {MAX_REDOS}).")
        return redos

    def persist(self, params: DeployParameters) -> None:
        """Save the confirmed parameters as defaults for the next run."""
        self.state.set(STATE_LAST_RUN, self.clock().isoformat(timespec="seconds"))
        self.state.set(STATE_LAST_SOURCE, str(params.source_root))
        self.state.set(STATE_LAST_TARGET, str(params.target_root))
        self.state.set(STATE_LAST_LINK_EXES, "1" if params.link_exes else "0")
        logger.debug("Persisted deploy parameters to %s", self.state.path)

    # -- execution ------------------------------------------------------

    def execute(self, params: DeployParameters) -> SessionResult:
        """Deploy (and link) or undeploy (and unlink) with resolved *params*."""
        if params.source_root is None or params.target_root is None:
            raise ValueError("execute() needs resolved source and target roots")

        link_report: LinkReport | None = None
        if not params.undeploy:
            tree_report: DeployReport | UndeployReport = deploy_tree(
                params.source_root,
                params.target_root,
                dry_run=params.dry_run,
                rules=self.rules,
                messenger=self.messenger,
            )
            if params.link_exes:
                link_report = link_executables(
                    params.library_root,
                    params.bin_dir,
                    dry_run=params.dry_run,
                    messenger=self.messenger,
                )
        else:
            tree_report = undeploy_tree(
                params.source_root,
                params.target_root,
                dry_run=params.dry_run,
                messenger=self.messenger,
            )
            if params.link_exes:
                link_report = unlink_executables(
                    params.library_root,
                    params.bin_dir,
                    dry_run=params.dry_run,
                    messenger=self.messenger,
                )

        if not tree_report.succeeded:
            self.messenger.warning(f"No files were processed from {params.source_root}.")
        return SessionResult(parameters=params, tree_report=tree_report, link_report=link_report)


def render_summary(params: DeployParameters) -> Table:
    """Table shown before the confirmation question."""
    table = Table(title="Deployment parameter summary", show_header=False)
    table.add_column("Parameter", style="cyan")
    table.add_column("Value")
    table.add_row("Mode", "undeploy" if params.undeploy else "deploy")
    table.add_row("Source root", str(params.source_root))
    table.add_row("Target root", str(params.target_root or "/"))
    table.add_row("Create exe symlinks", "Yes" if params.link_exes else "No")
    table.add_row("Dry run", "Yes" if params.dry_run else "No")
    return table
