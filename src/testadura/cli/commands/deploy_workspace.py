"""``testadura deploy-workspace`` command.

Usage:
    testadura deploy-workspace                              # Ask for everything
    testadura deploy-workspace -s ~/dev/ws -t / --dryrun    # Preview a deploy
    testadura deploy-workspace --undeploy -s ~/dev/ws -t /  # Remove what deploy installs
    testadura deploy-workspace --yes                        # Repeat the last run

Deploys a development workspace onto a target root: eligible files are
copied when newer, modes come from the permission rules, and executables of
the framework library can be linked into ``usr/local/bin`` as ``td-*``.
Must run as root.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape

from testadura.cli.ui import ConsolePrompter, enable_verbose_logging, expand_user, render_arguments
from testadura.core.errors import DeployError, SessionAborted
from testadura.core.kvstore import KeyValueStore
from testadura.core.messages import Messenger
from testadura.core.paths import FrameworkPaths
from testadura.core.privileges import require_root
from testadura.deploy.engine import DeployReport
from testadura.deploy.permissions import DEFAULT_RULES, PermissionRule, load_permission_rules
from testadura.deploy.session import DeploymentSession, DeployParameters, SessionResult

SCRIPT_NAME = "deploy-workspace"
CFG_PERMISSION_RULES = "permission_rules"

console = Console()
err_console = Console(stderr=True)


def resolve_rules(rules_file: Path | None, paths: FrameworkPaths) -> Sequence[PermissionRule]:
    """``--rules`` wins, then ``permission_rules`` from the cfg file, then the built-in table."""
    if rules_file is None:
        configured = KeyValueStore(paths.cfg_file).get(CFG_PERMISSION_RULES)
        if configured:
            rules_file = Path(configured).expanduser()
    if rules_file is None:
        return DEFAULT_RULES
    return load_permission_rules(rules_file)


def _report_totals(result: SessionResult, messenger: Messenger) -> None:
    report = result.tree_report
    prefix = "Dry run: " if report.dry_run else ""
    if isinstance(report, DeployReport):
        summary = f"{len(report.installed)} installed, {len(report.skipped)} up-to-date"
    else:
        summary = f"{len(report.removed)} removed, {len(report.missing)} not present"
    summary += f", {len(report.ignored)} ignored, {len(report.failed)} failed"
    if result.link_report is not None:
        links = result.link_report
        verb = "linked" if not result.parameters.undeploy else "unlinked"
        count = len(links.linked) if not result.parameters.undeploy else len(links.unlinked)
        summary += f"; {count} symlinks {verb}"

    if report.failed:
        messenger.warning(prefix + summary)
    else:
        messenger.ok(prefix + summary)


def deploy_workspace(
    undeploy: bool = typer.Option(False, "--undeploy", "-u", help="Remove files from main root"),
    source: Optional[Path] = typer.Option(
        None, "--source", "-s", callback=expand_user, help="Set Source directory"
    ),
    target: Optional[Path] = typer.Option(
        None, "--target", "-t", callback=expand_user, help="Set Target directory"
    ),
    dry_run: bool = typer.Option(
        False, "--dryrun", "--dry-run", "-d", help="Just list the files don't do any work"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    link_exes: Optional[bool] = typer.Option(
        None,
        "--link-exes/--no-link-exes",
        help="Create (or on undeploy remove) td-* symlinks for framework executables",
    ),
    assume_yes: bool = typer.Option(
        False, "--yes", "-y", help="Don't ask; use flags and the previous run's answers"
    ),
    rules_file: Optional[Path] = typer.Option(
        None, "--rules", help="Permission rule table (prefix|file|dir|description per line)"
    ),
    positional: Optional[List[str]] = typer.Argument(None, help="Extra arguments (ignored)"),
) -> None:
    """Deploy a development workspace to a target root filesystem.

    Examples:
        deploy-workspace --source ~/dev/myworkspace --target / --dryrun
        deploy-workspace -u -s ~/dev/myworkspace -t /
    """
    if verbose:
        enable_verbose_logging(err_console)

    paths = FrameworkPaths.for_script(SCRIPT_NAME)
    messenger = Messenger(console, err_console, verbose=verbose)
    params = DeployParameters(
        source_root=source,
        target_root=target,
        link_exes=link_exes,
        undeploy=undeploy,
        dry_run=dry_run,
        verbose=verbose,
        assume_yes=assume_yes,
    )

    if verbose:
        from testadura import __version__

        console.print(render_arguments(paths, params, positional or [], version=__version__))

    try:
        # Before the rule table is read.
        require_root()
        rules = resolve_rules(rules_file, paths)
        session = DeploymentSession(
            params,
            state=KeyValueStore(paths.state_file),
            prompter=ConsolePrompter(),
            messenger=messenger,
            user_home=paths.user_home,
            rules=rules,
        )
        result = session.run()
    except SessionAborted:
        # The session already told the user why.
        raise typer.Exit(1)
    except DeployError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    _report_totals(result, messenger)
