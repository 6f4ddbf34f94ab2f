"""Reusable UI helpers for Testadura CLI interactions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from testadura.core.messages import logger as messages_logger
from testadura.core.paths import FrameworkPaths
from testadura.core.prompts import Choice, parse_yes_no
from testadura.deploy.session import DeployParameters

_CONFIGURED_FLAG_ATTR = "_testadura_verbose_configured"


class ConsolePrompter:
    """Ask questions on the terminal through typer prompts."""

    def ask(self, label: str, default: str | None = None) -> str:
        return typer.prompt(label, default=default or "", show_default=bool(default))

    def ask_yes_no(self, question: str, default: bool = False) -> bool:
        hint = "Y/n" if default else "y/N"
        answer = typer.prompt(f"{question} [{hint}]", default="", show_default=False)
        return parse_yes_no(answer, default)

    def ask_ok_redo_quit(self, question: str) -> Choice:
        answer = typer.prompt(f"{question} [OK/Redo/Quit]", default="OK", show_default=False)
        return Choice.parse(answer)


def _not_a_message(record: logging.LogRecord) -> bool:
    # Messages are already on screen; don't print them twice.
    return record.name != messages_logger.name


def enable_verbose_logging(console: Console) -> None:
    """Send ``testadura`` debug logging to *console* (idempotent)."""
    package_logger = logging.getLogger("testadura")
    package_logger.setLevel(logging.DEBUG)
    if getattr(package_logger, _CONFIGURED_FLAG_ATTR, False):
        return
    handler = RichHandler(console=console, show_path=False, markup=False)
    handler.addFilter(_not_a_message)
    package_logger.addHandler(handler)
    setattr(package_logger, _CONFIGURED_FLAG_ATTR, True)


def render_arguments(
    paths: FrameworkPaths,
    params: DeployParameters,
    positional: Sequence[str],
    *,
    version: str,
) -> Table:
    """Describe the script, its environment and every option value."""
    table = Table(title=f"{paths.script_name} {version}", show_header=False)
    table.add_column("Name", style="cyan")
    table.add_column("Value")

    def shown(value: object) -> str:
        return "<unset>" if value is None else str(value)

    table.add_row("Script", paths.script_name)
    table.add_row("Framework root", str(paths.framework_root))
    table.add_row("Application root", str(paths.application_root))
    table.add_row("Common lib", str(paths.common_lib))
    table.add_row("State file", str(paths.state_file))
    table.add_row("Cfg file", str(paths.cfg_file))
    table.add_row("--undeploy (-u)", shown(params.undeploy))
    table.add_row("--source (-s)", shown(params.source_root))
    table.add_row("--target (-t)", shown(params.target_root))
    table.add_row("--dryrun (-d)", shown(params.dry_run))
    table.add_row("--verbose (-v)", shown(params.verbose))
    table.add_row("--link-exes", shown(params.link_exes))
    table.add_row("--yes (-y)", shown(params.assume_yes))
    table.add_row("Positional args", " ".join(positional) or "<none>")
    return table


def expand_user(path: Path | None) -> Path | None:
    """Typer callback helper: expand ``~`` in optional path options."""
    return path.expanduser() if path is not None else None


__all__ = [
    "ConsolePrompter",
    "enable_verbose_logging",
    "expand_user",
    "render_arguments",
]
