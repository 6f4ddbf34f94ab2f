"""
Testadura CLI - shell workspace tooling.

Usage:
    testadura deploy-workspace [options]
    td-deploy-workspace [options]
"""

from __future__ import annotations

import logging

import typer

from testadura.cli.commands.deploy_workspace import deploy_workspace

__version__ = "1.0.0"

# Silent unless --verbose attaches a handler; the Messenger already prints every message.
logging.getLogger(__name__).addHandler(logging.NullHandler())

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(
    name="testadura",
    help="Testadura workspace tooling",
    add_completion=False,
    no_args_is_help=True,
    context_settings=CONTEXT_SETTINGS,
)


@app.callback()
def callback() -> None:
    """Testadura workspace tooling."""


app.command("deploy-workspace")(deploy_workspace)

# Standalone entry point so the tool can be installed as ``td-deploy-workspace``.
deploy_workspace_app = typer.Typer(
    name="deploy-workspace",
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
)
deploy_workspace_app.command()(deploy_workspace)


def main():
    app()


def deploy_workspace_main():
    deploy_workspace_app()


__all__ = ["__version__", "app", "deploy_workspace_app", "main"]
