"""Workspace deployment: mirror a staging tree onto a live filesystem.

This subpackage holds the permission rules, the eligibility filter, the
deploy/undeploy engines, executable symlink management and the interactive
session that ties them together.
"""

from testadura.deploy.engine import (
    DeployAction,
    DeployReport,
    DeploymentTarget,
    DeploymentUnit,
    FileDecision,
    UndeployAction,
    UndeployReport,
    deploy_tree,
    undeploy_tree,
)
from testadura.deploy.filters import is_eligible
from testadura.deploy.linker import (
    LinkAction,
    LinkDecision,
    LinkReport,
    link_executables,
    unlink_executables,
)
from testadura.deploy.permissions import (
    DEFAULT_RULES,
    FileKind,
    PermissionRule,
    load_permission_rules,
    resolve_mode,
)
from testadura.deploy.session import (
    DeploymentSession,
    DeployParameters,
    SessionResult,
)

__all__ = [
    "DEFAULT_RULES",
    "DeployAction",
    "DeployParameters",
    "DeployReport",
    "DeploymentSession",
    "DeploymentTarget",
    "DeploymentUnit",
    "FileDecision",
    "FileKind",
    "LinkAction",
    "LinkDecision",
    "LinkReport",
    "PermissionRule",
    "SessionResult",
    "UndeployAction",
    "UndeployReport",
    "deploy_tree",
    "is_eligible",
    "link_executables",
    "load_permission_rules",
    "resolve_mode",
    "undeploy_tree",
]
