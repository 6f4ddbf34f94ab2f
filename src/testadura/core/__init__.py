"""Framework plumbing: paths, key=value files, messages and preconditions."""

from testadura.core.errors import (
    DeployError,
    PermissionRuleError,
    PrivilegeError,
    SessionAborted,
    SourceRootMissingError,
)
from testadura.core.kvstore import KeyValueStore
from testadura.core.messages import MessageType, Messenger, quiet_messenger
from testadura.core.paths import FrameworkPaths
from testadura.core.privileges import is_root, require_root

__all__ = [
    "DeployError",
    "FrameworkPaths",
    "KeyValueStore",
    "MessageType",
    "Messenger",
    "PermissionRuleError",
    "PrivilegeError",
    "SessionAborted",
    "SourceRootMissingError",
    "is_root",
    "quiet_messenger",
    "require_root",
]
