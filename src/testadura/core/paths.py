"""Framework root and per-script file discovery.

Provides the canonical functions for locating:
- The framework and application roots (overridable from the environment)
- The per-script state and cfg files
- The home directory of the user who invoked the tool (``sudo`` aware)
"""

from __future__ import annotations

import os
import pwd
from dataclasses import dataclass
from pathlib import Path

from testadura.core.constants import COMMON_LIB_DIR, FRAMEWORK_NAME


def _env_path(name: str, default: Path) -> Path:
    if value := os.environ.get(name):
        return Path(value)
    return default


def get_framework_root() -> Path:
    """Return the root the framework libraries are installed under.

    ``TD_FRAMEWORK_ROOT`` overrides the default of ``/``.
    """
    return _env_path("TD_FRAMEWORK_ROOT", Path("/"))


def get_application_root() -> Path:
    """Return the root holding application cfg and state (``TD_APPLICATION_ROOT``)."""
    return _env_path("TD_APPLICATION_ROOT", Path("/"))


def get_invoking_user_home() -> Path:
    """Return the home directory of the real user behind the process.

    When running under ``sudo`` this is ``SUDO_USER``'s home rather than
    root's, so defaults such as ``~/dev`` point at the developer's tree.
    Falls back to ``Path.home()`` when the account cannot be looked up.
    """
    user = os.environ.get("SUDO_USER") or os.environ.get("USER")
    if user:
        try:
            return Path(pwd.getpwnam(user).pw_dir)
        except KeyError:
            pass
    return Path.home()


@dataclass(frozen=True)
class FrameworkPaths:
    """Resolved file locations for one script of the framework."""

    script_name: str
    framework_root: Path
    application_root: Path
    common_lib: Path
    state_file: Path
    cfg_file: Path
    user_home: Path

    @classmethod
    def for_script(cls, script_name: str) -> "FrameworkPaths":
        """Resolve every location for *script_name*.

        Resolution order for each file: the matching ``TD_*`` environment
        variable, then the conventional location under the application root:

        - state: ``<app root>/var/testadura/<script>.state``
        - cfg:   ``<app root>/etc/testadura/<script>.cfg``
        """
        framework_root = get_framework_root()
        application_root = get_application_root()
        return cls(
            script_name=script_name,
            framework_root=framework_root,
            application_root=application_root,
            common_lib=_env_path("TD_COMMON_LIB", framework_root / COMMON_LIB_DIR),
            state_file=_env_path(
                "TD_STATE_FILE",
                application_root / "var" / FRAMEWORK_NAME / f"{script_name}.state",
            ),
            cfg_file=_env_path(
                "TD_CFG_FILE",
                application_root / "etc" / FRAMEWORK_NAME / f"{script_name}.cfg",
            ),
            user_home=get_invoking_user_home(),
        )
