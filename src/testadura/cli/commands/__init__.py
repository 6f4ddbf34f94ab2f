"""CLI command modules for testadura.

Each module holds one command function; ``testadura/__init__.py`` registers
them on the top-level app.
"""

from .deploy_workspace import deploy_workspace

__all__ = ["deploy_workspace"]
