"""CLI helpers exposed for other modules."""

from .ui import ConsolePrompter, enable_verbose_logging, render_arguments

__all__ = ["ConsolePrompter", "enable_verbose_logging", "render_arguments"]
