"""
Centralized CLI output management.

Provides consistent output handling across all CLI commands with respect for
global --quiet and --verbose flags.
"""

from enum import Enum

from rich.console import Console
from rich.table import Table


class OutputLevel(Enum):
    """Output verbosity levels."""

    QUIET = "quiet"  # Only errors
    NORMAL = "normal"
    VERBOSE = "verbose"


class CLIOutputManager:
    """Output manager shared by CLI commands."""

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL, use_colors: bool = True):
        self.level = level
        self.console = Console(
            stderr=False, force_terminal=use_colors, quiet=(level == OutputLevel.QUIET)
        )
        # Never quiet for errors
        self.error_console = Console(stderr=True, force_terminal=use_colors, quiet=False)

    def info(self, message: str, **kwargs) -> None:
        if self.level == OutputLevel.QUIET:
            return
        self.console.print(message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        if self.level == OutputLevel.QUIET:
            return
        self.console.print(f"✓ {message}", style="green", **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.error_console.print(f"⚠ {message}", style="yellow", **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Print error message (always shown regardless of quiet mode)."""
        kwargs.setdefault("markup", False)
        self.error_console.print(f"✗ Error: {message}", style="red bold", **kwargs)

    def table(self, table: Table) -> None:
        if self.level == OutputLevel.QUIET:
            return
        self.console.print(table)

    @property
    def is_verbose(self) -> bool:
        return self.level == OutputLevel.VERBOSE


def create_output_manager(
    quiet: bool = False, verbose: bool = False, use_colors: bool = True
) -> CLIOutputManager:
    """Create an output manager from the global CLI flags.

    Args:
        quiet: Only show errors
        verbose: Show detailed output
        use_colors: Force colored terminal output

    Returns:
        Configured output manager
    """
    if quiet:
        level = OutputLevel.QUIET
    elif verbose:
        level = OutputLevel.VERBOSE
    else:
        level = OutputLevel.NORMAL
    return CLIOutputManager(level=level, use_colors=use_colors)
