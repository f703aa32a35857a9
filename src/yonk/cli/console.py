"""Shared console utilities for CLI commands."""

import sys

from rich.console import Console
from rich.markup import escape

# Status output goes to stderr, as init scripts expect
console = Console(stderr=True)


def error(msg: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]{escape(msg)}[/red]")


def dim(msg: str) -> None:
    """Print a dimmed message."""
    console.print(f"[dim]{escape(msg)}[/dim]")


def stderr_is_terminal() -> bool:
    """Check whether stderr is attached to a terminal."""
    try:
        return sys.stderr.isatty()
    except (AttributeError, ValueError):
        return False


def format_uptime(seconds: float) -> str:
    """Format an uptime in the largest sensible unit."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    if seconds < 3600:
        return f"{seconds / 60:.0f}m"
    if seconds < 86400:
        return f"{seconds / 3600:.1f}h"
    return f"{seconds / 86400:.1f}d"
