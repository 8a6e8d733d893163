"""Shared Rich console instance for CLI output."""

from rich.console import Console

console = Console()

# Diagnostics go to stderr so --json output on stdout stays parseable
err_console = Console(stderr=True)

__all__ = ["console", "err_console"]
