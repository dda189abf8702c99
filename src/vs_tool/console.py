"""Console output helpers"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

CONSOLE: Console = Console()

_debug_enabled: bool = False


def configure_logging(debug: bool = False) -> None:
    """Route vs_tool loggers through rich"""
    global _debug_enabled
    _debug_enabled = debug

    logger = logging.getLogger("vs_tool")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=CONSOLE, show_path=False, markup=False))
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def print_status(message: str) -> None:
    """Print status message"""
    CONSOLE.print(f"[blue][INFO][/blue] {message}")


def print_success(message: str) -> None:
    """Print success message"""
    CONSOLE.print(f"[green][SUCCESS][/green] {message}")


def print_warning(message: str) -> None:
    """Print warning message"""
    CONSOLE.print(f"[yellow][WARNING][/yellow] {message}")


def print_error(message: str) -> None:
    """Print error message"""
    CONSOLE.print(f"[red][ERROR][/red] {message}")


def print_debug(message: str) -> None:
    """Print debug message"""
    if _debug_enabled:
        CONSOLE.print(f"[cyan][DEBUG][/cyan] {message}")


def print_header(title: str) -> None:
    """Print header"""
    CONSOLE.print()
    CONSOLE.print(Panel(title, style="bold magenta", expand=False))
    CONSOLE.print()
