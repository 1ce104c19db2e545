# -*- coding: utf-8 -*-
"""Console output for the ``agent-responses`` CLI, rendered with Rich."""

import io
from typing import Any, Dict, Optional

from rich.console import Console
from rich.table import Table

# kind -> (symbol, style)
MESSAGE_STYLES = {
    "success": ("✓", "bold green"),
    "error": ("✗", "bold red"),
    "warning": ("⚠", "bold yellow"),
    "info": ("ℹ", "bold blue"),
}

SERVE_INFO_LABELS = (
    ("agent", "Agent"),
    ("url", "Responses URL"),
    ("stream_media_content", "Media streaming"),
    ("max_concurrent_requests", "Max concurrency"),
    ("log_level", "Log level"),
)

_consoles: Dict[bool, Console] = {}


def get_console(stderr: bool = False) -> Console:
    """Shared console for stdout, or stderr when ``stderr`` is set."""
    if stderr not in _consoles:
        _consoles[stderr] = Console(stderr=stderr)
    return _consoles[stderr]


def _echo(kind: str, message: str, stderr: bool = False, **kwargs) -> None:
    symbol, style = MESSAGE_STYLES[kind]
    get_console(stderr).print(f"{symbol} {message}", style=style, **kwargs)


def echo_success(message: str, **kwargs) -> None:
    """
    Print a success line in green.

    Example:
        >>> echo_success("Agent 'helper' loaded successfully")
        ✓ Agent 'helper' loaded successfully
    """
    _echo("success", message, **kwargs)


def echo_error(message: str, **kwargs) -> None:
    """Print an error line in red to stderr."""
    _echo("error", message, stderr=True, **kwargs)


def echo_warning(message: str, **kwargs) -> None:
    _echo("warning", message, **kwargs)


def echo_info(message: str, **kwargs) -> None:
    _echo("info", message, **kwargs)


def format_serve_info(
    info: Dict[str, Any],
    width: Optional[int] = None,
) -> str:
    """
    Render the serving summary as a key-value table.

    Args:
        info: values keyed like ``SERVE_INFO_LABELS``; missing keys are
            skipped
        width: console width used for rendering

    Returns:
        The rendered table
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="bold cyan")
    table.add_column("Value")

    for key, label in SERVE_INFO_LABELS:
        if info.get(key) is not None:
            table.add_row(label, str(info[key]))

    buffer = io.StringIO()
    Console(file=buffer, width=width, force_terminal=False).print(table)
    return buffer.getvalue()
