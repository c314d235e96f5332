"""Debug console output for scan sessions.

Thread-local toggle with rich formatting, used to echo captured scan log
entries while a CLI session is running in verbose mode.
"""

import json
import threading
from typing import Any

from rich.console import Console
from rich.syntax import Syntax

# Thread-local storage for debug state
_debug_state = threading.local()

_LEVEL_STYLES = {
    "info": "cyan",
    "warn": "yellow",
    "error": "bold red",
    "debug": "magenta",
}


def set_debug_enabled(enabled: bool) -> None:
    """Set debug mode for the current thread/session."""
    _debug_state.enabled = enabled


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled for the current thread/session."""
    return getattr(_debug_state, "enabled", False)


def _console() -> Console:
    console = getattr(_debug_state, "console", None)
    if console is None:
        console = Console(stderr=True)
        _debug_state.console = console
    return console


def debug_print(level: str, message: str, **data: Any) -> None:
    """Print a scan log line if debug mode is enabled.

    Args:
        level: Log level (info, warn, error, debug)
        message: Main message to display
        **data: Additional key-value pairs to display
    """
    if not is_debug_enabled():
        return
    console = _console()
    style = _LEVEL_STYLES.get(level, "white")
    console.print(f"[{level.upper()}] {message}", style=style, markup=False, highlight=False)
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, dict):
            try:
                json_str = json.dumps(value, indent=2)
                console.print(f"  {key}:", style="dim")
                console.print(Syntax(json_str, "json", theme="monokai", line_numbers=False))
            except (TypeError, ValueError):
                console.print(f"  {key}: {value}", style="dim", markup=False)
        elif isinstance(value, list):
            console.print(f"  {key}: {', '.join(str(v) for v in value)}", style="dim", markup=False)
        elif isinstance(value, str) and len(value) > 100:
            console.print(f"  {key}: {value[:100]}... ({len(value)} chars)", style="dim", markup=False)
        else:
            console.print(f"  {key}: {value}", style="dim", markup=False)
