"""Late-bound lookups of the scanner facade used by the scan commands.

``scan``, ``batch`` and ``debug`` fetch ``AccessibilityScanner`` and
``safe_async_run`` from :mod:`wcagscan.cli` every time they run, so replacing
either attribute there (a fake scanner in tests, say) reaches all commands.
"""

from collections.abc import Coroutine
from importlib import import_module
from typing import Any

FACADE_MODULE = "wcagscan.cli"


def scanner_class() -> Any:
    """Return the scanner class currently exposed by the facade."""
    return import_module(FACADE_MODULE).AccessibilityScanner


def run_scan(coro: Coroutine[Any, Any, Any]) -> Any:
    """Drive a scan coroutine to completion from synchronous command code."""
    return import_module(FACADE_MODULE).safe_async_run(coro)
