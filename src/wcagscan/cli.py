"""wcagscan CLI - automated WCAG accessibility scanning."""

from wcagscan.cli_commands.shared import app, console
from wcagscan.modules.scanner import AccessibilityScanner, debug_scan, scan_url, scan_urls
from wcagscan.utils.async_utils import safe_async_run

# Command registration side effects.
from wcagscan.cli_commands import scan_command as _scan_command  # noqa: F401

__all__ = [
    "AccessibilityScanner",
    "app",
    "console",
    "debug_scan",
    "main",
    "safe_async_run",
    "scan_url",
    "scan_urls",
    "version",
]


@app.command()
def version() -> None:
    """Show the installed wcagscan version."""
    from importlib.metadata import PackageNotFoundError, version as pkg_version

    try:
        current_version = pkg_version("wcagscan")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"wcagscan {current_version}")


def main():
    """Entry point for the CLI."""
    app()
