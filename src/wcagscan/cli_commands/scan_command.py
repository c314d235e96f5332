"""scan, batch and debug CLI commands."""

from pathlib import Path

import typer

from wcagscan.config import get_max_concurrent, get_timeout, get_wait_time
from wcagscan.modules.scanner import (
    RequestValidationError,
    ScanError,
    ScanReport,
    parse_batch_request,
    parse_scan_request,
)
from wcagscan.utils.debug import set_debug_enabled

from .deps import run_scan, scanner_class
from .output import print_report, report_json, screenshot_dir, write_report, write_screenshots
from .scan_helpers import build_request, collect_urls, normalize_verbose, read_login_file
from .shared import app, console

WCAG_VERSION_HELP = "WCAG version: 2.0, 2.1, 2.2"
LEVEL_HELP = "Conformance level: A, AA, AAA"
LOGIN_FILE_HELP = "YAML/JSON login block (loginUrl, usernameSelector, passwordSelector, ...)"


def _finish(
    report: ScanReport,
    output: Path | None,
    as_json: bool,
    fail_on_violations: bool,
) -> None:
    if as_json:
        typer.echo(report_json(report))
    else:
        print_report(report)
    if output is not None:
        path = write_report(report, output)
        if not as_json:
            console.print(f"[dim]Report written to {path}[/dim]")
        shots = write_screenshots(report, screenshot_dir(output))
        if shots and not as_json:
            console.print(f"[dim]Saved {len(shots)} screenshot(s) to {shots[0].parent}[/dim]")
    if fail_on_violations and report.summary().total > 0:
        raise typer.Exit(1)


def _parse_or_exit(parser, payload: dict, login_file: Path | None = None):
    try:
        if login_file is not None:
            payload["login"] = read_login_file(login_file)
        return parser(payload)
    except RequestValidationError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(2) from exc


def _run_single(options, debug: bool | None) -> ScanReport:
    async def run():
        scanner = scanner_class().from_config(debug=debug)
        try:
            return await scanner.scan_single_page(options)
        finally:
            await scanner.cleanup()

    try:
        result = run_scan(run())
    except ScanError as exc:
        console.print(f"[red]Scan failed: {exc}[/red]")
        raise typer.Exit(1) from exc
    return ScanReport.from_single(result)


@app.command()
def scan(
    url: str = typer.Argument(..., help="Page URL to scan"),
    wcag_version: str = typer.Option("2.1", "--wcag-version", "-w", help=WCAG_VERSION_HELP),
    level: str = typer.Option("AA", "--level", "-l", help=LEVEL_HELP),
    screenshot: bool = typer.Option(False, "--screenshot", help="Capture a full-page screenshot"),
    best_practices: bool = typer.Option(
        False, "--best-practices", help="Include best-practice rules"
    ),
    wait_time: int | None = typer.Option(
        None, "--wait-time", help="Milliseconds to let dynamic content settle"
    ),
    timeout: int | None = typer.Option(None, "--timeout", help="Navigation timeout (ms)"),
    login_file: Path | None = typer.Option(
        None, "--login-file", exists=True, dir_okay=False, help=LOGIN_FILE_HELP
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON report here"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON report to stdout"),
    headed: bool = typer.Option(False, "--headed", help="Show the browser window"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo scan logs"),
    fail_on_violations: bool = typer.Option(
        False, "--fail-on-violations", help="Exit with status 1 if violations are found"
    ),
) -> None:
    """Scan a single page."""
    set_debug_enabled(normalize_verbose(verbose))
    payload = build_request(
        wcag_version=wcag_version,
        level=level,
        screenshot=screenshot,
        best_practices=best_practices,
        wait_time=get_wait_time() if wait_time is None else wait_time,
        timeout=get_timeout() if timeout is None else timeout,
    )
    payload["url"] = url
    options = _parse_or_exit(parse_scan_request, payload, login_file)
    report = _run_single(options, debug=True if headed else None)
    _finish(report, output, as_json, fail_on_violations)


@app.command()
def batch(
    urls: list[str] | None = typer.Argument(None, help="Page URLs to scan"),
    url_file: Path | None = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="File with one URL per line"
    ),
    wcag_version: str = typer.Option("2.1", "--wcag-version", "-w", help=WCAG_VERSION_HELP),
    level: str = typer.Option("AA", "--level", "-l", help=LEVEL_HELP),
    screenshot: bool = typer.Option(False, "--screenshot", help="Capture full-page screenshots"),
    best_practices: bool = typer.Option(
        False, "--best-practices", help="Include best-practice rules"
    ),
    wait_time: int | None = typer.Option(
        None, "--wait-time", help="Milliseconds to let dynamic content settle"
    ),
    timeout: int | None = typer.Option(None, "--timeout", help="Navigation timeout (ms)"),
    login_file: Path | None = typer.Option(
        None, "--login-file", exists=True, dir_okay=False, help=LOGIN_FILE_HELP
    ),
    max_concurrent: int | None = typer.Option(
        None, "--max-concurrent", "-c", help="Pages scanned at once (capped at 5)"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON report here"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON report to stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo scan logs"),
    fail_on_violations: bool = typer.Option(
        False, "--fail-on-violations", help="Exit with status 1 if violations are found"
    ),
) -> None:
    """Scan several pages with bounded concurrency."""
    set_debug_enabled(normalize_verbose(verbose))
    payload = build_request(
        wcag_version=wcag_version,
        level=level,
        screenshot=screenshot,
        best_practices=best_practices,
        wait_time=get_wait_time() if wait_time is None else wait_time,
        timeout=get_timeout() if timeout is None else timeout,
    )
    payload["urls"] = collect_urls(urls, url_file)
    payload["maxConcurrent"] = get_max_concurrent() if max_concurrent is None else max_concurrent
    request = _parse_or_exit(parse_batch_request, payload, login_file)

    if not as_json:
        console.print(
            f"[blue]Scanning {len(request.urls)} page(s), "
            f"{request.max_concurrent} at a time...[/blue]"
        )

    async def run():
        scanner = scanner_class().from_config()
        try:
            return await scanner.scan_batch(
                request.urls, request.options, max_concurrent=request.max_concurrent
            )
        finally:
            await scanner.cleanup()

    try:
        result = run_scan(run())
    except ScanError as exc:
        console.print(f"[red]Batch scan failed: {exc}[/red]")
        raise typer.Exit(1) from exc
    _finish(ScanReport.from_batch(result), output, as_json, fail_on_violations)


@app.command()
def debug(
    url: str = typer.Argument(..., help="Page URL to scan"),
    wcag_version: str = typer.Option("2.1", "--wcag-version", "-w", help=WCAG_VERSION_HELP),
    level: str = typer.Option("AA", "--level", "-l", help=LEVEL_HELP),
    best_practices: bool = typer.Option(
        False, "--best-practices", help="Include best-practice rules"
    ),
    wait_time: int = typer.Option(8000, "--wait-time", help="Settle delay (ms)"),
    timeout: int = typer.Option(60000, "--timeout", help="Navigation timeout (ms)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write JSON report here"),
) -> None:
    """Scan in a visible browser with verbose logs and longer waits."""
    set_debug_enabled(True)
    payload = build_request(
        wcag_version=wcag_version,
        level=level,
        screenshot=False,
        best_practices=best_practices,
        wait_time=wait_time,
        timeout=timeout,
    )
    payload["url"] = url
    options = _parse_or_exit(parse_scan_request, payload)
    report = _run_single(options, debug=True)
    _finish(report, output, as_json=False, fail_on_violations=False)
