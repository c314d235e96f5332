"""Console and JSON rendering of scan reports."""

import base64
import json
import re
from pathlib import Path

from rich.table import Table

from wcagscan.modules.scanner import ScanReport, sort_violations, summarize_by_rule

from .shared import console

SEVERITY_STYLES = {
    "critical": "bold red",
    "serious": "red",
    "moderate": "yellow",
    "minor": "green",
    "unknown": "dim",
}


def report_json(report: ScanReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def write_report(report: ScanReport, path: Path) -> Path:
    """Write the report as JSON and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report_json(report), encoding="utf-8")
    return path


def screenshot_dir(output: Path) -> Path:
    return output.with_name(f"{output.stem}-screenshots")


def _screenshot_name(index: int, url: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", url.split("://", 1)[-1]).strip("-")[:80]
    return f"{index:02d}-{slug or 'page'}.png"


def write_screenshots(report: ScanReport, directory: Path) -> list[Path]:
    """Decode captured screenshots into PNG files; returns the files written."""
    shots = report.screenshots()
    if not shots:
        return []
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for index, (url, data) in enumerate(shots, start=1):
        path = directory / _screenshot_name(index, url)
        path.write_bytes(base64.b64decode(data))
        written.append(path)
    return written


def print_report(report: ScanReport) -> None:
    """Print per-page, per-rule and per-violation tables."""
    pages = Table(title="Pages", show_lines=False)
    pages.add_column("URL", style="bold white", overflow="fold")
    pages.add_column("Total", justify="right")
    pages.add_column("Critical", justify="right", style="bold red")
    pages.add_column("Serious", justify="right", style="red")
    pages.add_column("Moderate", justify="right", style="yellow")
    pages.add_column("Minor", justify="right", style="green")
    pages.add_column("Status")
    for result in report.results():
        summary = result.summary
        status = f"[red]failed: {result.error}[/]" if result.error else "[green]ok[/]"
        pages.add_row(
            result.url,
            str(summary.total),
            str(summary.critical),
            str(summary.serious),
            str(summary.moderate),
            str(summary.minor),
            status,
        )
    console.print(pages)

    rules = summarize_by_rule(report.all_violations())
    if not rules:
        console.print("[green]✓[/] No accessibility violations detected")
        return
    table = Table(title="Violations by rule")
    table.add_column("Rule", style="bold")
    table.add_column("Severity")
    table.add_column("Elements", justify="right")
    for rule in rules:
        style = SEVERITY_STYLES.get(rule.severity, "white")
        table.add_row(rule.id, f"[{style}]{rule.severity}[/]", str(rule.count))
    console.print(table)

    details = Table(title="Violations")
    details.add_column("Page", style="dim", overflow="fold")
    details.add_column("Rule", style="bold")
    details.add_column("Severity")
    details.add_column("Elements", justify="right")
    details.add_column("Description", overflow="fold")
    for violation in sort_violations(report.all_violations()):
        style = SEVERITY_STYLES.get(violation.impact, "white")
        details.add_row(
            violation.page_path,
            violation.id,
            f"[{style}]{violation.impact}[/]",
            str(violation.element_count),
            violation.description,
        )
    console.print(details)

    summary = report.summary()
    console.print(
        f"[bold]{summary.total}[/] violation(s): "
        f"[bold red]{summary.critical}[/] critical, [red]{summary.serious}[/] serious, "
        f"[yellow]{summary.moderate}[/] moderate, [green]{summary.minor}[/] minor"
    )
