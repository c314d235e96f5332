"""Tests for CLI commands."""

import base64
import json
from pathlib import Path

import pytest
from conftest import SAMPLE_VIOLATIONS
from typer.testing import CliRunner

from wcagscan import cli as cli_module
from wcagscan.cli import app
from wcagscan.cli_commands.scan_helpers import build_request, collect_urls, read_url_file
from wcagscan.modules.scanner import (
    BatchResult,
    NavigationError,
    ScanOptions,
    SinglePageResult,
    Summary,
    aggregate_summaries,
    process_violations,
)

runner = CliRunner()


def _page(
    options: ScanOptions,
    violations: list[dict] | None = None,
    screenshot: str | None = None,
) -> SinglePageResult:
    processed = process_violations(SAMPLE_VIOLATIONS if violations is None else violations, options.url)
    return SinglePageResult(
        url=options.url,
        timestamp="2024-01-01T00:00:00.000Z",
        wcag_version=options.wcag_version,
        level=options.level,
        summary=Summary(
            total=len(processed),
            critical=sum(1 for v in processed if v.impact == "critical"),
            serious=sum(1 for v in processed if v.impact == "serious"),
        ),
        violations=tuple(processed),
        screenshot=screenshot if options.include_screenshot else None,
    )


class FakeScanner:
    """Records how the CLI drives the scanner."""

    instances: list["FakeScanner"] = []
    violations: list[dict] | None = None
    error: Exception | None = None
    screenshot: str | None = None

    def __init__(self, debug: bool | None):
        self.debug = debug
        self.calls: list[tuple] = []
        self.cleaned_up = False
        FakeScanner.instances.append(self)

    @classmethod
    def from_config(cls, debug: bool | None = None, **kwargs) -> "FakeScanner":
        return cls(debug)

    async def scan_single_page(self, options: ScanOptions) -> SinglePageResult:
        self.calls.append(("single", options))
        if self.error is not None:
            raise self.error
        return _page(options, self.violations, self.screenshot)

    async def scan_batch(self, urls, options, max_concurrent=None) -> BatchResult:
        self.calls.append(("batch", tuple(urls), options, max_concurrent))
        results = tuple(
            _page(options.for_url(url), self.violations, self.screenshot) for url in urls
        )
        return BatchResult(
            timestamp="2024-01-01T00:00:00.000Z",
            wcag_version=options.wcag_version,
            level=options.level,
            results=results,
            summary=aggregate_summaries(results),
        )

    async def cleanup(self) -> None:
        self.cleaned_up = True


@pytest.fixture
def fake_scanner(monkeypatch: pytest.MonkeyPatch) -> type[FakeScanner]:
    FakeScanner.instances = []
    FakeScanner.violations = None
    FakeScanner.error = None
    FakeScanner.screenshot = None
    monkeypatch.setattr(cli_module, "AccessibilityScanner", FakeScanner)
    return FakeScanner


def test_commands_registered() -> None:
    names = {command.name or command.callback.__name__ for command in app.registered_commands}
    assert {"scan", "batch", "debug", "version"} <= names


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "wcagscan" in result.output


class TestScanCommand:
    def test_json_output(self, fake_scanner) -> None:
        result = runner.invoke(
            app, ["scan", "https://example.com", "--json", "--level", "aaa", "--wait-time", "0"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["kind"] == "single"
        assert data["level"] == "AAA"
        assert data["summary"]["total"] == 2
        [scanner] = fake_scanner.instances
        assert scanner.cleaned_up
        options = scanner.calls[0][1]
        assert options.wait_time == 0
        assert options.timeout == 30000
        assert scanner.debug is None

    def test_table_output_and_report_file(self, fake_scanner, temp_dir: Path) -> None:
        report_path = temp_dir / "out" / "report.json"

        result = runner.invoke(app, ["scan", "https://example.com", "-o", str(report_path)])

        assert result.exit_code == 0, result.output
        assert "image-alt" in result.output
        assert json.loads(report_path.read_text())["url"] == "https://example.com"

    def test_violations_listed_by_severity(self, fake_scanner) -> None:
        fake_scanner.violations = list(reversed(SAMPLE_VIOLATIONS))
        result = runner.invoke(app, ["scan", "https://example.com"])

        assert result.exit_code == 0, result.output
        listing = result.output.split("Description", 1)[1]
        assert listing.index("image-alt") < listing.index("color-contrast")
        assert "alternate" in listing

    def test_screenshots_saved_next_to_report(self, fake_scanner, temp_dir: Path) -> None:
        fake_scanner.screenshot = base64.b64encode(b"\x89PNG page").decode("ascii")
        report_path = temp_dir / "report.json"

        result = runner.invoke(
            app, ["scan", "https://example.com/a?b=1", "--screenshot", "-o", str(report_path)]
        )

        assert result.exit_code == 0, result.output
        [shot] = (temp_dir / "report-screenshots").iterdir()
        assert shot.name == "01-example-com-a-b-1.png"
        assert shot.read_bytes() == b"\x89PNG page"
        assert "Saved 1 screenshot(s)" in result.output

    def test_no_screenshot_dir_without_screenshots(self, fake_scanner, temp_dir: Path) -> None:
        runner.invoke(app, ["scan", "https://example.com", "-o", str(temp_dir / "r.json")])
        assert not (temp_dir / "r-screenshots").exists()

    def test_login_file(self, fake_scanner, temp_dir: Path) -> None:
        login_file = temp_dir / "login.yml"
        login_file.write_text(
            "loginUrl: /signin\n"
            "usernameSelector: '#email'\n"
            "passwordSelector: '#password'\n"
            "username: tester@example.com\n"
            "password: hunter2\n"
        )

        result = runner.invoke(
            app, ["scan", "https://example.com", "--login-file", str(login_file), "--json"]
        )

        assert result.exit_code == 0, result.output
        login = fake_scanner.instances[0].calls[0][1].login
        assert login.login_url == "/signin"
        assert login.username_selector == "#email"
        assert login.password == "hunter2"
        assert "hunter2" not in result.output

    def test_incomplete_login_file_rejected(self, fake_scanner, temp_dir: Path) -> None:
        login_file = temp_dir / "login.yml"
        login_file.write_text("loginUrl: /signin\n")

        result = runner.invoke(
            app, ["scan", "https://example.com", "--login-file", str(login_file)]
        )

        assert result.exit_code == 2
        assert "login.usernameSelector is required" in result.output
        assert fake_scanner.instances == []

    def test_clean_page(self, fake_scanner) -> None:
        fake_scanner.violations = []
        result = runner.invoke(app, ["scan", "https://example.com"])
        assert result.exit_code == 0
        assert "No accessibility violations detected" in result.output

    def test_fail_on_violations(self, fake_scanner) -> None:
        result = runner.invoke(app, ["scan", "https://example.com", "--fail-on-violations"])
        assert result.exit_code == 1

    def test_invalid_url_rejected_before_scanning(self, fake_scanner) -> None:
        result = runner.invoke(app, ["scan", "example.com"])
        assert result.exit_code == 2
        assert "Invalid URL format" in result.output
        assert fake_scanner.instances == []

    def test_scan_failure(self, fake_scanner) -> None:
        fake_scanner.error = NavigationError("Failed to load page: https://example.com (500)", 500)
        result = runner.invoke(app, ["scan", "https://example.com"])
        assert result.exit_code == 1
        assert "Scan failed" in result.output
        assert fake_scanner.instances[0].cleaned_up

    def test_headed_flag(self, fake_scanner) -> None:
        runner.invoke(app, ["scan", "https://example.com", "--headed"])
        assert fake_scanner.instances[0].debug is True

    def test_wait_time_from_config(self, fake_scanner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WCAGSCAN_WAIT_TIME", "750")
        runner.invoke(app, ["scan", "https://example.com", "--json"])
        assert fake_scanner.instances[0].calls[0][1].wait_time == 750


class TestBatchCommand:
    def test_urls_from_args_and_file(self, fake_scanner, temp_dir: Path) -> None:
        url_file = temp_dir / "urls.txt"
        url_file.write_text("# pages\nhttps://b.test\n\nhttps://a.test\n")

        result = runner.invoke(
            app,
            ["batch", "https://a.test", "--file", str(url_file), "-c", "9", "--json"],
        )

        assert result.exit_code == 0, result.output
        _, urls, options, max_concurrent = fake_scanner.instances[0].calls[0]
        assert urls == ("https://a.test", "https://b.test")
        assert max_concurrent == 5
        assert options.level == "AA"
        data = json.loads(result.output)
        assert data["kind"] == "batch"
        assert data["summary"]["totalPages"] == 2

    def test_requires_urls(self, fake_scanner) -> None:
        result = runner.invoke(app, ["batch"])
        assert result.exit_code == 2
        assert "URLs array is required" in result.output

    def test_default_concurrency_from_config(
        self, fake_scanner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("WCAGSCAN_MAX_CONCURRENT", "2")
        runner.invoke(app, ["batch", "https://a.test", "https://b.test"])
        assert fake_scanner.instances[0].calls[0][3] == 2


def test_debug_command_uses_headed_scanner(fake_scanner) -> None:
    result = runner.invoke(app, ["debug", "https://example.com"])

    assert result.exit_code == 0, result.output
    scanner = fake_scanner.instances[0]
    assert scanner.debug is True
    options = scanner.calls[0][1]
    assert options.wait_time == 8000
    assert options.timeout == 60000


class TestScanHelpers:
    def test_read_url_file(self, temp_dir: Path) -> None:
        path = temp_dir / "urls.txt"
        path.write_text("https://a.test\n  # skip\n\n  https://b.test  \n")
        assert read_url_file(path) == ["https://a.test", "https://b.test"]

    def test_collect_urls_dedupes_in_order(self) -> None:
        assert collect_urls(["https://b.test", "https://a.test", "https://b.test"], None) == [
            "https://b.test",
            "https://a.test",
        ]
        assert collect_urls(None, None) == []

    def test_build_request_uppercases_level(self) -> None:
        payload = build_request(
            wcag_version="2.2",
            level="aa",
            screenshot=True,
            best_practices=False,
            wait_time=10,
            timeout=20,
        )
        assert payload == {
            "wcagVersion": "2.2",
            "level": "AA",
            "includeScreenshot": True,
            "includeBestPractices": False,
            "waitTime": 10,
            "timeout": 20,
        }
