"""Scan orchestrator tying browser, rule loading, page scans and batches together."""

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from wcagscan.config import get_chrome_path, get_rule_sources, is_debug_mode

from .batch import BatchCoordinator
from .browser import BrowserSession, Launcher
from .log_capture import LogCapture
from .models import BatchResult, LogEntry, ScanOptions, SinglePageResult
from .page_scanner import PageScanner, Sleeper
from .rule_engine import RuleEngineLoader


class AccessibilityScanner:
    """Run single-page and batch accessibility scans on one browser process.

    The browser is launched lazily on the first scan and must be released with
    :meth:`cleanup` (or by using the scanner as an async context manager).
    Each instance owns its own :class:`LogCapture`; do not share an instance
    between unrelated concurrent batches.
    """

    def __init__(
        self,
        debug: bool = False,
        log: LogCapture | None = None,
        session: BrowserSession | None = None,
        loader: RuleEngineLoader | None = None,
        launcher: Launcher | None = None,
        executable_path: str | None = None,
        rule_sources: Sequence[str] | None = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.debug = debug
        self.log = log or LogCapture()
        self.session = session or BrowserSession(
            log=self.log,
            debug=debug,
            launcher=launcher,
            executable_path=executable_path,
        )
        self.loader = loader or RuleEngineLoader(log=self.log, sources=rule_sources)
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        project_dir: Path | None = None,
        debug: bool | None = None,
        **kwargs: Any,
    ) -> "AccessibilityScanner":
        """Build a scanner from layered configuration."""
        return cls(
            debug=is_debug_mode(project_dir) if debug is None else debug,
            executable_path=get_chrome_path(project_dir),
            rule_sources=get_rule_sources(project_dir),
            **kwargs,
        )

    async def __aenter__(self) -> "AccessibilityScanner":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.cleanup()

    async def initialize(self) -> None:
        """Start log capture and launch the browser if needed."""
        self.log.install()
        await self.session.initialize()

    async def cleanup(self) -> None:
        """Close the browser and stop capturing logs."""
        try:
            await self.session.cleanup()
        finally:
            self.log.restore()

    def get_logs(self) -> list[LogEntry]:
        return self.log.entries()

    def new_page_scanner(self) -> PageScanner:
        return PageScanner(self.session, self.loader, self.log, sleep=self._sleep)

    async def scan_single_page(
        self,
        options: ScanOptions,
        include_logs: bool = True,
    ) -> SinglePageResult:
        """Scan one URL; errors propagate after the page context is closed."""
        await self.initialize()
        self.log.debug(f"Debug mode: {'ON' if self.debug else 'OFF'}")
        return await self.new_page_scanner().scan(options, include_logs=include_logs)

    async def scan_batch(
        self,
        urls: Sequence[str],
        options: ScanOptions,
        max_concurrent: int | None = None,
    ) -> BatchResult:
        """Scan several URLs; per-URL failures become degraded entries."""
        self.log.clear()
        await self.initialize()
        coordinator = BatchCoordinator(self._scan_batch_page, self.log)
        return await coordinator.run(urls, options, max_concurrent)

    async def _scan_batch_page(self, options: ScanOptions) -> SinglePageResult:
        # Batch logs are attached once to the BatchResult.
        return await self.scan_single_page(options, include_logs=False)


async def scan_url(url: str, debug: bool | None = None, **options: Any) -> SinglePageResult:
    """Scan one URL with a throwaway scanner."""
    scanner = AccessibilityScanner.from_config(debug=debug)
    try:
        return await scanner.scan_single_page(ScanOptions(url=url, **options))
    finally:
        await scanner.cleanup()


async def scan_urls(
    urls: Sequence[str],
    max_concurrent: int | None = None,
    debug: bool | None = None,
    **options: Any,
) -> BatchResult:
    """Scan several URLs with a throwaway scanner."""
    if not urls:
        raise ValueError("At least one URL is required")
    scanner = AccessibilityScanner.from_config(debug=debug)
    try:
        return await scanner.scan_batch(
            urls,
            ScanOptions(url=urls[0], **options),
            max_concurrent=max_concurrent,
        )
    finally:
        await scanner.cleanup()


DEBUG_WAIT_TIME = 8000
DEBUG_TIMEOUT = 60000


async def debug_scan(url: str, **options: Any) -> SinglePageResult:
    """Scan in headed mode with longer waits, for chasing result discrepancies."""
    settings = {
        "wait_time": DEBUG_WAIT_TIME,
        "timeout": DEBUG_TIMEOUT,
        "include_screenshot": False,
        **options,
    }
    scanner = AccessibilityScanner.from_config(debug=True)
    try:
        await scanner.initialize()
        scanner.log.info(f"Debug scan for: {url}")
        result = await scanner.scan_single_page(ScanOptions(url=url, **settings))
        scanner.log.info(
            "Debug summary",
            url=result.url,
            violations=len(result.violations),
            critical=result.summary.critical,
            serious=result.summary.serious,
            moderate=result.summary.moderate,
            minor=result.summary.minor,
            logs=len(result.logs),
        )
        return result
    finally:
        await scanner.cleanup()
