"""Windowed batch scanning with per-URL failure isolation."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from .log_capture import LogCapture
from .models import BatchResult, ScanOptions, SinglePageResult, Summary, utc_timestamp
from .processor import aggregate_summaries

DEFAULT_MAX_CONCURRENT = 3
MAX_CONCURRENT_CEILING = 5

PageScan = Callable[[ScanOptions], Awaitable[SinglePageResult]]


def clamp_concurrency(value: int | None) -> int:
    """Return a window size between 1 and the hard ceiling."""
    if value is None:
        return DEFAULT_MAX_CONCURRENT
    return max(1, min(int(value), MAX_CONCURRENT_CEILING))


def partition_windows(urls: Sequence[str], size: int) -> list[list[str]]:
    """Split URLs into consecutive windows of at most ``size`` entries."""
    if size < 1:
        raise ValueError("window size must be at least 1")
    return [list(urls[start : start + size]) for start in range(0, len(urls), size)]


def degraded_result(url: str, options: ScanOptions, error: str) -> SinglePageResult:
    """Placeholder result for a URL whose scan failed."""
    return SinglePageResult(
        url=url,
        timestamp=utc_timestamp(),
        wcag_version=options.wcag_version,
        level=options.level,
        summary=Summary(),
        violations=(),
        logs=(),
        error=error,
    )


class BatchCoordinator:
    """Scan many URLs, at most ``max_concurrent`` at a time.

    URLs run in consecutive windows; a window must finish completely before
    the next one starts. A failed URL becomes a degraded result instead of
    aborting the batch, so the result always has one entry per input URL in
    input order.
    """

    def __init__(self, scan_page: PageScan, log: LogCapture | None = None):
        self._scan_page = scan_page
        self.log = log or LogCapture()

    async def run(
        self,
        urls: Sequence[str],
        options: ScanOptions,
        max_concurrent: int | None = None,
    ) -> BatchResult:
        """Scan ``urls`` with ``options``; ``options.url`` is replaced per entry."""
        size = clamp_concurrency(max_concurrent)
        windows = partition_windows(urls, size)
        self.log.info(
            f"Batch scan of {len(urls)} URLs in {len(windows)} window(s), "
            f"max {size} concurrent"
        )

        results: list[SinglePageResult] = []
        for index, window in enumerate(windows, start=1):
            self.log.info(f"Window {index}/{len(windows)}: {', '.join(window)}")
            window_results = await asyncio.gather(
                *(self._scan_isolated(url, options) for url in window)
            )
            results.extend(window_results)

        summary = aggregate_summaries(results)
        failed = sum(1 for result in results if result.error)
        self.log.info(
            f"Batch complete: {summary.total_pages} pages, "
            f"{summary.total_violations} violations, {failed} failed"
        )
        return BatchResult(
            timestamp=utc_timestamp(),
            wcag_version=options.wcag_version,
            level=options.level,
            results=tuple(results),
            summary=summary,
            logs=tuple(self.log.entries()),
        )

    async def _scan_isolated(self, url: str, options: ScanOptions) -> SinglePageResult:
        try:
            return await self._scan_page(options.for_url(url))
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            self.log.error(f"Failed to scan {url}: {message}")
            return degraded_result(url, options, message)
