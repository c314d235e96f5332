"""Accessibility scan orchestration: browser, rule engine, page and batch scans."""

from .batch import (
    DEFAULT_MAX_CONCURRENT,
    MAX_CONCURRENT_CEILING,
    BatchCoordinator,
    clamp_concurrency,
    partition_windows,
)
from .browser import BrowserSession, LaunchConfig, build_launch_config, is_serverless
from .errors import (
    BrowserLaunchError,
    EvaluationError,
    LoginError,
    NavigationError,
    RequestValidationError,
    RuleEngineUnavailableError,
    ScanError,
)
from .log_capture import LogCapture
from .models import (
    BatchResult,
    BatchSummary,
    LogEntry,
    LoginCredentials,
    RawFinding,
    RuleSummary,
    ScanOptions,
    ScanReport,
    SinglePageResult,
    Summary,
    Violation,
)
from .orchestrator import AccessibilityScanner, debug_scan, scan_url, scan_urls
from .page_scanner import PageScanner, ScanState
from .processor import (
    aggregate_summaries,
    calculate_summary,
    normalize_impact,
    process_violations,
    sort_violations,
    summarize_by_rule,
)
from .requests import MAX_BATCH_URLS, BatchRequest, parse_batch_request, parse_scan_request
from .rule_config import build_rule_tags, build_run_config
from .rule_engine import RuleEngineLoader, RuleSource

__all__ = [
    "AccessibilityScanner",
    "BatchCoordinator",
    "BatchRequest",
    "BatchResult",
    "BatchSummary",
    "BrowserLaunchError",
    "BrowserSession",
    "DEFAULT_MAX_CONCURRENT",
    "EvaluationError",
    "LaunchConfig",
    "LogCapture",
    "LogEntry",
    "LoginCredentials",
    "LoginError",
    "MAX_BATCH_URLS",
    "MAX_CONCURRENT_CEILING",
    "NavigationError",
    "PageScanner",
    "RawFinding",
    "RequestValidationError",
    "RuleEngineLoader",
    "RuleEngineUnavailableError",
    "RuleSource",
    "RuleSummary",
    "ScanError",
    "ScanOptions",
    "ScanReport",
    "ScanState",
    "SinglePageResult",
    "Summary",
    "Violation",
    "aggregate_summaries",
    "build_launch_config",
    "build_rule_tags",
    "build_run_config",
    "calculate_summary",
    "clamp_concurrency",
    "debug_scan",
    "is_serverless",
    "normalize_impact",
    "parse_batch_request",
    "parse_scan_request",
    "partition_windows",
    "process_violations",
    "scan_url",
    "scan_urls",
    "sort_violations",
    "summarize_by_rule",
]
