"""Data models for scan options, rule engine findings and scan results."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Literal

WCAG_VERSIONS = ("2.0", "2.1", "2.2")
LEVELS = ("A", "AA", "AAA")
IMPACT_LEVELS = ("critical", "serious", "moderate", "minor")
LOG_LEVELS = ("info", "warn", "error", "debug")

DEFAULT_WCAG_VERSION = "2.1"
DEFAULT_LEVEL = "AA"
DEFAULT_WAIT_TIME = 3000
DEFAULT_TIMEOUT = 30000
DEFAULT_LOGIN_TIMEOUT = 10000
DEFAULT_SUBMIT_SELECTOR = 'button[type="submit"]'


def utc_timestamp() -> str:
    """Return the current time as an ISO-8601 UTC string."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class LoginCredentials:
    """Form login performed in the scan context before the target page loads.

    ``login_url`` may be absolute or relative to the scanned URL.
    ``wait_for_login_timeout`` bounds the wait for the username field (ms).
    """

    login_url: str
    username_selector: str
    password_selector: str
    username: str
    password: str = field(repr=False)
    submit_selector: str = DEFAULT_SUBMIT_SELECTOR
    wait_for_login_timeout: int = DEFAULT_LOGIN_TIMEOUT

    def __post_init__(self) -> None:
        if self.wait_for_login_timeout <= 0:
            raise ValueError("wait_for_login_timeout must be positive")


@dataclass(frozen=True)
class ScanOptions:
    """Settings for one single-page scan. Times are in milliseconds."""

    url: str
    wcag_version: str = DEFAULT_WCAG_VERSION
    level: str = DEFAULT_LEVEL
    include_screenshot: bool = False
    include_best_practices: bool = False
    wait_time: int = DEFAULT_WAIT_TIME
    timeout: int = DEFAULT_TIMEOUT
    login: LoginCredentials | None = None

    def __post_init__(self) -> None:
        if self.wcag_version not in WCAG_VERSIONS:
            raise ValueError(f"Unsupported WCAG version: {self.wcag_version}")
        if self.level not in LEVELS:
            raise ValueError(f"Unsupported conformance level: {self.level}")
        if self.wait_time < 0:
            raise ValueError("wait_time must not be negative")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    def for_url(self, url: str) -> "ScanOptions":
        """Return a copy of these options targeting another URL."""
        return replace(self, url=url)


@dataclass(frozen=True)
class LogEntry:
    """A single captured diagnostic line."""

    timestamp: str
    level: str
    message: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "timestamp": self.timestamp,
            "level": self.level,
            "message": self.message,
        }
        if self.details is not None:
            data["details"] = self.details
        return data


def _target_segment(segment: Any) -> str:
    # Shadow DOM and iframe targets arrive as nested selector lists.
    if isinstance(segment, list | tuple):
        return " ".join(str(part) for part in segment)
    return str(segment)


@dataclass(frozen=True)
class RawNode:
    """A DOM node matched by a rule engine finding."""

    html: str
    target: tuple[str, ...]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawNode":
        return cls(
            html=str(data.get("html") or ""),
            target=tuple(_target_segment(segment) for segment in data.get("target") or []),
        )


@dataclass(frozen=True)
class RawFinding:
    """Rule engine native violation record."""

    id: str
    description: str
    impact: str | None
    tags: tuple[str, ...] = ()
    nodes: tuple[RawNode, ...] = ()
    help_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawFinding":
        """Build a finding from the engine's JSON shape."""
        return cls(
            id=str(data.get("id") or "unknown-rule"),
            description=str(data.get("description") or ""),
            impact=data.get("impact"),
            tags=tuple(str(tag) for tag in data.get("tags") or []),
            nodes=tuple(RawNode.from_dict(node) for node in data.get("nodes") or []),
            help_url=data.get("helpUrl"),
        )


@dataclass(frozen=True)
class NodeDetail:
    """Markup and location of one element involved in a violation."""

    html: str
    target: tuple[str, ...]
    element_location: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "html": self.html,
            "target": list(self.target),
            "elementLocation": self.element_location,
        }


@dataclass(frozen=True)
class Violation:
    """Normalized accessibility violation for one rule on one page."""

    id: str
    description: str
    impact: str
    tags: tuple[str, ...]
    page_path: str
    element_count: int
    node_details: tuple[NodeDetail, ...]
    help_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "impact": self.impact,
            "tags": list(self.tags),
            "pagePath": self.page_path,
            "elementCount": self.element_count,
            "nodeDetails": [node.to_dict() for node in self.node_details],
        }
        if self.help_url:
            data["helpUrl"] = self.help_url
        return data


@dataclass(frozen=True)
class Summary:
    """Violation counts per impact bucket for one page."""

    total: int = 0
    critical: int = 0
    serious: int = 0
    moderate: int = 0
    minor: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "critical": self.critical,
            "serious": self.serious,
            "moderate": self.moderate,
            "minor": self.minor,
        }


@dataclass(frozen=True)
class RuleSummary:
    """Occurrences of one rule across violations, counted per matched element."""

    id: str
    count: int
    severity: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "count": self.count, "severity": self.severity}


@dataclass(frozen=True)
class SinglePageResult:
    """Outcome of scanning one URL."""

    url: str
    timestamp: str
    wcag_version: str
    level: str
    summary: Summary
    violations: tuple[Violation, ...] = ()
    screenshot: str | None = None
    logs: tuple[LogEntry, ...] = ()
    error: str | None = None
    rule_source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "url": self.url,
            "timestamp": self.timestamp,
            "wcagVersion": self.wcag_version,
            "level": self.level,
            "summary": self.summary.to_dict(),
            "violations": [violation.to_dict() for violation in self.violations],
            "logs": [entry.to_dict() for entry in self.logs],
        }
        if self.screenshot is not None:
            data["screenshot"] = self.screenshot
        if self.error is not None:
            data["error"] = self.error
        if self.rule_source is not None:
            data["ruleSource"] = self.rule_source
        return data


@dataclass(frozen=True)
class BatchSummary:
    """Field-wise totals of every page summary in a batch."""

    total_pages: int = 0
    total_violations: int = 0
    critical_violations: int = 0
    serious_violations: int = 0
    moderate_violations: int = 0
    minor_violations: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalPages": self.total_pages,
            "totalViolations": self.total_violations,
            "criticalViolations": self.critical_violations,
            "seriousViolations": self.serious_violations,
            "moderateViolations": self.moderate_violations,
            "minorViolations": self.minor_violations,
        }


@dataclass(frozen=True)
class BatchResult:
    """Outcome of scanning several URLs with shared options."""

    timestamp: str
    wcag_version: str
    level: str
    results: tuple[SinglePageResult, ...]
    summary: BatchSummary
    logs: tuple[LogEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "wcagVersion": self.wcag_version,
            "level": self.level,
            "results": [result.to_dict() for result in self.results],
            "summary": self.summary.to_dict(),
            "logs": [entry.to_dict() for entry in self.logs],
        }


@dataclass(frozen=True)
class ScanReport:
    """Single-page or batch outcome, discriminated by ``kind``."""

    kind: Literal["single", "batch"]
    single: SinglePageResult | None = None
    batch: BatchResult | None = None

    def __post_init__(self) -> None:
        if self.kind not in ("single", "batch"):
            raise ValueError(f"Unknown report kind: {self.kind}")
        if self.kind == "single" and (self.single is None or self.batch is not None):
            raise ValueError("single reports carry exactly one SinglePageResult")
        if self.kind == "batch" and (self.batch is None or self.single is not None):
            raise ValueError("batch reports carry exactly one BatchResult")

    @classmethod
    def from_single(cls, result: SinglePageResult) -> "ScanReport":
        return cls(kind="single", single=result)

    @classmethod
    def from_batch(cls, result: BatchResult) -> "ScanReport":
        return cls(kind="batch", batch=result)

    def results(self) -> list[SinglePageResult]:
        """Return every page result in the report."""
        if self.kind == "batch":
            return list(self.batch.results)
        return [self.single]

    def summary(self) -> Summary:
        """Return counts in the single-page summary shape."""
        if self.kind == "single":
            return self.single.summary
        batch_summary = self.batch.summary
        return Summary(
            total=batch_summary.total_violations,
            critical=batch_summary.critical_violations,
            serious=batch_summary.serious_violations,
            moderate=batch_summary.moderate_violations,
            minor=batch_summary.minor_violations,
        )

    def all_violations(self) -> list[Violation]:
        return [violation for result in self.results() for violation in result.violations]

    def screenshots(self) -> list[tuple[str, str]]:
        """Return ``(url, base64 png)`` pairs for pages with a screenshot."""
        return [
            (result.url, result.screenshot)
            for result in self.results()
            if result.screenshot is not None
        ]

    def logs(self) -> list[LogEntry]:
        payload = self.batch if self.kind == "batch" else self.single
        return list(payload.logs)

    def to_dict(self) -> dict[str, Any]:
        payload = self.batch if self.kind == "batch" else self.single
        return {"kind": self.kind, **payload.to_dict()}
