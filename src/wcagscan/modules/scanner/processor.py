"""Normalize rule engine findings and compute severity summaries.

Everything here is pure: no I/O, no clocks, same input gives the same output.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from .models import (
    IMPACT_LEVELS,
    BatchSummary,
    NodeDetail,
    RawFinding,
    RuleSummary,
    SinglePageResult,
    Summary,
    Violation,
)

UNKNOWN_IMPACT = "unknown"
TARGET_SEPARATOR = " > "

_SEVERITY_ORDER = {name: rank for rank, name in enumerate(IMPACT_LEVELS)}


def normalize_impact(impact: str | None) -> str:
    """Fold an engine impact string into one of the known buckets."""
    if not impact:
        return UNKNOWN_IMPACT
    value = str(impact).strip().lower()
    return value if value in _SEVERITY_ORDER else UNKNOWN_IMPACT


def severity_rank(impact: str | None) -> int:
    """Sort key putting critical first and unknown last."""
    return _SEVERITY_ORDER.get(normalize_impact(impact), len(IMPACT_LEVELS))


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def normalize_finding(finding: RawFinding | dict[str, Any], page_path: str) -> Violation:
    """Convert one raw finding into a canonical violation."""
    if not isinstance(finding, RawFinding):
        finding = RawFinding.from_dict(finding)
    node_details = tuple(
        NodeDetail(
            html=node.html,
            target=node.target,
            element_location=TARGET_SEPARATOR.join(node.target),
        )
        for node in finding.nodes
    )
    return Violation(
        id=finding.id,
        description=finding.description,
        impact=normalize_impact(finding.impact),
        tags=_unique(finding.tags),
        page_path=page_path,
        element_count=len(finding.nodes),
        node_details=node_details,
        help_url=finding.help_url,
    )


def process_violations(
    findings: Iterable[RawFinding | dict[str, Any]], page_path: str
) -> list[Violation]:
    """Normalize every raw finding reported for ``page_path``."""
    return [normalize_finding(finding, page_path) for finding in findings]


def calculate_summary(violations: Sequence[Violation]) -> Summary:
    """Count violations per impact bucket; unknown impacts count only in total."""
    counts = dict.fromkeys(IMPACT_LEVELS, 0)
    for violation in violations:
        bucket = normalize_impact(violation.impact)
        if bucket in counts:
            counts[bucket] += 1
    return Summary(total=len(violations), **counts)


def summarize_by_rule(violations: Iterable[Violation]) -> list[RuleSummary]:
    """Group violations by rule id, counting matched elements, most severe first."""
    counts: dict[str, int] = {}
    severities: dict[str, str] = {}
    for violation in violations:
        counts[violation.id] = counts.get(violation.id, 0) + violation.element_count
        severities.setdefault(violation.id, violation.impact)
    summaries = [
        RuleSummary(id=rule_id, count=count, severity=severities[rule_id])
        for rule_id, count in counts.items()
    ]
    return sorted(summaries, key=lambda item: severity_rank(item.severity))


def sort_violations(violations: Iterable[Violation]) -> list[Violation]:
    """Order violations by page path, then by severity."""
    return sorted(violations, key=lambda item: (item.page_path, severity_rank(item.impact)))


def aggregate_summaries(results: Sequence[SinglePageResult]) -> BatchSummary:
    """Sum per-page summaries field by field."""
    return BatchSummary(
        total_pages=len(results),
        total_violations=sum(result.summary.total for result in results),
        critical_violations=sum(result.summary.critical for result in results),
        serious_violations=sum(result.summary.serious for result in results),
        moderate_violations=sum(result.summary.moderate for result in results),
        minor_violations=sum(result.summary.minor for result in results),
    )
