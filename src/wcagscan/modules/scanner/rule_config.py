"""Map WCAG version and conformance level onto rule engine tag selectors."""

from typing import Any

from .models import LEVELS, WCAG_VERSIONS

BEST_PRACTICE_TAG = "best-practice"

# Version-specific tag prefixes; 2.0 rules carry only the base prefix.
_VERSION_PREFIXES = {"2.0": None, "2.1": "wcag21", "2.2": "wcag22"}


def _level_suffixes(level: str) -> list[str]:
    """Return cumulative level suffixes, e.g. AA -> ["a", "aa"]."""
    rank = LEVELS.index(level)
    return [name.lower() for name in LEVELS[: rank + 1]]


def build_rule_tags(
    wcag_version: str = "2.1",
    level: str = "AA",
    include_best_practices: bool = False,
) -> list[str]:
    """Return the ordered rule tags selected for a version/level combination."""
    if wcag_version not in WCAG_VERSIONS:
        raise ValueError(f"Unsupported WCAG version: {wcag_version}")
    if level not in LEVELS:
        raise ValueError(f"Unsupported conformance level: {level}")

    suffixes = _level_suffixes(level)
    tags = [f"wcag2{suffix}" for suffix in suffixes]

    prefix = _VERSION_PREFIXES[wcag_version]
    if prefix:
        tags.extend(f"{prefix}{suffix}" for suffix in suffixes)

    if include_best_practices:
        tags.append(BEST_PRACTICE_TAG)
    return tags


def build_run_config(
    wcag_version: str = "2.1",
    level: str = "AA",
    include_best_practices: bool = False,
) -> dict[str, Any]:
    """Return the options object passed to the rule engine's ``run`` call."""
    return {
        "runOnly": {
            "type": "tag",
            "values": build_rule_tags(wcag_version, level, include_best_practices),
        }
    }
