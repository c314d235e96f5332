"""Helpers for scan-related CLI commands."""

from pathlib import Path
from typing import Any

import yaml

from wcagscan.config import is_verbose
from wcagscan.modules.scanner import RequestValidationError


def normalize_verbose(verbose: bool) -> bool:
    """Resolve effective verbose flag from CLI arg and config."""
    effective = verbose if isinstance(verbose, bool) else False
    return effective or is_verbose()


def read_url_file(path: Path) -> list[str]:
    """Read one URL per line, skipping blanks and # comments."""
    urls: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


def read_login_file(path: Path) -> Any:
    """Load a login block (YAML or JSON) using the request's camelCase keys."""
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise RequestValidationError(f"Could not parse login file {path}: {exc}") from exc


def collect_urls(urls: list[str] | None, url_file: Path | None) -> list[str]:
    """Merge positional URLs and a URL file into one ordered, de-duplicated list."""
    collected = list(urls or [])
    if url_file is not None:
        collected.extend(read_url_file(url_file))
    return list(dict.fromkeys(collected))


def build_request(
    *,
    wcag_version: str,
    level: str,
    screenshot: bool,
    best_practices: bool,
    wait_time: int,
    timeout: int,
) -> dict:
    """Build the JSON-shaped request body shared by scan commands."""
    return {
        "wcagVersion": wcag_version,
        "level": level.upper(),
        "includeScreenshot": screenshot,
        "includeBestPractices": best_practices,
        "waitTime": wait_time,
        "timeout": timeout,
    }
