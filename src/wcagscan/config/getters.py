"""Configuration getter functions."""

import logging
import os
from pathlib import Path
from typing import Any

from .env_loader import load_global_config, load_project_config

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}


def get_config(key: str, project_dir: Path | None = None, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Project .env file
    3. Global config file
    4. Default value

    Args:
        key: Configuration key
        project_dir: Optional project directory
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    project_config = load_project_config(project_dir)
    if key in project_config:
        return project_config[key]

    global_config = load_global_config()
    if key in global_config:
        return global_config[key]

    return default


def _get_bool(key: str, project_dir: Path | None) -> bool:
    value = get_config(key, project_dir, default=False)
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def _get_int(key: str, project_dir: Path | None, default: int) -> int:
    value = get_config(key, project_dir, default=default)
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer %s=%r; using %d", key, value, default)
        return default


def is_debug_mode(project_dir: Path | None = None) -> bool:
    """Launch a visible browser window (local runtimes only)."""
    return _get_bool("WCAGSCAN_DEBUG", project_dir)


def is_verbose(project_dir: Path | None = None) -> bool:
    """Echo captured scan logs to the console."""
    return _get_bool("WCAGSCAN_VERBOSE", project_dir)


def get_wait_time(project_dir: Path | None = None, default: int = 3000) -> int:
    """Get settle delay in milliseconds."""
    return max(0, _get_int("WCAGSCAN_WAIT_TIME", project_dir, default))


def get_timeout(project_dir: Path | None = None, default: int = 30000) -> int:
    """Get navigation/evaluation timeout in milliseconds."""
    value = _get_int("WCAGSCAN_TIMEOUT", project_dir, default)
    return value if value > 0 else default


def get_max_concurrent(project_dir: Path | None = None, default: int = 3) -> int:
    """Get requested batch window size (clamped later by the coordinator)."""
    return _get_int("WCAGSCAN_MAX_CONCURRENT", project_dir, default)


def get_chrome_path(project_dir: Path | None = None) -> str | None:
    """Get an explicit Chrome/Chromium executable path."""
    return get_config("WCAGSCAN_CHROME_PATH", project_dir)


def get_rule_sources(project_dir: Path | None = None) -> list[str] | None:
    """Get rule engine script URLs overriding the built-in CDN list."""
    value = get_config("WCAGSCAN_RULE_SOURCES", project_dir)
    if not value:
        return None
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return [item.strip() for item in str(value).split(",") if item.strip()]
