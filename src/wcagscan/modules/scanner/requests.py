"""Parse and validate JSON scan requests before they reach the scanner."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from .batch import DEFAULT_MAX_CONCURRENT, clamp_concurrency
from .errors import RequestValidationError
from .models import (
    DEFAULT_LEVEL,
    DEFAULT_LOGIN_TIMEOUT,
    DEFAULT_SUBMIT_SELECTOR,
    DEFAULT_TIMEOUT,
    DEFAULT_WAIT_TIME,
    DEFAULT_WCAG_VERSION,
    LEVELS,
    WCAG_VERSIONS,
    LoginCredentials,
    ScanOptions,
)

MAX_BATCH_URLS = 50

LOGIN_FIELDS = (
    ("loginUrl", "login_url"),
    ("usernameSelector", "username_selector"),
    ("passwordSelector", "password_selector"),
    ("username", "username"),
    ("password", "password"),
)


@dataclass(frozen=True)
class BatchRequest:
    """Validated batch request."""

    urls: tuple[str, ...]
    options: ScanOptions
    max_concurrent: int


def is_valid_url(url: Any) -> bool:
    """Return True for absolute http(s) URLs with a host."""
    if not isinstance(url, str) or not url.strip():
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _choice(payload: dict[str, Any], key: str, allowed: tuple[str, ...], default: str) -> str:
    value = payload.get(key)
    if value is None:
        return default
    value = str(value)
    if value not in allowed:
        raise RequestValidationError(f"Invalid {key}: {value} (expected one of {', '.join(allowed)})")
    return value


def _flag(payload: dict[str, Any], key: str) -> bool:
    value = payload.get(key, False)
    if not isinstance(value, bool):
        raise RequestValidationError(f"{key} must be a boolean")
    return value


def _milliseconds(payload: dict[str, Any], key: str, default: int, minimum: int) -> int:
    value = payload.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise RequestValidationError(f"{key} must be a number of milliseconds")
    if value < minimum:
        raise RequestValidationError(f"{key} must be at least {minimum}")
    return int(value)


def _login(payload: dict[str, Any]) -> LoginCredentials | None:
    value = payload.get("login")
    if value is None:
        return None
    if not isinstance(value, dict):
        raise RequestValidationError("login must be an object")

    fields: dict[str, Any] = {}
    for key, name in LOGIN_FIELDS:
        item = value.get(key)
        if not isinstance(item, str) or not item.strip():
            raise RequestValidationError(f"login.{key} is required")
        fields[name] = item if key == "password" else item.strip()

    login_url = fields["login_url"]
    if urlparse(login_url).scheme and not is_valid_url(login_url):
        raise RequestValidationError(f"Invalid login URL: {login_url}")

    submit = value.get("submitSelector")
    if submit is not None and (not isinstance(submit, str) or not submit.strip()):
        raise RequestValidationError("login.submitSelector must be a non-empty string")
    return LoginCredentials(
        submit_selector=submit.strip() if submit else DEFAULT_SUBMIT_SELECTOR,
        wait_for_login_timeout=_milliseconds(
            value, "waitForLoginTimeout", DEFAULT_LOGIN_TIMEOUT, 1
        ),
        **fields,
    )


def _shared_settings(payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "wcag_version": _choice(payload, "wcagVersion", WCAG_VERSIONS, DEFAULT_WCAG_VERSION),
        "level": _choice(payload, "level", LEVELS, DEFAULT_LEVEL),
        "include_screenshot": _flag(payload, "includeScreenshot"),
        "include_best_practices": _flag(payload, "includeBestPractices"),
        "wait_time": _milliseconds(payload, "waitTime", DEFAULT_WAIT_TIME, 0),
        "timeout": _milliseconds(payload, "timeout", DEFAULT_TIMEOUT, 1),
        "login": _login(payload),
    }


def _require_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise RequestValidationError("Request body must be a JSON object")
    return payload


def parse_scan_request(payload: Any) -> ScanOptions:
    """Validate a single-page request and return its scan options."""
    payload = _require_object(payload)
    url = payload.get("url")
    if not url:
        raise RequestValidationError("URL is required")
    if not is_valid_url(url):
        raise RequestValidationError("Invalid URL format")
    return ScanOptions(url=url.strip(), **_shared_settings(payload))


def parse_batch_request(payload: Any) -> BatchRequest:
    """Validate a batch request: 1 to 50 well-formed URLs."""
    payload = _require_object(payload)
    urls = payload.get("urls")
    if not urls or not isinstance(urls, list):
        raise RequestValidationError("URLs array is required and must not be empty")
    if len(urls) > MAX_BATCH_URLS:
        raise RequestValidationError(f"Maximum {MAX_BATCH_URLS} URLs allowed per batch")
    for url in urls:
        if not is_valid_url(url):
            raise RequestValidationError(f"Invalid URL format: {url}")

    max_concurrent = payload.get("maxConcurrent")
    if max_concurrent is None:
        max_concurrent = DEFAULT_MAX_CONCURRENT
    if isinstance(max_concurrent, bool) or not isinstance(max_concurrent, int | float):
        raise RequestValidationError("maxConcurrent must be a number")

    cleaned = tuple(url.strip() for url in urls)
    return BatchRequest(
        urls=cleaned,
        options=ScanOptions(url=cleaned[0], **_shared_settings(payload)),
        max_concurrent=clamp_concurrency(int(max_concurrent)),
    )
