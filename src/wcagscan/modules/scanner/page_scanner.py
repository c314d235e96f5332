"""Single-page scan: navigate, settle, inject rules, run them, normalize."""

import asyncio
import base64
import json
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any
from urllib.parse import urljoin

from .browser import BrowserSession
from .errors import EvaluationError, LoginError, NavigationError, ScanError
from .log_capture import LogCapture
from .models import (
    RawFinding,
    ScanOptions,
    SinglePageResult,
    Summary,
    Violation,
    utc_timestamp,
)
from .processor import calculate_summary, process_violations
from .rule_config import build_run_config
from .rule_engine import RuleEngineLoader


class ScanState(StrEnum):
    """Lifecycle states of one page scan."""

    CREATED = "created"
    AUTHENTICATING = "authenticating"
    NAVIGATING = "navigating"
    LOADED = "loaded"
    SETTLING = "settling"
    RULES_LOADING = "rules_loading"
    SCANNING = "scanning"
    PROCESSED = "processed"
    CLOSED = "closed"
    FAILED = "failed"


# Runs inside the page; returns only the fields the processor reads.
RUN_SCRIPT = """
async (config) => {
  if (typeof window.axe === 'undefined') {
    throw new Error('Axe not loaded');
  }
  const results = await window.axe.run(config);
  return {
    violations: (results.violations || []).map((v) => ({
      id: v.id,
      description: v.description,
      impact: v.impact,
      tags: v.tags || [],
      helpUrl: v.helpUrl || null,
      nodes: (v.nodes || []).map((n) => ({ html: n.html, target: n.target })),
    })),
    passes: (results.passes || []).length,
    incomplete: (results.incomplete || []).length,
    inapplicable: (results.inapplicable || []).length,
  };
}
"""

DIAGNOSTICS_SCRIPT = """
() => {
  const body = document.body;
  const text = body ? (body.innerText || body.textContent || '') : '';
  return { title: document.title || '', length: text.length, sample: text.slice(0, 2000) };
}
"""

# Text typically served instead of content to suspected automation.
BLOCKING_MARKERS = (
    "captcha",
    "access denied",
    "are you a robot",
    "attention required",
    "checking your browser",
    "unusual traffic",
    "verify you are human",
)

Sleeper = Callable[[float], Awaitable[Any]]


def detect_blocking(title: str, body_sample: str) -> str | None:
    """Return the first anti-automation marker found in the page text."""
    haystack = f"{title}\n{body_sample}".lower()
    for marker in BLOCKING_MARKERS:
        if marker in haystack:
            return marker
    return None


class PageScanner:
    """Run the scan state machine for exactly one URL.

    The browsing context is closed on every exit path, including failures.
    """

    def __init__(
        self,
        session: BrowserSession,
        loader: RuleEngineLoader,
        log: LogCapture,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.session = session
        self.loader = loader
        self.log = log
        self._sleep = sleep
        self.state = ScanState.CREATED
        self.history: list[ScanState] = [ScanState.CREATED]

    def _enter(self, state: ScanState) -> None:
        self.state = state
        self.history.append(state)
        self.log.debug(f"Scan state -> {state.value}")

    async def scan(self, options: ScanOptions, include_logs: bool = True) -> SinglePageResult:
        """Scan ``options.url`` and return its normalized result."""
        if self.state is not ScanState.CREATED:
            raise ScanError("A PageScanner runs a single scan; create a new one")

        context = None
        try:
            context = await self.session.new_scan_context()
            page = await context.new_page()
            self.log.info(f"Scanning: {options.url}")

            if options.login is not None:
                await self._login(page, options)
            await self._navigate(page, options)
            await self._log_page_diagnostics(page)

            self._enter(ScanState.SETTLING)
            self.log.info(f"Waiting {options.wait_time}ms for dynamic content...")
            await self._sleep(options.wait_time / 1000)

            screenshot = None
            if options.include_screenshot:
                self.log.info("Taking screenshot...")
                image = await page.screenshot(full_page=True, type="png")
                screenshot = base64.b64encode(image).decode("ascii")

            self._enter(ScanState.RULES_LOADING)
            source = await self.loader.load(page)

            self._enter(ScanState.SCANNING)
            raw = await self._run_rules(page, options)

            violations = process_violations(
                (RawFinding.from_dict(item) for item in raw.get("violations") or []),
                options.url,
            )
            summary = calculate_summary(violations)
            self._enter(ScanState.PROCESSED)
            self._log_summary(violations, summary)

            result = SinglePageResult(
                url=options.url,
                timestamp=utc_timestamp(),
                wcag_version=options.wcag_version,
                level=options.level,
                summary=summary,
                violations=tuple(violations),
                screenshot=screenshot,
                logs=tuple(self.log.entries()) if include_logs else (),
                rule_source=source.label,
            )
        except Exception as exc:
            self._enter(ScanState.FAILED)
            self.log.error(f"Failed to scan {options.url}: {exc}")
            raise
        finally:
            if context is not None:
                await self._close(context)
            self._enter(ScanState.CLOSED)
        return result

    async def _login(self, page: Any, options: ScanOptions) -> None:
        credentials = options.login
        self._enter(ScanState.AUTHENTICATING)
        login_url = urljoin(options.url, credentials.login_url)
        self.log.info(f"Logging in to: {login_url}")
        try:
            response = await page.goto(login_url, timeout=options.timeout)
            if response is not None and not response.ok:
                raise LoginError(f"login page returned {response.status}")
            await page.wait_for_selector(
                credentials.username_selector,
                timeout=credentials.wait_for_login_timeout,
            )
            await page.fill(credentials.username_selector, credentials.username)
            await page.fill(credentials.password_selector, credentials.password)
            await page.click(credentials.submit_selector)
        except Exception as exc:
            raise LoginError(f"Login failed for {login_url}: {exc}") from exc

        # A form that submits without navigating is not a failure.
        try:
            await page.wait_for_load_state("networkidle", timeout=options.timeout)
        except Exception as exc:
            self.log.warn(f"Page did not settle after login submit ({exc})")
            return
        self.log.info("Login successful")

    async def _navigate(self, page: Any, options: ScanOptions) -> None:
        self._enter(ScanState.NAVIGATING)
        page.set_default_navigation_timeout(options.timeout)
        page.set_default_timeout(options.timeout)
        self.log.info("Navigating to page...")
        try:
            response = await page.goto(
                options.url,
                wait_until="networkidle",
                timeout=options.timeout,
            )
        except Exception as exc:
            raise NavigationError(f"Failed to load page: {options.url} ({exc})") from exc

        status = response.status if response is not None else None
        if response is None or not response.ok:
            raise NavigationError(f"Failed to load page: {options.url} ({status})", status=status)
        self._enter(ScanState.LOADED)
        self.log.info(f"Page loaded successfully ({status})")

    async def _log_page_diagnostics(self, page: Any) -> None:
        info = await page.evaluate(DIAGNOSTICS_SCRIPT) or {}
        title = str(info.get("title") or "")
        self.log.info(f'Page title: "{title}"')
        self.log.info(f"Page content length: {info.get('length', 0)} characters")
        marker = detect_blocking(title, str(info.get("sample") or ""))
        if marker:
            self.log.warn(
                f"Page may be blocking automated browsers (matched '{marker}'); "
                "results may not reflect the real content"
            )

    async def _run_rules(self, page: Any, options: ScanOptions) -> dict[str, Any]:
        run_config = build_run_config(
            options.wcag_version,
            options.level,
            options.include_best_practices,
        )
        self.log.info(f"Rule configuration: {json.dumps(run_config)}", config=run_config)
        self.log.info("Running accessibility scan...")
        try:
            raw = await asyncio.wait_for(
                page.evaluate(RUN_SCRIPT, run_config),
                timeout=options.timeout / 1000,
            )
        except TimeoutError as exc:
            raise EvaluationError(
                f"Rule engine run timed out after {options.timeout}ms"
            ) from exc
        except Exception as exc:
            raise EvaluationError(f"Rule engine run failed: {exc}") from exc
        if not isinstance(raw, dict):
            raise EvaluationError(f"Rule engine returned an unexpected result: {raw!r}")

        rules_run = sum(
            int(raw.get(key) or 0) for key in ("passes", "incomplete", "inapplicable")
        ) + len(raw.get("violations") or [])
        self.log.info(
            f"Scan completed. Found {len(raw.get('violations') or [])} violations; "
            f"rules run: {rules_run}"
        )
        return raw

    def _log_summary(self, violations: list[Violation], summary: Summary) -> None:
        self.log.info("Scan results summary:")
        self.log.info(f"   Total violations: {summary.total}")
        self.log.info(f"   Critical: {summary.critical}")
        self.log.info(f"   Serious: {summary.serious}")
        self.log.info(f"   Moderate: {summary.moderate}")
        self.log.info(f"   Minor: {summary.minor}")
        if not violations:
            self.log.info("No violations detected")
            return
        self.log.info("Violations found:")
        for index, violation in enumerate(violations, start=1):
            self.log.info(
                f"   {index}. {violation.id} ({violation.impact}) - "
                f"{violation.element_count} elements"
            )

    async def _close(self, context: Any) -> None:
        try:
            await context.close()
        except Exception as exc:
            self.log.warn(f"Closing browsing context failed: {exc}")
