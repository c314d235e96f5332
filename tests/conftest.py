"""Test configuration and fixtures for wcagscan."""

import asyncio
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from wcagscan.modules.scanner.builtin_rules import BUILTIN_RULES_FUNCTION
from wcagscan.modules.scanner.page_scanner import DIAGNOSTICS_SCRIPT, RUN_SCRIPT
from wcagscan.modules.scanner.rule_engine import DEFAULT_RULE_SOURCES, ENGINE_PRESENT_CHECK
from wcagscan.utils.debug import set_debug_enabled

CONFIG_KEYS = (
    "WCAGSCAN_DEBUG",
    "WCAGSCAN_VERBOSE",
    "WCAGSCAN_WAIT_TIME",
    "WCAGSCAN_TIMEOUT",
    "WCAGSCAN_MAX_CONCURRENT",
    "WCAGSCAN_CHROME_PATH",
    "WCAGSCAN_RULE_SOURCES",
    "VERCEL",
    "AWS_LAMBDA_FUNCTION_NAME",
    "NETLIFY",
    "CF_PAGES",
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> None:
    """Keep the developer's environment and ~/.wcagscan out of the tests."""
    for key in CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    set_debug_enabled(False)


SAMPLE_VIOLATIONS = [
    {
        "id": "image-alt",
        "description": "Images must have alternate text",
        "impact": "critical",
        "tags": ["wcag2a", "wcag111"],
        "helpUrl": "https://dequeuniversity.com/rules/axe/4.10/image-alt",
        "nodes": [
            {"html": '<img src="a.png">', "target": ["main", "img.hero"]},
            {"html": '<img src="b.png">', "target": ["#footer-logo"]},
        ],
    },
    {
        "id": "color-contrast",
        "description": "Elements must meet minimum color contrast ratio thresholds",
        "impact": "serious",
        "tags": ["wcag2aa", "wcag143"],
        "nodes": [{"html": "<p class='muted'>Hi</p>", "target": ["p.muted"]}],
    },
]


def sample_run_result(violations: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {
        "violations": SAMPLE_VIOLATIONS if violations is None else violations,
        "passes": 12,
        "incomplete": 1,
        "inapplicable": 30,
    }


class FakeResponse:
    def __init__(self, status: int = 200):
        self.status = status

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class FakePage:
    """Stand-in for a browser page, driven by the scripts the scanner sends."""

    def __init__(
        self,
        *,
        status: int | None = 200,
        fail_urls: tuple[str, ...] = (),
        diagnostics: dict[str, Any] | None = None,
        run_result: Any = None,
        run_error: Exception | None = None,
        run_delay: float = 0.0,
        working_sources: tuple[str, ...] = (),
        failing_sources: tuple[str, ...] = (),
        inline_registers: bool = True,
        builtin_registers: bool = True,
        slow_sources: tuple[str, ...] = (),
        script_tags_blocked: bool = False,
        missing_selectors: tuple[str, ...] = (),
        settles: bool = True,
    ):
        self.status = status
        self.fail_urls = fail_urls
        self.diagnostics = diagnostics or {"title": "Home", "length": 42, "sample": "Welcome"}
        self.run_result = sample_run_result() if run_result is None else run_result
        self.run_error = run_error
        self.run_delay = run_delay
        self.working_sources = working_sources
        self.failing_sources = failing_sources
        self.inline_registers = inline_registers
        self.builtin_registers = builtin_registers
        self.slow_sources = slow_sources
        self.script_tags_blocked = script_tags_blocked
        self.missing_selectors = missing_selectors
        self.settles = settles
        self.engine_present = False
        self.events: list[tuple[str, Any]] = []
        self.run_configs: list[dict[str, Any]] = []
        self.timeouts: dict[str, int] = {}

    def set_default_navigation_timeout(self, timeout: int) -> None:
        self.timeouts["navigation"] = timeout

    def set_default_timeout(self, timeout: int) -> None:
        self.timeouts["default"] = timeout

    async def goto(self, url: str, wait_until: str | None = None, timeout: int | None = None):
        self.events.append(("goto", url))
        if url in self.fail_urls:
            raise TimeoutError(f"Timeout {timeout}ms exceeded")
        if self.status is None:
            return None
        return FakeResponse(self.status)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == ENGINE_PRESENT_CHECK:
            return self.engine_present
        if script == DIAGNOSTICS_SCRIPT:
            return self.diagnostics
        if script == RUN_SCRIPT:
            self.events.append(("run", arg))
            self.run_configs.append(arg)
            if self.run_delay:
                await asyncio.sleep(self.run_delay)
            if self.run_error is not None:
                raise self.run_error
            return self.run_result
        if script == BUILTIN_RULES_FUNCTION:
            self.events.append(("evaluate", "builtin"))
            self.engine_present = self.builtin_registers
            return None
        raise AssertionError(f"unexpected script: {script[:40]}")

    async def add_script_tag(self, url: str | None = None, content: str | None = None) -> None:
        if self.script_tags_blocked:
            self.events.append(("script", url or "inline"))
            raise RuntimeError(
                "Refused to execute inline script because it violates the following "
                "Content Security Policy directive: \"script-src 'self'\""
            )
        if url is not None:
            self.events.append(("script", url))
            if url in self.slow_sources:
                await asyncio.sleep(5)
            if url in self.failing_sources:
                raise RuntimeError(f"net::ERR_CONNECTION_REFUSED at {url}")
            if url in self.working_sources:
                self.engine_present = True
            return
        self.events.append(("script", "inline"))
        self.engine_present = self.inline_registers

    async def wait_for_selector(self, selector: str, timeout: float | None = None) -> None:
        self.events.append(("wait_for_selector", selector))
        if selector in self.missing_selectors:
            raise TimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def fill(self, selector: str, value: str) -> None:
        self.events.append(("fill", selector))

    async def click(self, selector: str) -> None:
        self.events.append(("click", selector))

    async def wait_for_load_state(
        self, state: str | None = None, timeout: float | None = None
    ) -> None:
        self.events.append(("load_state", state))
        if not self.settles:
            raise TimeoutError(f"Timeout {timeout}ms exceeded")

    async def wait_for_function(self, expression: str, timeout: float | None = None) -> None:
        if not self.engine_present:
            raise TimeoutError("waiting for function failed")

    async def screenshot(self, full_page: bool = False, type: str = "png") -> bytes:
        self.events.append(("screenshot", full_page))
        return b"\x89PNG fake"


class FakeContext:
    def __init__(self, page: FakePage):
        self.page = page
        self.close_count = 0

    async def new_page(self) -> FakePage:
        return self.page

    async def close(self) -> None:
        self.close_count += 1


class FakeBrowser:
    def __init__(self, page_factory=None):
        self.page_factory = page_factory or (lambda: FakePage(working_sources=DEFAULT_RULE_SOURCES))
        self.contexts: list[FakeContext] = []
        self.context_kwargs: list[dict[str, Any]] = []
        self.closed = False

    async def new_context(self, **kwargs: Any) -> FakeContext:
        self.context_kwargs.append(kwargs)
        context = FakeContext(self.page_factory())
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True


class FakeLauncher:
    """Launcher double recording the configs it was asked to start."""

    def __init__(self, browser: FakeBrowser | None = None, error: Exception | None = None):
        self.browser = browser or FakeBrowser()
        self.error = error
        self.configs: list[Any] = []
        self.stopped = 0

    async def __call__(self, config):
        self.configs.append(config)
        if self.error is not None:
            raise self.error
        return self.browser, self._stop

    async def _stop(self) -> None:
        self.stopped += 1


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def fake_launcher() -> FakeLauncher:
    return FakeLauncher()
