"""Browser process lifecycle and isolated scan contexts."""

import asyncio
import os
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from playwright.async_api import async_playwright

from .errors import BrowserLaunchError, ScanError
from .log_capture import LogCapture

DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Constrained runtimes: no sandbox helpers, tiny /dev/shm, one process.
SERVERLESS_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-zygote",
    "--single-process",
    "--no-first-run",
    "--hide-scrollbars",
    "--mute-audio",
]

LOCAL_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--disable-gpu",
]

CHROME_CANDIDATE_PATHS = [
    r"C:\Program Files\Google\Chrome\Application\chrome.exe",
    r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/usr/bin/google-chrome",
    "/usr/bin/chromium",
    "/usr/bin/chromium-browser",
]


def is_serverless(environ: Mapping[str, str] | None = None) -> bool:
    """Return True when running inside a known serverless platform."""
    env = os.environ if environ is None else environ
    return (
        env.get("VERCEL") == "1"
        or env.get("AWS_LAMBDA_FUNCTION_NAME") is not None
        or env.get("NETLIFY") == "true"
        or env.get("CF_PAGES") == "1"
    )


def find_chrome_executable(
    candidates: Sequence[str] | None = None,
    exists: Callable[[str], bool] = os.path.exists,
) -> str | None:
    """Return the first installed Chrome binary from well-known locations."""
    for path in candidates if candidates is not None else CHROME_CANDIDATE_PATHS:
        if exists(path):
            return path
    return None


@dataclass
class LaunchConfig:
    """Resolved browser launch settings."""

    headless: bool
    args: list[str] = field(default_factory=list)
    executable_path: str | None = None
    serverless: bool = False

    def to_launch_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"headless": self.headless, "args": list(self.args)}
        if self.executable_path:
            kwargs["executable_path"] = self.executable_path
        return kwargs


def build_launch_config(
    debug: bool = False,
    environ: Mapping[str, str] | None = None,
    executable_path: str | None = None,
) -> LaunchConfig:
    """Select launch settings for the current runtime.

    Serverless runtimes are always headless; debug mode only opens a visible
    window on local machines.
    """
    if is_serverless(environ):
        return LaunchConfig(
            headless=True,
            args=list(SERVERLESS_ARGS),
            executable_path=executable_path,
            serverless=True,
        )
    return LaunchConfig(
        headless=not debug,
        args=list(LOCAL_ARGS),
        executable_path=executable_path or find_chrome_executable(),
    )


BrowserStop = Callable[[], Awaitable[None]]
Launcher = Callable[[LaunchConfig], Awaitable[tuple[Any, BrowserStop]]]


async def playwright_launcher(config: LaunchConfig) -> tuple[Any, BrowserStop]:
    """Start a Playwright driver and launch Chromium with ``config``."""
    driver = await async_playwright().start()
    try:
        browser = await driver.chromium.launch(**config.to_launch_kwargs())
    except Exception:
        await driver.stop()
        raise
    return browser, driver.stop


class BrowserSession:
    """Own one browser process and hand out isolated browsing contexts."""

    def __init__(
        self,
        log: LogCapture | None = None,
        debug: bool = False,
        launcher: Launcher | None = None,
        executable_path: str | None = None,
        environ: Mapping[str, str] | None = None,
        viewport: Mapping[str, int] | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.log = log or LogCapture()
        self.debug = debug
        self.executable_path = executable_path
        self.viewport = dict(viewport or DEFAULT_VIEWPORT)
        self.user_agent = user_agent
        self._environ = environ
        self._launcher = launcher or playwright_launcher
        self._browser: Any | None = None
        self._stop: BrowserStop | None = None
        self._lock = asyncio.Lock()

    @property
    def is_active(self) -> bool:
        return self._browser is not None

    async def initialize(self) -> None:
        """Launch the browser once; later calls are no-ops."""
        async with self._lock:
            if self._browser is not None:
                return
            config = build_launch_config(
                debug=self.debug,
                environ=self._environ,
                executable_path=self.executable_path,
            )
            if config.serverless:
                self.log.info("Using serverless browser configuration")
            else:
                self.log.info("Using local browser configuration")
                if config.executable_path:
                    self.log.info(f"Found Chrome at: {config.executable_path}")
                else:
                    self.log.warn("Chrome not found in common locations, using bundled Chromium")
            mode = "headless" if config.headless else "headed (debug)"
            self.log.info(f"Launching browser in {mode} mode")
            try:
                browser, stop = await self._launcher(config)
            except Exception as exc:
                self.log.error(f"Browser launch failed: {exc}")
                raise BrowserLaunchError(f"Failed to launch browser: {exc}") from exc
            self._browser = browser
            self._stop = stop

    async def new_scan_context(self) -> Any:
        """Return a fresh context with its own cookie and storage jar.

        Page CSP is bypassed so rule engine injection is not refused by sites
        that only allow their own scripts.
        """
        if self._browser is None:
            raise ScanError("Browser session is not initialized")
        return await self._browser.new_context(
            viewport=dict(self.viewport),
            user_agent=self.user_agent,
            bypass_csp=True,
        )

    async def cleanup(self) -> None:
        """Close the browser and its contexts; safe to call at any time."""
        browser, stop = self._browser, self._stop
        self._browser = None
        self._stop = None
        if browser is None:
            return
        try:
            await browser.close()
        finally:
            if stop is not None:
                await stop()
        self.log.info("Browser closed")
