"""Load the accessibility rule engine into a page with an ordered fallback chain.

Tiers, tried in order until one registers ``window.axe``:

1. pinned axe-core builds from several CDN origins (script tag by URL), each
   attempt bounded by the same budget as tier 2;
2. the unpinned latest build, fetched over HTTP and injected inline, under a
   fixed time budget;
3. the minimal built-in rule set from :mod:`.builtin_rules`, installed with
   ``page.evaluate`` so it survives a strict Content-Security-Policy.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from .builtin_rules import BUILTIN_ENGINE_VERSION, BUILTIN_RULES_FUNCTION
from .errors import RuleEngineUnavailableError
from .log_capture import LogCapture

AXE_VERSION = "4.10.3"

DEFAULT_RULE_SOURCES = (
    f"https://cdnjs.cloudflare.com/ajax/libs/axe-core/{AXE_VERSION}/axe.min.js",
    f"https://cdn.jsdelivr.net/npm/axe-core@{AXE_VERSION}/axe.min.js",
    f"https://unpkg.com/axe-core@{AXE_VERSION}/axe.min.js",
)
LATEST_RULE_SOURCE = "https://cdn.jsdelivr.net/npm/axe-core@latest/axe.min.js"

# Seconds allowed for the direct "latest" download plus registration.
DIRECT_LOAD_TIMEOUT = 10.0

ENGINE_PRESENT_EXPRESSION = (
    "typeof window.axe !== 'undefined' && typeof window.axe.run === 'function'"
)
ENGINE_PRESENT_CHECK = f"() => {ENGINE_PRESENT_EXPRESSION}"

TIER_REMOTE = "remote"
TIER_LATEST = "latest"
TIER_BUILTIN = "builtin"


@dataclass(frozen=True)
class RuleSource:
    """Where the rule engine that ended up in the page came from."""

    tier: str
    origin: str

    @property
    def label(self) -> str:
        return f"{self.tier}:{self.origin}"


ScriptFetcher = Callable[[str, float], Awaitable[str]]


async def fetch_script(url: str, timeout: float) -> str:
    """Download a script body."""
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.text


class RuleEngineLoader:
    """Make the rule engine available inside a page."""

    def __init__(
        self,
        log: LogCapture | None = None,
        sources: Sequence[str] | None = None,
        latest_source: str | None = LATEST_RULE_SOURCE,
        direct_timeout: float = DIRECT_LOAD_TIMEOUT,
        fetcher: ScriptFetcher | None = None,
    ):
        self.log = log or LogCapture()
        self.sources = list(DEFAULT_RULE_SOURCES if sources is None else sources)
        self.latest_source = latest_source
        self.direct_timeout = direct_timeout
        self._fetcher = fetcher or fetch_script

    async def load(self, page: Any) -> RuleSource:
        """Inject the engine and return the source that succeeded.

        Raises:
            RuleEngineUnavailableError: when even the built-in rule set could
                not be installed. The last network error is chained as cause.
        """
        last_error: Exception | None = None

        for url in self.sources:
            self.log.info(f"Injecting rule engine from {url}")
            try:
                await asyncio.wait_for(page.add_script_tag(url=url), timeout=self.direct_timeout)
                if await self._engine_present(page):
                    self.log.info(f"Rule engine loaded from {url}", tier=TIER_REMOTE)
                    return RuleSource(TIER_REMOTE, url)
                last_error = RuntimeError(f"window.axe missing after loading {url}")
                self.log.warn(f"Rule engine did not register from {url}")
            except Exception as exc:
                last_error = exc
                reason = str(exc) or type(exc).__name__
                self.log.warn(f"Rule engine source failed: {url} ({reason})")

        if self.latest_source:
            self.log.info(f"Trying direct injection of {self.latest_source}")
            try:
                await asyncio.wait_for(self._inject_direct(page), timeout=self.direct_timeout)
                self.log.info(
                    f"Rule engine loaded by direct injection from {self.latest_source}",
                    tier=TIER_LATEST,
                )
                return RuleSource(TIER_LATEST, self.latest_source)
            except Exception as exc:
                last_error = exc
                reason = str(exc) or type(exc).__name__
                self.log.warn(f"Direct rule engine injection failed ({reason})")

        try:
            await page.evaluate(BUILTIN_RULES_FUNCTION)
            if not await self._engine_present(page):
                raise RuntimeError("built-in rule set did not register")
        except Exception as exc:
            self.log.error(f"Built-in rule set could not be installed: {exc}")
            cause = last_error or exc
            raise RuleEngineUnavailableError(f"Rule engine unavailable: {cause}") from cause

        self.log.warn(
            "All rule engine sources unreachable; using built-in minimal rule set",
            tier=TIER_BUILTIN,
        )
        return RuleSource(TIER_BUILTIN, BUILTIN_ENGINE_VERSION)

    async def _engine_present(self, page: Any) -> bool:
        return bool(await page.evaluate(ENGINE_PRESENT_CHECK))

    async def _inject_direct(self, page: Any) -> None:
        script = await self._fetcher(self.latest_source, self.direct_timeout)
        await page.add_script_tag(content=script)
        await page.wait_for_function(
            ENGINE_PRESENT_EXPRESSION,
            timeout=self.direct_timeout * 1000,
        )
