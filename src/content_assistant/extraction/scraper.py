"""Two-tier page scraping.

The fast path fetches the raw markup with ``httpx`` and strips it with
BeautifulSoup. Pages that yield too little text there (typically pages that
render client-side) are loaded once in a headless Chromium via Playwright and
the rendered markup is stripped the same way.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
import logging
import re
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from bs4 import BeautifulSoup
import httpx
from playwright.async_api import async_playwright

from content_assistant.constants import (
    CONTENT_PREFERENCE,
    FETCH_TIMEOUT,
    MAX_URL_CHARS,
    MIN_CONTENT_CHARS,
    RENDER_TIMEOUT,
    RENDERED_NOISE_TAGS,
    STATIC_NOISE_TAGS,
    USER_AGENT,
)
from content_assistant.exceptions import ScrapeFailureError
from content_assistant.telemetry import TelemetryContext

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager

    from content_assistant.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim the ends."""
    return _WHITESPACE.sub(" ", text).strip()


def extract_main_text(html: str, noise_tags: Iterable[str] = STATIC_NOISE_TAGS) -> str:
    """Return the primary text of a page.

    Non-content elements are removed first, then the first of ``<article>``,
    ``<main>`` and ``<body>`` that holds any text wins. Fragments without a
    ``<body>`` fall back to the whole document.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(list(noise_tags)):
        tag.decompose()

    for name in CONTENT_PREFERENCE:
        node = soup.find(name)
        if node is None:
            continue
        text = collapse_whitespace(node.get_text(" "))
        if text:
            return text
    if soup.find("body") is not None:
        return ""
    return collapse_whitespace(soup.get_text(" "))


@runtime_checkable
class PageRenderer(Protocol):
    """Loads a URL in a real browser and returns the rendered markup."""

    async def render(self, url: str, *, timeout_s: float) -> str: ...  # noqa: D102


class PlaywrightRenderer:
    """Headless Chromium renderer, one browser per call.

    The browser is closed on every exit path, including navigation timeouts
    and cancellation of the calling task.
    """

    def __init__(
        self,
        launcher: Callable[[], AbstractAsyncContextManager[Any]] | None = None,
        *,
        user_agent: str = USER_AGENT,
    ) -> None:
        self._launcher = launcher or async_playwright
        self._user_agent = user_agent

    async def render(self, url: str, *, timeout_s: float) -> str:
        async with self._launcher() as playwright:
            logger.info("Launching headless browser for %s", url)
            browser = await playwright.chromium.launch(headless=True)
            try:
                page = await browser.new_page(user_agent=self._user_agent)
                await page.goto(
                    url, wait_until="networkidle", timeout=timeout_s * 1000
                )
                return str(await page.content())
            finally:
                await browser.close()


class HybridScraper:
    """Fetches the readable text of a URL, escalating to a browser if needed.

    Args:
        client: Optional shared ``httpx.AsyncClient``. When omitted a client
            is created per fetch and closed afterwards.
        renderer: Slow-path renderer; defaults to `PlaywrightRenderer`.
        fetch_timeout_s: Bound on the fast-path GET.
        render_timeout_s: Bound on the whole slow path (launch + navigation).
        min_content_chars: Fast-path results shorter than this escalate.
        max_chars: Returned text is truncated to this many characters.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        renderer: PageRenderer | None = None,
        fetch_timeout_s: float = FETCH_TIMEOUT,
        render_timeout_s: float = RENDER_TIMEOUT,
        min_content_chars: int = MIN_CONTENT_CHARS,
        max_chars: int = MAX_URL_CHARS,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        self._client = client
        self._renderer = renderer or PlaywrightRenderer()
        self._fetch_timeout_s = fetch_timeout_s
        self._render_timeout_s = render_timeout_s
        self._min_content_chars = min_content_chars
        self._max_chars = max_chars
        self._telemetry = telemetry or TelemetryContext()

    async def scrape(self, url: str) -> str:
        """Return up to ``max_chars`` characters of the page's main text.

        Raises:
            ScrapeFailureError: If the browser tier fails or finds no text.
        """
        text = await self._fetch_static(url)
        if len(text) >= self._min_content_chars:
            return text[: self._max_chars]

        logger.info(
            "Static fetch of %s gave %d chars (< %d); rendering with browser",
            url,
            len(text),
            self._min_content_chars,
        )
        self._telemetry.count("scrape.escalated")
        text = await self._render_dynamic(url)
        return text[: self._max_chars]

    async def _fetch_static(self, url: str) -> str:
        """Fast path. Any transport or HTTP error yields an empty string.

        httpx timeouts apply per network operation, so the whole exchange is
        additionally bounded by ``fetch_timeout_s``.
        """
        with self._telemetry("scrape.fast"):
            try:
                async with asyncio.timeout(self._fetch_timeout_s):
                    response = await self._get(url)
                response.raise_for_status()
            except TimeoutError:
                logger.info(
                    "Static fetch of %s exceeded %gs", url, self._fetch_timeout_s
                )
                return ""
            except httpx.HTTPError as e:
                logger.info("Static fetch failed for %s: %s", url, e)
                return ""
            return extract_main_text(response.text, STATIC_NOISE_TAGS)

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(
                url,
                timeout=self._fetch_timeout_s,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            )
        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self._fetch_timeout_s,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            return await client.get(url)

    async def _render_dynamic(self, url: str) -> str:
        with self._telemetry("scrape.slow"):
            try:
                async with asyncio.timeout(self._render_timeout_s):
                    html = await self._renderer.render(
                        url, timeout_s=self._render_timeout_s
                    )
            except Exception as e:
                logger.error("Browser rendering failed for %s: %s", url, e)
                raise ScrapeFailureError() from e

            text = extract_main_text(html, RENDERED_NOISE_TAGS)
            if not text:
                logger.error("Rendered page %s contained no readable text", url)
                raise ScrapeFailureError()
            return text
