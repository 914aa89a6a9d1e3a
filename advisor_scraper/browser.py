"""
Shared browser + HTTP session for one scraping run, using Playwright and httpx.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from selectolax.parser import HTMLParser


logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


class BrowserSession:
    """
    One headless Chromium plus one HTTP client, shared by every source.

    Sources never close the session; they open their own pages through
    new_page(), which always closes the page on the way out.
    """

    def __init__(
        self,
        headless: bool = True,
        http_timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.headless = headless
        self.http_timeout = http_timeout
        self.client = client
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.playwright = None
        self._owns_client = client is None

    async def __aenter__(self):
        """Context manager entry."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.http_timeout,
                follow_redirects=True,
                headers=DEFAULT_HEADERS,
            )
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(headless=self.headless)
        self.context = await self.browser.new_context(user_agent=USER_AGENT)
        logger.debug(f"Browser session started (headless={self.headless})")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        if self.context:
            await self.context.close()
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()
        if self.client is not None and self._owns_client:
            await self.client.aclose()
        logger.debug("Browser session closed")

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[Page]:
        """Open an isolated tab, closed on success, error or cancellation."""
        if not self.context:
            raise RuntimeError("Browser not initialized. Use async with context manager.")

        page = await self.context.new_page()
        try:
            yield page
        finally:
            await page.close()

    async def fetch(self, url: str) -> str:
        """Plain HTTP GET, no JavaScript."""
        if self.client is None:
            raise RuntimeError("HTTP client not initialized. Use async with context manager.")

        response = await self.client.get(url)
        response.raise_for_status()
        return response.text

    async def render(self, url: str, wait_for: Optional[str] = None, timeout_ms: int = 30_000) -> str:
        """
        Fetch HTML from a URL using browser automation.

        Args:
            url: URL to render
            wait_for: CSS selector that must appear before the markup is taken
            timeout_ms: Navigation and wait timeout in milliseconds

        Returns:
            Rendered HTML content
        """
        async with self.new_page() as page:
            await page.goto(url, timeout=timeout_ms)
            if wait_for:
                await page.wait_for_selector(wait_for, timeout=timeout_ms)
            else:
                await page.wait_for_load_state("domcontentloaded")
            return await page.content()

    async def fetch_or_render(self, url: str, marker: str, timeout_ms: int = 30_000) -> str:
        """
        Try a plain fetch first and only render in the browser when `marker`
        is missing from the static markup (client-side rendered page). A
        non-success status counts as a missing marker.
        """
        if self.client is None:
            raise RuntimeError("HTTP client not initialized. Use async with context manager.")

        response = await self.client.get(url)
        if response.is_success and HTMLParser(response.text).css_first(marker) is not None:
            return response.text

        logger.debug(
            f"{marker!r} missing from static markup of {url} "
            f"(status {response.status_code}), rendering in browser"
        )
        return await self.render(url, wait_for=marker, timeout_ms=timeout_ms)
