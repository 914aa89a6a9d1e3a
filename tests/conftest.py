from contextlib import asynccontextmanager
from typing import Dict, List, Optional, Union
from urllib.parse import urljoin

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from selectolax.parser import HTMLParser

from advisor_scraper.models import AdvisorRecord, SourceSettings


class FakeElement:
    def __init__(self, page: "FakePage", selector: str, visible: bool = True):
        self.page = page
        self.selector = selector
        self.visible = visible

    async def is_visible(self):
        return self.visible

    async def evaluate(self, script):
        self.page.clicks.append(self.selector)


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    async def press_sequentially(self, text, delay=None):
        self.page.typed.append((self.selector, text))


class FakePage:
    """Answers selector queries by running selectolax over canned markup."""

    def __init__(self, routes: Dict[str, Union[str, Exception]]):
        self.routes = routes
        self.url = "about:blank"
        self.html = ""
        self.closed = False
        self.clicks: List[str] = []
        self.typed: List[tuple] = []

    def _find(self, selector):
        return HTMLParser(self.html).css_first(selector)

    async def goto(self, url, timeout=None):
        self.url = url
        value = self.routes.get(url, "<html><body></body></html>")
        if isinstance(value, Exception):
            raise value
        self.html = value

    async def wait_for_selector(self, selector, timeout=None):
        if self._find(selector) is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def wait_for_load_state(self, state=None, timeout=None):
        return None

    async def query_selector(self, selector):
        if self._find(selector) is None:
            return None
        return FakeElement(self, selector)

    async def eval_on_selector_all(self, selector, script):
        return [urljoin(self.url, node.attributes.get("href") or "") for node in HTMLParser(self.html).css(selector)]

    def locator(self, selector):
        return FakeLocator(self, selector)

    async def click(self, selector):
        self.clicks.append(selector)

    async def content(self):
        return self.html

    async def close(self):
        self.closed = True


class FakeSession:
    """Stands in for BrowserSession: rendered pages by URL, plain fetches by URL."""

    def __init__(
        self,
        routes: Optional[Dict[str, Union[str, Exception]]] = None,
        fetches: Optional[Dict[str, Union[str, Exception]]] = None,
    ):
        self.routes = routes or {}
        self.fetches = fetches or {}
        self.pages: List[FakePage] = []
        self.fetched: List[str] = []

    @asynccontextmanager
    async def new_page(self):
        page = FakePage(self.routes)
        self.pages.append(page)
        try:
            yield page
        finally:
            await page.close()

    async def fetch(self, url):
        self.fetched.append(url)
        value = self.fetches[url]
        if isinstance(value, Exception):
            raise value
        return value

    async def fetch_or_render(self, url, marker, timeout_ms=30_000):
        return await self.fetch(url)


@pytest.fixture
def settings():
    return SourceSettings(concurrency_limit=4, max_retries=2, timeout_ms=1_000)


@pytest.fixture
def make_record():
    def _make(name="Jane Doe", **fields):
        return AdvisorRecord(name=name, **fields)
    return _make
