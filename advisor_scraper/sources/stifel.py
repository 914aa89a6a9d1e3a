"""
Stifel: server-paged search results ("next page" button), profile pages that
are usually static but sometimes need client-side rendering.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import urlencode

from playwright.async_api import Page

from ..browser import BrowserSession
from ..models import AdvisorRecord, SourceSettings, build_record
from ..parser import Markup, digits_only, origin_and_path
from ..pool import bounded_gather, unique
from ..retry import run_with_retries
from .base import MAX_CLICKS, wait_for_results


logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.stifel.com/fa/search"
ADVISOR_LINK = "a.search-results-fa-link"
NO_RESULTS = "div.search-results-none"
NEXT_PAGE = "input#btnNextPage"
PROFILE_MARKER = "span.fa-landing-name"
CITY_STATE = re.compile(r"^(?P<city>.+?), (?P<state>\w+)")


def search_url(zip_code: str, distance: int = 20) -> str:
    return f"{SEARCH_URL}?{urlencode({'zipcode': zip_code, 'distance': distance})}"


def parse_profile(html: str, url: str) -> Optional[AdvisorRecord]:
    markup = Markup(html, url)
    rows = markup.texts("div.fa-landing-address dd")

    # First row is the branch name, the last two are city/state and a map link.
    address = ", ".join(rows[1:-2])
    city = state = None
    if len(rows) >= 2:
        match = CITY_STATE.search(rows[-2])
        if match:
            city, state = match.group("city"), match.group("state")

    return build_record(
        markup.text(PROFILE_MARKER),
        phone_no=digits_only(markup.text("dd.fa-landing-phone-desktop")),
        address=address,
        city=city,
        state=state,
        sites=[origin_and_path(url)],
    )


class StifelExtractor:
    key = "stifel"
    label = "Stifel"

    def __init__(self, settings: SourceSettings):
        self.settings = settings

    async def extract(self, zip_code: str, session: BrowserSession) -> List[AdvisorRecord]:
        logger.info(f"Scraping {self.label}...")
        outcome = await run_with_retries(
            lambda: self._search(zip_code, session),
            label=f"{self.label} search {zip_code}",
            max_retries=self.settings.max_retries,
        )
        links = outcome.result or []
        logger.info(f"{self.label}: {len(links)} advisor pages for {zip_code}")
        return await bounded_gather(
            links,
            lambda url: self._advisor(url, session),
            self.settings.concurrency_limit,
        )

    async def _search(self, zip_code: str, session: BrowserSession) -> List[str]:
        timeout = self.settings.timeout_ms
        async with session.new_page() as page:
            await page.goto(search_url(zip_code), timeout=timeout)
            if not await wait_for_results(page, ADVISOR_LINK, NO_RESULTS, timeout):
                return []

            links = await self._page_links(page)
            for _ in range(MAX_CLICKS):
                next_page = await page.query_selector(NEXT_PAGE)
                if next_page is None:
                    break
                await next_page.evaluate("np => np.click()")
                await page.wait_for_load_state(timeout=timeout)
                await page.wait_for_selector(ADVISOR_LINK, timeout=timeout)
                links.extend(await self._page_links(page))
        return unique(links)

    async def _page_links(self, page: Page) -> List[str]:
        return await page.eval_on_selector_all(ADVISOR_LINK, "elems => elems.map(e => e.href)")

    async def _advisor(self, url: str, session: BrowserSession) -> Optional[AdvisorRecord]:
        outcome = await run_with_retries(
            lambda: session.fetch_or_render(url, PROFILE_MARKER, self.settings.timeout_ms),
            label=url,
            max_retries=self.settings.max_retries,
        )
        if outcome.result is None:
            return None
        return parse_profile(outcome.result, url)
