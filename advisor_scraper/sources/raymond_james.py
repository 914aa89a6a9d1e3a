"""
Raymond James: results grouped by branch, paged by a "page" query parameter.
The first page reports the total result count, the remaining pages are
rendered concurrently.

Phone numbers come as 727.555.0100; every dot is removed, not just the first,
so advisor and branch numbers end up as plain digits.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import urlencode

from ..browser import BrowserSession
from ..models import AdvisorRecord, SourceSettings, build_record
from ..parser import Markup, absolute_url, clean_sites
from ..pool import bounded_gather, flatten
from ..retry import run_with_retries
from .base import page_count, wait_for_results


logger = logging.getLogger(__name__)

BASE_URL = "https://www.raymondjames.com"
SEARCH_URL = f"{BASE_URL}/find-an-advisor"
BRANCH = "li.faa-result"
NO_RESULTS = "div.faa-no-results"
RESULT_COUNT = "div.faa-results-count"
ADVISOR_NAME = "div.media-body > a:nth-child(1)"
PAGE_SIZE = 10
TOTAL_RESULTS = re.compile(r"([\d,]+)\s+results?", re.IGNORECASE)
CITY_STATE = re.compile(r"^(?P<city>.+?), (?P<state>\w+)")


def search_url(zip_code: str, page: int = 1) -> str:
    return f"{SEARCH_URL}?{urlencode({'citystatezip': zip_code, 'page': page})}"


def parse_total(html: str) -> int:
    match = TOTAL_RESULTS.search(Markup(html).text(RESULT_COUNT))
    if not match:
        return 0
    return int(match.group(1).replace(",", ""))


def parse_branches(html: str) -> List[AdvisorRecord]:
    """One record per advisor listed under each branch."""
    records = []
    for branch in Markup(html, BASE_URL).nodes(BRANCH):
        lines = branch.texts("div.location-address span")
        address = ", ".join(lines[:-1])
        city = state = None
        if lines:
            match = CITY_STATE.search(lines[-1])
            if match:
                city, state = match.group("city"), match.group("state")
        branch_phone = branch.text("a.location-phone").replace(".", "")

        for advisor in branch.nodes("div.faa-location-advisor"):
            own_phone = advisor.text("a.advisor-phone").replace(".", "")
            links = [advisor.attr(ADVISOR_NAME, "href"), *advisor.attrs("div.advisor-links > a", "href")]
            record = build_record(
                advisor.text(ADVISOR_NAME),
                phone_no=own_phone or branch_phone,
                address=address,
                city=city,
                state=state,
                sites=[absolute_url(BASE_URL, link) for link in clean_sites(links)],
            )
            if record:
                records.append(record)
    return records


class RaymondJamesExtractor:
    key = "raymond_james"
    label = "Raymond James"

    def __init__(self, settings: SourceSettings):
        self.settings = settings

    async def extract(self, zip_code: str, session: BrowserSession) -> List[AdvisorRecord]:
        logger.info(f"Scraping {self.label}...")
        first = await self._page(search_url(zip_code), session)
        if not first:
            return []

        records = parse_branches(first)
        pages = page_count(parse_total(first), PAGE_SIZE)
        if pages <= 1:
            return records

        logger.info(f"{self.label}: {pages} result pages for {zip_code}")
        rest = await bounded_gather(
            range(2, pages + 1),
            lambda n: self._page(search_url(zip_code, n), session),
            self.settings.concurrency_limit,
        )
        return records + flatten(parse_branches(html) for html in rest if html)

    async def _page(self, url: str, session: BrowserSession) -> Optional[str]:
        """Rendered markup of one result page, '' when the search found nothing."""
        outcome = await run_with_retries(
            lambda: self._render(url, session),
            label=url,
            max_retries=self.settings.max_retries,
        )
        return outcome.result

    async def _render(self, url: str, session: BrowserSession) -> str:
        timeout = self.settings.timeout_ms
        async with session.new_page() as page:
            await page.goto(url, timeout=timeout)
            if not await wait_for_results(page, BRANCH, NO_RESULTS, timeout):
                return ""
            return await page.content()
