"""
Charles Schwab: zip code typed into a search form; consultant pages are static.
"""

import logging
import re
from typing import List, Optional

from ..browser import BrowserSession
from ..models import AdvisorRecord, SourceSettings, build_record
from ..parser import Markup
from ..pool import bounded_gather, unique
from ..retry import run_with_retries
from .base import wait_for_results


logger = logging.getLogger(__name__)

SEARCH_URL = "https://client.schwab.com/public/consultant/find"
CONSULTANT_URL = "https://www.schwab.com/app/branch-services/financial-consultant/"
ZIP_INPUT = "input#txtAddr"
SUBMIT = "input#btn_LocateByZip"
RESULTS = "div#fcResult"
NO_RESULTS = "div#fcNoResult"
CONSULTANT_LINK = "div#widgetlinks > span:nth-child(8) > a"
BRANCH_INFO = "div#_Branch_information-body div.schfx-text__body > p:nth-child(2)"

# href="javascript:openProfile('jane-doe')"
CONSULTANT_ID = re.compile(r"\('(.+)'\)")
BRANCH_ADDRESS = re.compile(
    r"<br>(?P<address1>.+?)<br>(?P<address2>.+?)?<br>(?P<city>.+?)<br>(?P<state>\w{2}).+?<br>\d{3}-\d{3}-\d{4}"
)


def parse_consultant_links(html: str) -> List[str]:
    links = []
    for href in Markup(html).attrs(CONSULTANT_LINK, "href"):
        match = CONSULTANT_ID.search(href)
        if match:
            links.append(CONSULTANT_URL + match.group(1))
    return unique(links)


def parse_consultant_page(html: str, url: str) -> Optional[AdvisorRecord]:
    markup = Markup(html, url)
    phone = markup.text("a.phone-number").replace("+1", "").replace("-", "").strip()

    address = city = state = None
    match = BRANCH_ADDRESS.search(markup.html(BRANCH_INFO))
    if match:
        address = ", ".join(part for part in (match.group("address1"), match.group("address2")) if part)
        city, state = match.group("city"), match.group("state")

    return build_record(
        markup.text("h1"),
        phone_no=phone,
        address=address,
        city=city,
        state=state,
        sites=[url],
    )


class SchwabExtractor:
    key = "schwab"
    label = "Charles Schwab"

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
        logger.info(f"{self.label}: {len(links)} consultant pages for {zip_code}")
        return await bounded_gather(
            links,
            lambda url: self._consultant(url, session),
            self.settings.concurrency_limit,
        )

    async def _search(self, zip_code: str, session: BrowserSession) -> List[str]:
        timeout = self.settings.timeout_ms
        async with session.new_page() as page:
            await page.goto(SEARCH_URL, timeout=timeout)
            await page.wait_for_selector(ZIP_INPUT, timeout=timeout)
            await page.locator(ZIP_INPUT).press_sequentially(zip_code, delay=100)
            await page.click(SUBMIT)
            if not await wait_for_results(page, RESULTS, NO_RESULTS, timeout):
                return []
            html = await page.content()
        return parse_consultant_links(html)

    async def _consultant(self, url: str, session: BrowserSession) -> Optional[AdvisorRecord]:
        outcome = await run_with_retries(
            lambda: session.fetch(url),
            label=url,
            max_retries=self.settings.max_retries,
        )
        if outcome.result is None:
            return None
        return parse_consultant_page(outcome.result, url)
