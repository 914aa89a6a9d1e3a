"""
LPL Financial: search form plus a "show more" link; every field is on the
result list itself, so there is no detail phase.
"""

import logging
import re
from typing import List, Optional

from ..browser import BrowserSession
from ..models import AdvisorRecord, SourceSettings, build_record
from ..parser import Markup, digits_only, title_case
from ..retry import run_with_retries
from .base import click_until_gone, wait_for_results


logger = logging.getLogger(__name__)

SEARCH_URL = "https://faa.lpl.com/FindAnAdvisor/app/advisor-search.html"
ZIP_INPUT = "input#address"
SUBMIT = "button.btn"
ADVISOR_ROW = "div.info-adv"
NO_RESULTS = "div.no-results"
SHOW_MORE = "a.showMoreResult"
TEL_LINK = 'div > p > a[href^="tel"]'
CITY_STATE_ZIP = re.compile(r"(?P<city>.+), (?P<state>\w{2}) \d{5}")


def parse_row(row: Markup) -> Optional[AdvisorRecord]:
    name = title_case(row.text("p.name").replace("  ", " "))

    lines = row.text("div > p:nth-child(2)").split("\n")
    address = lines[0].strip()
    city = state = None
    if len(lines) > 1:
        match = CITY_STATE_ZIP.search(lines[1].strip())
        if match:
            city, state = match.group("city"), match.group("state")

    phone = digits_only(row.text(TEL_LINK))

    return build_record(
        name,
        address=address,
        city=city,
        state=state,
        phone_no=phone,
        email=row.text("a.search-result-email"),
    )


def parse_results(html: str) -> List[AdvisorRecord]:
    records = []
    for row in Markup(html).nodes(ADVISOR_ROW):
        record = parse_row(row)
        if record:
            records.append(record)
    return records


class LPLExtractor:
    key = "lpl"
    label = "LPL Financial"

    def __init__(self, settings: SourceSettings):
        self.settings = settings

    async def extract(self, zip_code: str, session: BrowserSession) -> List[AdvisorRecord]:
        logger.info(f"Scraping {self.label}...")
        outcome = await run_with_retries(
            lambda: self._search(zip_code, session),
            label=f"{self.label} search {zip_code}",
            max_retries=self.settings.max_retries,
        )
        return outcome.result or []

    async def _search(self, zip_code: str, session: BrowserSession) -> List[AdvisorRecord]:
        timeout = self.settings.timeout_ms
        async with session.new_page() as page:
            await page.goto(SEARCH_URL, timeout=timeout)
            await page.wait_for_selector(ZIP_INPUT, timeout=timeout)
            await page.locator(ZIP_INPUT).press_sequentially(zip_code, delay=100)
            await page.click(SUBMIT)
            if not await wait_for_results(page, ADVISOR_ROW, NO_RESULTS, timeout):
                return []
            await click_until_gone(page, SHOW_MORE)
            html = await page.content()
        return parse_results(html)
