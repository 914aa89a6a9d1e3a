"""
Janney Montgomery Scott: search form, all advisor details on the result cards.
"""

import logging
from typing import List

from ..browser import BrowserSession
from ..models import AdvisorRecord, SourceSettings, build_record
from ..parser import Markup, absolute_url
from ..retry import run_with_retries
from .base import wait_for_results


logger = logging.getLogger(__name__)

BASE_URL = "https://www.janney.com"
SEARCH_URL = f"{BASE_URL}/wealth-management/how-we-work-with-you/find-a-financial-advisor"
ZIP_INPUT = "input#SearchZip"
SUBMIT = "div.jcom-form-group:nth-child(4) > button:nth-child(1)"
PERSON_CARD = "li.jcom-person-card"
NO_RESULTS = "div.jcom-search-no-results"


def _icon_text(card: Markup, icon: str) -> str:
    """Text of the element holding a given icon, e.g. the email line."""
    for node in card.root.css(f"i.jcom-icon--{icon}"):
        parent = node.parent
        if parent is not None:
            return Markup(parent).text()
    return ""


def parse_cards(html: str) -> List[AdvisorRecord]:
    records = []
    for card in Markup(html, BASE_URL).nodes(f"{PERSON_CARD} div.jcom-card-content"):
        href = card.attr("a", "href")
        record = build_record(
            card.text("h3.jcom-person-card-name"),
            email=_icon_text(card, "email"),
            phone_no=_icon_text(card, "phone"),
            address=_icon_text(card, "location"),
            sites=[absolute_url(BASE_URL, href)] if href else [],
        )
        if record:
            records.append(record)
    return records


class JanneyExtractor:
    key = "janney"
    label = "Janney"

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
            if not await wait_for_results(page, PERSON_CARD, NO_RESULTS, timeout):
                return []
            html = await page.content()
        return parse_cards(html)
