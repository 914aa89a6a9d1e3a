"""
Ameriprise: single-page app with a "load more" button; advisor pages are
static and carry their details as JSON-LD.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from ..browser import BrowserSession
from ..models import AdvisorRecord, SourceSettings, build_record
from ..parser import Markup, clean_sites
from ..pool import bounded_gather, flatten, unique
from ..retry import run_with_retries
from .base import click_until_gone, wait_for_results


logger = logging.getLogger(__name__)

BASE_URL = "https://www.ameripriseadvisors.com"
RESULT_CARD = "div.card-main-container"
NO_RESULTS = "div.no-results-found"
LOAD_MORE = "button.load-more-results"
ADVISOR_LINK = "div.card-main-container a.visit-button"
TEAM_MEMBER_LINK = "div.team-member a.visit-button"
EMAIL_LINK = "ul.email-phone > li > a.phone-email"
NAME_SUFFIX = " - Ameriprise Financial Services, LLC"


def search_url(zip_code: str) -> str:
    crit = f"%7Bse%3Adefault%3Bnrr%3A6%3Bsri%3A0%3Brd%3A5%3Bst%3Azip%20code%3Blt%3A0%3Blg%3A0%3Bt%3A{zip_code}%7D"
    return f"{BASE_URL}/#search?crit={crit}&page=0"


def is_team_page(url: str) -> bool:
    return urlparse(url).path.startswith("/team/")


def split_team_links(links: List[str]) -> Tuple[List[str], List[str]]:
    advisors = [link for link in links if not is_team_page(link)]
    teams = [link for link in links if is_team_page(link)]
    return advisors, teams


def parse_search_links(html: str) -> List[str]:
    return unique(Markup(html, BASE_URL).links(ADVISOR_LINK))


def parse_team_members(html: str) -> List[str]:
    """Individual advisor links on a team page; nested teams are not followed."""
    links = Markup(html, BASE_URL).links(TEAM_MEMBER_LINK)
    return [link for link in unique(links) if not is_team_page(link)]


def find_financial_service(blocks: List[Any]) -> Optional[Dict[str, Any]]:
    """The FinancialService entity, either top-level or inside an @graph."""
    for block in blocks:
        if isinstance(block, list):
            found = find_financial_service(block)
            if found:
                return found
            continue
        if not isinstance(block, dict):
            continue
        if block.get("@type") == "FinancialService":
            return block
        for entity in block.get("@graph") or []:
            if isinstance(entity, dict) and entity.get("@type") == "FinancialService":
                return entity
    return None


def parse_advisor_page(html: str, url: str) -> Optional[AdvisorRecord]:
    markup = Markup(html, url)
    service = find_financial_service(markup.ld_json())
    if service is None:
        logger.warning(f"No FinancialService data on {url}")
        return None

    email = None
    for href in markup.attrs(EMAIL_LINK, "href"):
        if href.startswith("mailto:"):
            email = href[len("mailto:"):]
            break

    address = service.get("address") or {}
    if isinstance(address, str):
        address = {"streetAddress": address}
    same_as = service.get("sameAs") or []
    if isinstance(same_as, str):
        same_as = [same_as]

    return build_record(
        (service.get("name") or "").replace(NAME_SUFFIX, ""),
        email=email,
        address=address.get("streetAddress"),
        city=address.get("addressLocality"),
        state=address.get("addressRegion"),
        phone_no=service.get("telephone"),
        sites=clean_sites([service.get("url"), *same_as]),
    )


class AmeripriseExtractor:
    key = "ameriprise"
    label = "Ameriprise Advisors"

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
        if not links:
            return []

        advisor_links, team_links = split_team_links(links)
        if team_links:
            members = await bounded_gather(
                team_links,
                lambda url: self._team_members(url, session),
                self.settings.concurrency_limit,
            )
            advisor_links = unique(advisor_links + flatten(members))

        logger.info(f"{self.label}: {len(advisor_links)} advisor pages for {zip_code}")
        return await bounded_gather(
            advisor_links,
            lambda url: self._advisor(url, session),
            self.settings.concurrency_limit,
        )

    async def _search(self, zip_code: str, session: BrowserSession) -> List[str]:
        async with session.new_page() as page:
            await page.goto(search_url(zip_code), timeout=self.settings.timeout_ms)
            if not await wait_for_results(page, RESULT_CARD, NO_RESULTS, self.settings.timeout_ms):
                return []
            await click_until_gone(page, LOAD_MORE)
            html = await page.content()
        return parse_search_links(html)

    async def _fetch(self, url: str, session: BrowserSession) -> Optional[str]:
        outcome = await run_with_retries(
            lambda: session.fetch(url),
            label=url,
            max_retries=self.settings.max_retries,
        )
        return outcome.result

    async def _team_members(self, url: str, session: BrowserSession) -> List[str]:
        html = await self._fetch(url, session)
        return parse_team_members(html) if html else []

    async def _advisor(self, url: str, session: BrowserSession) -> Optional[AdvisorRecord]:
        html = await self._fetch(url, session)
        return parse_advisor_page(html, url) if html else None
