"""
Edward Jones: client-rendered search whose results arrive from an internal API.
"""

import logging
from typing import Any, Dict, List
from urllib.parse import urlencode

from ..browser import BrowserSession
from ..models import AdvisorRecord, SourceSettings, build_record
from ..parser import clean_sites, strip_city_state_zip
from ..retry import run_with_retries


logger = logging.getLogger(__name__)

BASE_URL = "https://www.edwardjones.com"
SEARCH_URL = f"{BASE_URL}/us-en/search/find-a-financial-advisor"
LIST_TAB = "button#tabs--2--tab--1"
RESULTS_API_MARKER = "pageSize=200"


def search_url(zip_code: str) -> str:
    return f"{SEARCH_URL}?{urlencode({'fasearch': zip_code, 'searchtype': '2'})}"


def parse_results(payload: Dict[str, Any]) -> List[AdvisorRecord]:
    """Map the search API payload onto advisor records."""
    records = []
    for advisor in payload.get("results") or []:
        sites = [BASE_URL + advisor["faUrl"]] if advisor.get("faUrl") else []
        # socialMedia is "" when the advisor lists none
        for profile in advisor.get("socialMedia") or []:
            sites.extend(profile.values())

        record = build_record(
            advisor.get("faName"),
            address=strip_city_state_zip(advisor.get("address")),
            city=advisor.get("faCity"),
            state=advisor.get("faState"),
            phone_no=advisor.get("phone"),
            sites=clean_sites(sites),
        )
        if record:
            records.append(record)
    return records


class EdwardJonesExtractor:
    key = "edward_jones"
    label = "Edward Jones"

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
            await page.goto(search_url(zip_code), timeout=timeout)
            await page.wait_for_selector(LIST_TAB, timeout=timeout)
            async with page.expect_response(
                lambda response: RESULTS_API_MARKER in response.url,
                timeout=timeout,
            ) as response_info:
                await page.click(LIST_TAB)
            response = await response_info.value
            payload = await response.json()

        records = parse_results(payload)
        if not records:
            logger.info(f"No {self.label} advisors near {zip_code}")
        return records
