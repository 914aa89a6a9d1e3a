"""
Shared contract and navigation helpers for source extractors.
"""

import asyncio
import logging
import math
from typing import List, Protocol

from playwright.async_api import Page

from ..browser import BrowserSession
from ..models import AdvisorRecord, SourceSettings


logger = logging.getLogger(__name__)

# Upper bound on "load more" / "next page" clicks for one search.
MAX_CLICKS = 100


class SourceExtractor(Protocol):
    """One brokerage's advisor directory."""

    key: str
    label: str
    settings: SourceSettings

    async def extract(self, zip_code: str, session: BrowserSession) -> List[AdvisorRecord]:
        ...


async def wait_for_results(
    page: Page,
    results_selector: str,
    no_results_selector: str,
    timeout_ms: int,
) -> bool:
    """
    Wait until either results or an explicit "no results" message shows up.

    Returns False for the no-results case so callers can stop early instead
    of timing out and retrying.
    """
    await page.wait_for_selector(f"{results_selector}, {no_results_selector}", timeout=timeout_ms)
    if await page.query_selector(results_selector) is not None:
        return True
    logger.info(f"No results on {page.url}")
    return False


async def click_until_gone(
    page: Page,
    selector: str,
    pause: float = 0.5,
    max_clicks: int = MAX_CLICKS,
) -> int:
    """
    Keep clicking a "load more" style control until it is removed or hidden.

    Returns the number of clicks made.
    """
    clicks = 0
    while clicks < max_clicks:
        button = await page.query_selector(selector)
        if button is None or not await button.is_visible():
            break
        await button.evaluate("b => b.click()")
        clicks += 1
        await asyncio.sleep(pause)
    else:
        logger.warning(f"Stopped clicking {selector!r} on {page.url} after {max_clicks} clicks")
    return clicks


def page_count(total_results: int, page_size: int) -> int:
    if total_results <= 0:
        return 0
    return math.ceil(total_results / page_size)
