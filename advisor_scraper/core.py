import asyncio
import logging
from typing import Callable, Iterable, List, Optional

from tqdm import tqdm

from .browser import BrowserSession
from .config import load_config
from .models import AdvisorRecord, ScraperConfig
from .sources import SourceExtractor, build_extractors
from .zipcodes import normalize_zip_codes


logger = logging.getLogger(__name__)


class AdvisorScraper:
    """
    Runs every enabled source for a zip code and flattens the results.

    Each source is isolated: whatever one source raises (or however long it
    hangs past its deadline) it contributes nothing and the others carry on.
    No deduplication happens here; see merge.merge_records.
    """

    def __init__(
        self,
        config: Optional[ScraperConfig] = None,
        extractors: Optional[List[SourceExtractor]] = None,
        session_factory: Optional[Callable[[], BrowserSession]] = None,
    ):
        self.config = config or load_config()
        self.extractors = extractors if extractors is not None else build_extractors(self.config)
        self.session_factory = session_factory or (lambda: BrowserSession(headless=self.config.headless))

    async def run(self, zip_code: str) -> List[AdvisorRecord]:
        """Scrape one zip code on a fresh browser session."""
        [zip_code] = normalize_zip_codes([zip_code])
        async with self.session_factory() as session:
            return await self.scrape_zip(zip_code, session)

    async def run_many(self, zip_codes: Iterable[str], progress: bool = False) -> List[AdvisorRecord]:
        """
        Scrape several zip codes on one shared browser session.

        The whole list is validated and deduplicated before the browser
        starts; zip codes are then processed one after another.
        """
        zip_codes = normalize_zip_codes(zip_codes)
        records: List[AdvisorRecord] = []
        if not zip_codes:
            return records

        async with self.session_factory() as session:
            for zip_code in tqdm(zip_codes, desc="Zip codes", unit="zip", disable=not progress):
                records.extend(await self.scrape_zip(zip_code, session))
        return records

    async def scrape_zip(self, zip_code: str, session: BrowserSession) -> List[AdvisorRecord]:
        logger.info(f"Searching {len(self.extractors)} sources near {zip_code}")
        batches = await asyncio.gather(
            *(self._run_source(extractor, zip_code, session) for extractor in self.extractors)
        )
        records = [record for batch in batches for record in batch]
        logger.info(f"{len(records)} advisors found near {zip_code}")
        return records

    async def _run_source(
        self,
        extractor: SourceExtractor,
        zip_code: str,
        session: BrowserSession,
    ) -> List[AdvisorRecord]:
        try:
            records = await asyncio.wait_for(
                extractor.extract(zip_code, session),
                timeout=extractor.settings.deadline_s,
            )
        except asyncio.TimeoutError:
            logger.error(f"{extractor.label} did not finish within {extractor.settings.deadline_s}s for {zip_code}")
            return []
        except Exception:
            logger.exception(f"{extractor.label} failed for {zip_code}")
            return []

        records = [r for r in records or [] if r is not None and r.name]
        logger.info(f"{extractor.label}: {len(records)} advisors for {zip_code}")
        return records
