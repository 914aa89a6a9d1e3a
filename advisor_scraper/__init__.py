"""
Financial advisor contact scraper for brokerage "find an advisor" directories.
"""

from .models import AdvisorRecord, ScraperConfig, SourceSettings
from .config import load_config
from .core import AdvisorScraper
from .browser import BrowserSession
from .merge import merge_records, by_name, by_name_and_phone
from .sink import write_results
from .zipcodes import normalize_zip_codes, read_zip_file
from .errors import ScraperError, InvalidZipCodeError, ConfigError

__version__ = "1.0.0"

__all__ = [
    "AdvisorRecord",
    "ScraperConfig",
    "SourceSettings",
    "load_config",
    "AdvisorScraper",
    "BrowserSession",
    "merge_records",
    "by_name",
    "by_name_and_phone",
    "write_results",
    "normalize_zip_codes",
    "read_zip_file",
    "ScraperError",
    "InvalidZipCodeError",
    "ConfigError",
]
