"""
Run configuration: which sources are active and how hard each one is pushed.
"""

import json
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from .errors import ConfigError
from .models import ScraperConfig, SourceSettings


# Registration order is the order source results appear in the output.
DEFAULT_SOURCES: Dict[str, SourceSettings] = {
    "edward_jones": SourceSettings(concurrency_limit=10),
    "ameriprise": SourceSettings(concurrency_limit=20),
    "stifel": SourceSettings(concurrency_limit=20),
    # Blocks headless browsers.
    "janney": SourceSettings(enabled=False, concurrency_limit=10),
    # Every result page has to be rendered.
    "raymond_james": SourceSettings(enabled=False, concurrency_limit=10),
    "schwab": SourceSettings(concurrency_limit=20, timeout_ms=60_000),
    "lpl": SourceSettings(concurrency_limit=10),
}

HEADLESS_ENV = "ADVISOR_SCRAPER_HEADLESS"


def load_config(path: Optional[str] = None) -> ScraperConfig:
    """
    Build the run configuration.

    Defaults come from DEFAULT_SOURCES, then the optional JSON file at `path`
    is applied on top, then the ADVISOR_SCRAPER_HEADLESS environment variable
    (also read from a .env file).

    Example override file:
        {"headless": false, "sources": {"lpl": {"enabled": false}}}
    """
    load_dotenv()

    overrides: Dict[str, Any] = {}
    if path:
        try:
            with open(path) as f:
                overrides = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read config file {path}: {e}") from e
        if not isinstance(overrides, dict):
            raise ConfigError(f"Config file {path} must contain a JSON object")

    source_overrides = overrides.pop("sources", {}) or {}
    unknown = set(source_overrides) - set(DEFAULT_SOURCES)
    if unknown:
        raise ConfigError(f"Unknown source(s) in config: {', '.join(sorted(unknown))}")

    headless = os.getenv(HEADLESS_ENV)
    if headless is not None:
        overrides["headless"] = headless.strip().lower() not in ("0", "false", "no", "off")

    try:
        sources = {
            key: SourceSettings(**{**settings.model_dump(), **source_overrides.get(key, {})})
            for key, settings in DEFAULT_SOURCES.items()
        }
        return ScraperConfig(sources=sources, **overrides)
    except (ValidationError, TypeError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
