"""
Per-brokerage extractors and the static registry that selects them.
"""

from typing import Dict, List, Type

from ..errors import ConfigError
from ..models import ScraperConfig
from .ameriprise import AmeripriseExtractor
from .base import SourceExtractor
from .edward_jones import EdwardJonesExtractor
from .janney import JanneyExtractor
from .lpl import LPLExtractor
from .raymond_james import RaymondJamesExtractor
from .schwab import SchwabExtractor
from .stifel import StifelExtractor


SOURCE_REGISTRY: Dict[str, Type] = {
    extractor.key: extractor
    for extractor in (
        EdwardJonesExtractor,
        AmeripriseExtractor,
        StifelExtractor,
        JanneyExtractor,
        RaymondJamesExtractor,
        SchwabExtractor,
        LPLExtractor,
    )
}


def build_extractors(config: ScraperConfig) -> List[SourceExtractor]:
    """Instantiate enabled sources in registration order."""
    unknown = set(config.sources) - set(SOURCE_REGISTRY)
    if unknown:
        raise ConfigError(f"No extractor registered for: {', '.join(sorted(unknown))}")

    return [
        extractor(config.sources[key])
        for key, extractor in SOURCE_REGISTRY.items()
        if key in config.sources and config.sources[key].enabled
    ]


__all__ = [
    "SOURCE_REGISTRY",
    "SourceExtractor",
    "build_extractors",
    "AmeripriseExtractor",
    "EdwardJonesExtractor",
    "JanneyExtractor",
    "LPLExtractor",
    "RaymondJamesExtractor",
    "SchwabExtractor",
    "StifelExtractor",
]
