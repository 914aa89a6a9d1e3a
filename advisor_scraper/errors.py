from typing import Sequence


class ScraperError(Exception):
    """Base class for errors reported to the operator."""


class InvalidZipCodeError(ScraperError):
    def __init__(self, entries: Sequence[str]):
        self.entries = list(entries)
        shown = ", ".join(repr(e) for e in self.entries[:5])
        if len(self.entries) > 5:
            shown += f" (+{len(self.entries) - 5} more)"
        super().__init__(f"Not a valid zip code: {shown}")


class ConfigError(ScraperError):
    pass
