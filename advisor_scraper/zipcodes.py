import re
from typing import Iterable, List

from .errors import InvalidZipCodeError


ZIP_PATTERN = re.compile(r"^\d{5}$")


def is_valid_zip_code(zip_code: str) -> bool:
    return bool(ZIP_PATTERN.fullmatch(zip_code))


def normalize_zip_codes(zip_codes: Iterable[str]) -> List[str]:
    """
    Validate and deduplicate zip codes, keeping first-seen order.

    A single bad entry fails the whole batch, so nothing is scraped for
    a partially valid list.
    """
    cleaned = [z.strip() for z in zip_codes]
    invalid = [z for z in cleaned if not is_valid_zip_code(z)]
    if invalid:
        raise InvalidZipCodeError(invalid)
    return list(dict.fromkeys(cleaned))


def read_zip_file(path: str) -> List[str]:
    """Read newline-separated zip codes, ignoring blank lines."""
    with open(path) as f:
        return [line.strip() for line in f if line.strip()]
