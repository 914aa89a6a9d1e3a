"""
Cross-source deduplication.

Records are keyed by name by default. That merges different people who
share a name and misses the same person spelled differently by two
sources; `by_name_and_phone` is available when that matters more.
"""

from typing import Callable, Dict, Hashable, Iterable, List

from .models import AdvisorRecord


MergeKey = Callable[[AdvisorRecord], Hashable]


def by_name(record: AdvisorRecord) -> Hashable:
    return record.name


def by_name_and_phone(record: AdvisorRecord) -> Hashable:
    return record.name, record.phone_no or ""


MERGE_KEYS: Dict[str, MergeKey] = {
    "name": by_name,
    "name_phone": by_name_and_phone,
}


def merge_records(records: Iterable[AdvisorRecord], key: MergeKey = by_name) -> List[AdvisorRecord]:
    """
    Collapse records sharing a key. The last record seen for a key wins
    outright (no field-level merge); keys keep their first-seen position.
    """
    merged: Dict[Hashable, AdvisorRecord] = {}
    for record in records:
        merged[key(record)] = record
    return list(merged.values())
