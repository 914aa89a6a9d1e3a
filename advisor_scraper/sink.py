"""
JSON and CSV output files for a finished run.
"""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .models import AdvisorRecord


logger = logging.getLogger(__name__)

CSV_HEADER = ["Name", "Email", "Address", "City", "State", "Phone Number", "Website(s)"]


def timestamp_for_filename(now: Optional[datetime] = None) -> str:
    """ISO-8601 timestamp with colons swapped for hyphens."""
    now = now or datetime.now()
    return now.isoformat(timespec="seconds").replace(":", "-")


def csv_row(record: AdvisorRecord) -> List[str]:
    """Six fixed columns followed by one column per site."""
    fixed = [record.name, record.email, record.address, record.city, record.state, record.phone_no]
    return [value or "" for value in fixed] + list(record.sites)


def write_json(records: Sequence[AdvisorRecord], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump([r.to_output() for r in records], f, indent=2)
    return path


def write_csv(records: Sequence[AdvisorRecord], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        writer.writerows(csv_row(r) for r in records)
    return path


def write_results(
    records: Sequence[AdvisorRecord],
    output_dir: str = "results",
    now: Optional[datetime] = None,
) -> Tuple[Path, Path]:
    """Write `<output_dir>/json/advisors <ts>.json` and `<output_dir>/csv/advisors <ts>.csv`."""
    stamp = timestamp_for_filename(now)
    root = Path(output_dir)
    json_path = write_json(records, root / "json" / f"advisors {stamp}.json")
    csv_path = write_csv(records, root / "csv" / f"advisors {stamp}.csv")
    logger.info(f"Saved {len(records)} advisors to {json_path} and {csv_path}")
    return json_path, csv_path
