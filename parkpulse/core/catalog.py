"""
Seed catalog loading. The catalog is data (JSON), so a real provider can
later replace it without touching the store.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Union

from .config import get_catalog_path
from .errors import CatalogError
from .schema import ParkingRecord


def parse_catalog(raw: Any, now: Optional[datetime] = None) -> List[ParkingRecord]:
    """Turn a decoded catalog document into records, preserving catalog order."""
    if isinstance(raw, dict):
        entries = raw.get("locations")
    else:
        entries = raw
    if not isinstance(entries, list):
        raise CatalogError("catalog must be a list of locations or contain a 'locations' list")

    now = now or datetime.now()
    records: List[ParkingRecord] = []
    seen: set[str] = set()

    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise CatalogError(f"catalog entry {idx} is not an object")
        try:
            record = ParkingRecord.from_dict(entry, now=now)
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"invalid catalog entry {idx}: {e}") from e

        if record.place_id in seen:
            raise CatalogError(f"duplicate place_id in catalog: {record.place_id}")
        seen.add(record.place_id)
        records.append(record)

    return records


def load_catalog(path: Optional[Union[str, Path]] = None, now: Optional[datetime] = None) -> List[ParkingRecord]:
    """Load the seed catalog from `path`, the configured path, or the bundled file."""
    catalog_path = Path(path) if path is not None else get_catalog_path()

    try:
        with open(catalog_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise CatalogError(f"cannot read seed catalog {catalog_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"seed catalog {catalog_path} is not valid JSON: {e}") from e

    return parse_catalog(raw, now=now)
