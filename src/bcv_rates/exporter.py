"""Export utilities for extracted rate records."""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable

from bcv_rates.extractor import RateRecord

CSV_COLUMNS = ["timestamp", "date", "currency", "value", "source"]


def _prepare_path(path: str | Path) -> Path:
    destination = Path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    return destination


def export_record_to_json(record: RateRecord, path: str | Path) -> None:
    """Write a single record as the same JSON document the API serves."""
    destination = _prepare_path(path)
    with destination.open("w", encoding="utf-8") as handle:
        json.dump(record.to_dict(), handle, ensure_ascii=False, indent=2)


def export_records_to_csv(records: Iterable[RateRecord], path: str | Path) -> None:
    """Export one CSV row per currency found in each record."""
    destination = _prepare_path(path)
    with destination.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(CSV_COLUMNS)
        for record in records:
            for currency, value in record.rates.items():
                writer.writerow([record.timestamp, record.date, currency, value, record.source])
