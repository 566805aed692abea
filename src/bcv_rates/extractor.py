"""Rate extraction service: one HTML document in, one RateRecord out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from bcv_rates.parser import locate_date, parse_document, run_cascade

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Render an instant as ``2024-01-01T12:00:00.000Z``."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class RateRecord:
    """Result of a single extraction; currencies that were not found are absent."""

    success: bool
    date: str
    source: str
    timestamp: str
    rates: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "date": self.date,
            "rates": dict(self.rates),
            "source": self.source,
            "timestamp": self.timestamp,
        }


class RateExtractor:
    """Best-effort extraction of the USD/EUR official rates from raw HTML."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock = clock or _utc_now

    def extract(self, html: str | bytes, source_url: str) -> RateRecord:
        """Parse ``html`` and return whatever rates and date can be located.

        Raises :class:`~bcv_rates.errors.ParseError` when the document cannot be
        parsed at all. Finding no currencies is not an error: the record is
        still successful, with an empty ``rates`` mapping.
        """
        now = self.clock()
        soup = parse_document(html)

        rates = run_cascade(soup)
        date = locate_date(soup)
        if date is None:
            date = now.astimezone(timezone.utc).strftime("%Y-%m-%d")
            logger.debug("No date found in document, using %s", date)

        record = RateRecord(
            success=True,
            date=date,
            source=source_url,
            timestamp=format_timestamp(now),
            rates=rates,
        )
        logger.info(
            "Extracted rates from %s: %s",
            source_url,
            ", ".join(f"{code}={value}" for code, value in record.rates.items()) or "none",
        )
        return record
