"""HTML parsing utilities for locating exchange rates on the BCV home page."""

from __future__ import annotations

import logging
import math
import re
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, ParserRejectedMarkup

from bcv_rates.errors import ParseError

logger = logging.getLogger(__name__)

USD = "USD"
EUR = "EUR"
CURRENCIES: Tuple[str, ...] = (USD, EUR)

NUMBER_PATTERN = r"[\d,]+(?:\.[\d]+)?"
_NUMBER_RE = re.compile(NUMBER_PATTERN)

Rates = Dict[str, float]
Strategy = Callable[[BeautifulSoup, Mapping[str, float]], Rates]

# Drupal views that render the official rate widget.
OFFICIAL_RATE_SELECTORS: Tuple[str, ...] = (
    ".view-tipo-de-cambio-oficial-del-bcv",
    ".tipo-de-cambio-oficial",
    "#tipo-de-cambio",
)

LABELED_PATTERNS: Dict[str, re.Pattern[str]] = {
    USD: re.compile(rf"USD[\s:=-]*({NUMBER_PATTERN})", re.IGNORECASE),
    EUR: re.compile(rf"EUR[\s:=-]*({NUMBER_PATTERN})", re.IGNORECASE),
}

ELEMENT_SELECTORS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        USD,
        (
            "#dolar",
            ".dolar",
            "[id*='dolar']",
            "[class*='dolar']",
            "#dollar",
            ".dollar",
            "[id*='dollar']",
            "[class*='dollar']",
            "#usd",
            ".usd",
            "[id*='usd']",
            "[class*='usd']",
        ),
    ),
    (
        EUR,
        (
            "#euro",
            ".euro",
            "[id*='euro']",
            "[class*='euro']",
            "#eur",
            ".eur",
            "[id*='eur']",
            "[class*='eur']",
        ),
    ),
)

TABLE_LABELS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (USD, ("USD", "DOLAR", "DÓLAR")),
    (EUR, ("EUR", "EURO")),
)

FALLBACK_PATTERNS: Dict[str, Tuple[re.Pattern[str], ...]] = {
    USD: (
        LABELED_PATTERNS[USD],
        re.compile(rf"d[oó]lar(?:es)?[\s:=-]*({NUMBER_PATTERN})", re.IGNORECASE),
        re.compile(rf"\$\s*({NUMBER_PATTERN})"),
    ),
    EUR: (
        LABELED_PATTERNS[EUR],
        re.compile(rf"euros?[\s:=-]*({NUMBER_PATTERN})", re.IGNORECASE),
    ),
}

DATE_SELECTORS: Tuple[str, ...] = (
    ".date-display-single",
    "[class*='fecha']",
    "[id*='fecha']",
    "[class*='date']",
    "[id*='date']",
    "[class*='actualiz']",
    "[id*='actualiz']",
    "[class*='updated']",
    "[id*='updated']",
)


def parse_rate_value(fragment: str) -> Optional[float]:
    """Convert a numeric fragment such as ``"36,50"`` into a float.

    The first comma is read as the decimal separator. Thousands separators are
    not supported: ``"1,234.56"`` and ``"1,234,56"`` are rejected rather than
    guessed at. Returns ``None`` for anything that is not a finite,
    non-negative number.
    """
    normalized = fragment.strip().replace(",", ".", 1)
    try:
        value = float(normalized)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def find_rate_value(text: str) -> Optional[float]:
    """Return the first numeric token in ``text`` that parses, if any."""
    for match in _NUMBER_RE.finditer(text):
        value = parse_rate_value(match.group(0))
        if value is not None:
            return value
    return None


def _match_value(pattern: re.Pattern[str], text: str) -> Optional[float]:
    for match in pattern.finditer(text):
        value = parse_rate_value(match.group(1))
        if value is not None:
            return value
    return None


def _first_match(patterns: Sequence[re.Pattern[str]], text: str) -> Optional[float]:
    candidates = (_match_value(pattern, text) for pattern in patterns)
    return next((value for value in candidates if value is not None), None)


def parse_document(html: str | bytes) -> BeautifulSoup:
    """Build the queryable tree for one extraction call."""
    if not isinstance(html, (str, bytes)):
        raise ParseError(f"Expected HTML text, got {type(html).__name__}")
    if not html.strip():
        raise ParseError("Document is empty")
    try:
        return BeautifulSoup(html, "html.parser")
    except (ParserRejectedMarkup, TypeError, ValueError, AssertionError) as exc:
        raise ParseError(f"Could not parse document: {exc}", cause=exc) from exc


def find_in_labeled_blocks(soup: BeautifulSoup, resolved: Mapping[str, float]) -> Rates:
    """Read ``USD 36,50`` style labels inside the official rate widgets."""
    found: Rates = {}
    for selector in OFFICIAL_RATE_SELECTORS:
        for element in soup.select(selector):
            text = element.get_text(" ", strip=True)
            for currency, pattern in LABELED_PATTERNS.items():
                if currency in resolved or currency in found:
                    continue
                value = _match_value(pattern, text)
                if value is not None:
                    found[currency] = value
    return found


def find_in_known_elements(soup: BeautifulSoup, resolved: Mapping[str, float]) -> Rates:
    """Probe elements whose id or class names the currency."""
    found: Rates = {}
    for currency, selectors in ELEMENT_SELECTORS:
        for selector in selectors:
            if currency in resolved or currency in found:
                break
            element = soup.select_one(selector)
            if element is None:
                continue
            value = find_rate_value(element.get_text(" ", strip=True))
            if value is not None:
                found[currency] = value
    return found


def find_in_tables(soup: BeautifulSoup, resolved: Mapping[str, float]) -> Rates:
    """Scan ``label | value`` rows of every table."""
    found: Rates = {}
    for table in soup.find_all("table"):
        for row in table.find_all("tr"):
            cells = row.find_all(["td", "th"], recursive=False)
            if len(cells) < 2:
                continue
            label = cells[0].get_text(strip=True).upper()
            value_text = cells[1].get_text(strip=True)
            for currency, cues in TABLE_LABELS:
                if currency in resolved or currency in found:
                    continue
                if not any(cue in label for cue in cues):
                    continue
                value = find_rate_value(value_text)
                if value is not None:
                    found[currency] = value
    return found


def find_in_page_text(soup: BeautifulSoup, resolved: Mapping[str, float]) -> Rates:
    """Last resort: regex search over the whole visible text."""
    missing = [currency for currency in CURRENCIES if currency not in resolved]
    if not missing:
        return {}

    root = soup.body if soup.body is not None else soup
    text = root.get_text(" ", strip=True)

    found: Rates = {}
    for currency in missing:
        value = _first_match(FALLBACK_PATTERNS[currency], text)
        if value is not None:
            found[currency] = value
    return found


STRATEGIES: Tuple[Strategy, ...] = (
    find_in_labeled_blocks,
    find_in_known_elements,
    find_in_tables,
    find_in_page_text,
)


def run_cascade(soup: BeautifulSoup, strategies: Sequence[Strategy] = STRATEGIES) -> Rates:
    """Run ``strategies`` in order; the first value found for a currency wins."""
    rates: Rates = {}
    for strategy in strategies:
        found = strategy(soup, dict(rates))
        for currency, value in found.items():
            if currency in rates:
                continue
            logger.debug("%s resolved %s=%s", strategy.__name__, currency, value)
            rates[currency] = value
    return rates


def locate_date(soup: BeautifulSoup) -> Optional[str]:
    """Return the text of the first non-empty "last updated" element."""
    for selector in DATE_SELECTORS:
        for element in soup.select(selector):
            text = element.get_text(" ", strip=True)
            if text:
                return text
    return None
