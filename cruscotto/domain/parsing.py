"""Parsers and formatters for the spreadsheet-style strings exported by Airtable."""
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any

CURRENCY_STRIP_RE = re.compile(r"[.€\s]")
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
LEADING_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")
ITALIAN_DATE_RE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$")
ISO_DATE_RE = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})")

EMPTY_DATE = "—"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _leading_float(text: str) -> float:
    """Numeric prefix of text ("12.5abc" -> 12.5); 0.0 when there is none."""
    match = LEADING_FLOAT_RE.match(text)
    return float(match.group(1)) if match else 0.0


def parse_currency(value: Any) -> float:
    """
    Converte "1.234,56 €" in 1234.56.
    Numbers coming straight from Airtable currency fields are returned as float.
    """
    if _is_number(value):
        return float(value)
    if not isinstance(value, str) or not value:
        return 0.0
    return _leading_float(CURRENCY_STRIP_RE.sub("", value).replace(",", "."))


def _leading_int(text: str) -> int:
    match = LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else 0


def parse_percentage(value: Any) -> int:
    """Return the integer part of "45%" style strings (0 when missing)."""
    if _is_number(value):
        # Airtable percent fields are fractions (0.45 == 45%, 1 == 100%)
        if 0 <= value <= 1:
            return int(round(value * 100))
        return int(value)
    if not isinstance(value, str) or not value:
        return 0
    return _leading_int(value.replace("%", ""))


def parse_days(value: Any) -> int:
    """Parse day offsets: "+5" -> 5, "-3" -> -3."""
    if _is_number(value):
        return int(value)
    if not isinstance(value, str) or not value:
        return 0
    return _leading_int(value.replace("+", ""))


def parse_float_with_comma(value: Any) -> float:
    if _is_number(value):
        return float(value)
    if not isinstance(value, str) or not value:
        return 0.0
    return _leading_float(value.replace(",", "."))


def parse_italian_date(value: Any) -> date | None:
    """
    Parse "DD/MM/YYYY". ISO dates ("YYYY-MM-DD", as Airtable date fields are
    serialized) are accepted too. Returns None for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    match = ITALIAN_DATE_RE.match(value)
    if match:
        day, month, year = (int(part) for part in match.groups())
    else:
        match = ISO_DATE_RE.match(value)
        if not match:
            return None
        year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_iso_date(value: str | None) -> date | None:
    """Values posted by <input type="date"> (YYYY-MM-DD); empty -> None."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def format_currency(value: float, decimals: int = 0) -> str:
    """Formato it-IT: 1234.5 -> "1.235 €"."""
    text = f"{value:,.{decimals}f}"
    # swap separators: "1,234.50" -> "1.234,50"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{text} €"


def format_days(value: int) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{value} giorni"


def format_date(value: date | None, fmt: str = "%d/%m/%Y") -> str:
    if value is None:
        return EMPTY_DATE
    return value.strftime(fmt)


def unescape_newlines(text: str, replacement: str = "\n") -> str:
    """Airtable exports sometimes carry literal "\\n" sequences."""
    return (text or "").replace("\\n", replacement)
