"""Parsing of match dates such as "28th January, 2026"."""

import re
from datetime import date
from typing import Optional

_ORDINAL_RE = re.compile(r'(?<=\d)(st|nd|rd|th)', re.IGNORECASE)
_ISO_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})$')
_TOKEN_RE = re.compile(r'[A-Za-z]+|\d+')

MONTHS: dict[str, int] = {
    'january': 1, 'february': 2, 'march': 3, 'april': 4,
    'may': 5, 'june': 6, 'july': 7, 'august': 8,
    'september': 9, 'october': 10, 'november': 11, 'december': 12,
}


def _month_number(token: str) -> Optional[int]:
    """Resolve an English month name or its 3-letter abbreviation."""
    token = token.lower()
    if token in MONTHS:
        return MONTHS[token]
    if len(token) >= 3:
        for name, number in MONTHS.items():
            if name.startswith(token):
                return number
    return None


def strip_ordinals(value: str) -> str:
    """Remove ordinal suffixes from day numbers ("1st" -> "1")."""
    return _ORDINAL_RE.sub('', value)


def parse_match_date(value: Optional[str]) -> Optional[date]:
    """Parse a scorecard date string into a calendar date.

    Accepts "28th January, 2026", "January 28, 2026", "28 Jan 2026" and
    ISO "2026-01-28". Month names are matched against a fixed English
    table, independent of the process locale.

    Returns:
        The date, or None if the input is empty or not a valid date.
    """
    if not value:
        return None

    cleaned = strip_ordinals(value).strip()

    iso = _ISO_RE.match(cleaned)
    if iso:
        year, month, day = (int(g) for g in iso.groups())
    else:
        tokens = _TOKEN_RE.findall(cleaned)
        if len(tokens) != 3:
            return None
        words = [t for t in tokens if t.isalpha()]
        numbers = [t for t in tokens if t.isdigit()]
        if len(words) != 1 or len(numbers) != 2:
            return None
        month = _month_number(words[0])
        if month is None:
            return None
        # Year is the 4-digit number, day the other one
        if len(numbers[1]) == 4:
            day, year = int(numbers[0]), int(numbers[1])
        elif len(numbers[0]) == 4:
            year, day = int(numbers[0]), int(numbers[1])
        else:
            return None

    try:
        return date(year, month, day)
    except ValueError:
        return None
