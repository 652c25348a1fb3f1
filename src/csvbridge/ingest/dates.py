"""Free-text date cell -> (period label, year) normalization.

Patterns are tried in order and the first match wins. Numeric day/month
forms always read the first group as the month (``2/10/2025`` is February),
whatever the locale of the exporting tool.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

from csvbridge.models.records import MONTH_NAMES

_MONTH_DAY_YEAR = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})$")
_ISO_DATE = re.compile(r"^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})$")
_WORD_YEAR = re.compile(r"^([A-Za-z]+)\s*(\d{4})$")
_YEAR_MONTH = re.compile(r"^(\d{4})[/\-](\d{1,2})$")
_MONTH_YEAR = re.compile(r"^(\d{1,2})[/\-](\d{4})$")
_BARE_WORD = re.compile(r"^([A-Za-z]+)$")


class PeriodDate(NamedTuple):
    label: str
    year: Optional[int]


def _month_label(month: str) -> str:
    num = int(month)
    if 1 <= num <= len(MONTH_NAMES):
        return MONTH_NAMES[num - 1]
    return ""


def normalize_period(value: str) -> PeriodDate:
    if not value:
        return PeriodDate("", None)
    value = value.strip()

    match = _MONTH_DAY_YEAR.match(value)
    if match:
        return PeriodDate(_month_label(match.group(1)), int(match.group(3)))

    match = _ISO_DATE.match(value)
    if match:
        return PeriodDate(_month_label(match.group(2)), int(match.group(1)))

    # The word is kept verbatim: "Feb 2025" stays "Feb".
    match = _WORD_YEAR.match(value)
    if match:
        return PeriodDate(match.group(1), int(match.group(2)))

    match = _YEAR_MONTH.match(value)
    if match:
        return PeriodDate(_month_label(match.group(2)), int(match.group(1)))

    match = _MONTH_YEAR.match(value)
    if match:
        return PeriodDate(_month_label(match.group(1)), int(match.group(2)))

    match = _BARE_WORD.match(value)
    if match:
        return PeriodDate(match.group(1), None)

    return PeriodDate(value, None)


def is_plausible_year(year: Optional[int], min_year: int = 1900, max_year: int = 2100) -> bool:
    return year is not None and min_year < year < max_year


def year_in_data(
    cells: list[str], probe_rows: int = 3, min_year: int = 1900, max_year: int = 2100,
) -> bool:
    """True when any of the first ``probe_rows`` date cells carries a plausible year."""
    for cell in cells[:probe_rows]:
        if is_plausible_year(normalize_period(cell).year, min_year, max_year):
            return True
    return False
