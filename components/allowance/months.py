"""Month selector helpers."""

from datetime import date
from typing import List

from components.allowance.engine import normalize_month
from components.allowance.schemas import MonthOption

MONTHS_BEFORE = 6
MONTHS_AFTER = 5

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_label(year: int, month: int) -> str:
    """English label of a 0-based month, e.g. "January 2025"."""
    return f"{MONTH_NAMES[month]} {year}"


def get_month_options(around: date) -> List[MonthOption]:
    """
    Get the months offered for selection around a date.

    Returns 6 past months, the month of ``around`` and the 5 following ones,
    oldest first.
    """
    options = []
    for offset in range(-MONTHS_BEFORE, MONTHS_AFTER + 1):
        year, month = normalize_month(around.year, around.month - 1 + offset)
        options.append(MonthOption(
            year=year,
            month=month,
            value=f"{year}-{month}",
            label=month_label(year, month),
        ))
    return options
