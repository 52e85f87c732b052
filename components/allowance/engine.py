"""
Daily allowance redistribution.

The money available in a month (income minus the savings target) is split
evenly across its days. Once days are in the past, whatever was left unspent
on them (or overspent) is carried forward and spread over the days that
remain, so the allowance for today and the following days reflects actual
spending so far.

Months are 0-based throughout (0 = January) to match what is stored.
"""

import re
from datetime import date, datetime, timedelta
from decimal import MAX_EMAX, Context, Decimal, InvalidOperation, localcontext
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from components.allowance.schemas import DayAllowance, MonthAllowances

Amount = Union[str, int, float, Decimal, None]

ZERO = Decimal("0")

# Leading number of a text amount: "12.5abc" reads as 12.5, "abc" as nothing
NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Parsed amounts stay within this exponent range so sums, products and
# divisions by a day count can never overflow ARITHMETIC.
EXPONENT_LIMIT = MAX_EMAX // 2
ARITHMETIC = Context(prec=28, Emax=MAX_EMAX, Emin=-MAX_EMAX)


def _within_limits(amount: Decimal) -> Decimal:
    if not amount.is_finite() or abs(amount.adjusted()) > EXPONENT_LIMIT:
        return ZERO
    return amount


def parse_amount(value: Amount) -> Decimal:
    """
    Coerce a user or database supplied amount to Decimal.

    Text is read up to the end of its leading number, so "12abc" is 12.
    Anything without a usable number (empty text, garbage, NaN, infinity,
    absurd exponents) counts as 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return _within_limits(value)
    match = NUMBER_PREFIX.match(str(value))
    if not match:
        return ZERO
    try:
        amount = Decimal(match.group(1))
    except InvalidOperation:
        return ZERO
    return _within_limits(amount)


def normalize_month(year: int, month: int) -> Tuple[int, int]:
    """Roll an out-of-range 0-based month into the neighbouring year."""
    return year + month // 12, month % 12


def days_in_month(year: int, month: int) -> int:
    """Number of days in a 0-based month: the day before the 1st of the next month."""
    next_year, next_month = normalize_month(year, month + 1)
    return (date(next_year, next_month + 1, 1) - timedelta(days=1)).day


def date_key(year: int, month: int, day: int) -> str:
    """ISO date (YYYY-MM-DD) of a day in a 0-based month."""
    return f"{year:04d}-{month + 1:02d}-{day:02d}"


def _as_date(value: Union[date, datetime]) -> date:
    # datetime is a subclass of date, so test it first
    if isinstance(value, datetime):
        return value.date()
    return value


def _key(value: Union[str, date]) -> str:
    if isinstance(value, date):
        return _as_date(value).isoformat()
    return str(value)


def resolve_amount(override: Amount, stored: Amount) -> Decimal:
    """An unsaved edit wins over the stored value unless it is left empty."""
    if override is None or (isinstance(override, str) and not override.strip()):
        return parse_amount(stored)
    return parse_amount(override)


def merge_spent(
    entries: Iterable[Any],
    overlay: Optional[Mapping[Union[str, date], Amount]] = None,
) -> Dict[str, Decimal]:
    """
    Build the date -> spent map fed to compute_allowances.

    ``entries`` are stored daily entries (objects or mappings with ``date`` and
    ``spent``). Values in ``overlay`` are edits that haven't been saved yet and
    replace the stored value for their date.
    """
    spent_by_date: Dict[str, Decimal] = {}
    for entry in entries:
        if isinstance(entry, Mapping):
            entry_date, spent = entry.get("date"), entry.get("spent")
        else:
            entry_date, spent = entry.date, entry.spent
        if entry_date is None:
            continue
        spent_by_date[_key(entry_date)] = parse_amount(spent)

    for entry_date, spent in (overlay or {}).items():
        spent_by_date[_key(entry_date)] = parse_amount(spent)

    return spent_by_date


def compute_allowances(
    year: int,
    month: int,
    total_amount: Amount,
    desired_saving: Amount,
    spent_by_date: Optional[Mapping[Union[str, date], Amount]],
    today: Union[date, datetime],
) -> MonthAllowances:
    """
    Compute the allowed spending of every day in a month.

    Past days keep the even split (base daily allowance) and feed the rollover
    with ``base - spent``. Today and future days share the remaining baseline
    plus that rollover evenly:

        allowed = (base * days_from_here + rollover) / days_from_here

    where ``days_from_here`` counts the day itself up to the end of the month.
    Spending recorded on future days doesn't move other days' allowances
    until those days are in the past.

    Negative available money isn't clamped; it just yields negative
    allowances.
    """
    year, month = normalize_month(year, month)
    today = _as_date(today)
    spent_lookup = {_key(k): parse_amount(v) for k, v in (spent_by_date or {}).items()}

    total = parse_amount(total_amount)
    saving = parse_amount(desired_saving)
    days_count = days_in_month(year, month)

    with localcontext(ARITHMETIC):
        available_money = total - saving
        base_daily_allowance = available_money / days_count

        rollover = ZERO
        days = []
        for day in range(1, days_count + 1):
            current = date(year, month + 1, day)
            key = date_key(year, month, day)
            spent = spent_lookup.get(key, ZERO)
            is_past = current < today
            is_today = current == today

            if is_past:
                rollover += base_daily_allowance - spent
                allowed_spending = base_daily_allowance
            else:
                days_from_here = days_count - day + 1
                allowed_spending = (base_daily_allowance * days_from_here + rollover) / days_from_here

            days.append(DayAllowance(
                date=current,
                date_key=key,
                allowed_spending=allowed_spending,
                spent=spent,
                is_past=is_past,
                is_today=is_today,
            ))

        return MonthAllowances(
            year=year,
            month=month,
            days_count=days_count,
            total_amount=total,
            desired_saving=saving,
            available_money=available_money,
            base_daily_allowance=base_daily_allowance,
            rollover=rollover,
            days=days,
        )
