"""Pydantic schemas for daily allowance data."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, Field


class DayAllowance(BaseModel):
    """Allowed and actual spending of a single day. Derived, never stored."""
    date: date
    date_key: str
    allowed_spending: Decimal
    spent: Decimal
    is_past: bool
    is_today: bool


class MonthAllowances(BaseModel):
    """Allowances for every day of a month plus the figures they derive from."""
    year: int
    month: int
    days_count: int
    total_amount: Decimal
    desired_saving: Decimal
    available_money: Decimal
    base_daily_allowance: Decimal
    rollover: Decimal
    days: List[DayAllowance]


class AllowancePreview(BaseModel):
    """
    Unsaved edits to evaluate against the stored plan.

    Empty or missing amounts fall back to the stored plan values.
    Spent overrides win over stored entries for the same date.
    """
    total_amount: Optional[Union[str, int, float]] = None
    desired_saving: Optional[Union[str, int, float]] = None
    spent_overrides: Dict[str, Optional[Union[str, int, float]]] = Field(default_factory=dict)
    today: Optional[date] = None


class MonthOption(BaseModel):
    """Schema for an entry of the month selector."""
    year: int
    month: int
    value: str
    label: str
