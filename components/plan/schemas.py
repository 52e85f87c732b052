"""Pydantic schemas for plan data validation."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union
from pydantic import BaseModel, Field, field_validator

# Largest value a numeric(12, 2) column holds
MAX_STORED_AMOUNT = Decimal("9999999999.99")
CENT = Decimal("0.01")


def _non_negative_amount(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """Amounts travel as decimal text; an empty value means 0."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a decimal amount")
    if not amount.is_finite():
        raise ValueError("amount must be a finite number")
    if amount < 0:
        raise ValueError("amount must not be negative")
    if amount <= MAX_STORED_AMOUNT:
        amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount > MAX_STORED_AMOUNT:
        raise ValueError(f"amount must not exceed {MAX_STORED_AMOUNT}")
    return amount


class PlanBase(BaseModel):
    """Base plan schema."""
    year: int
    month: int = Field(..., ge=0, le=11, description="0-based month (0 = January)")
    total_amount: Decimal = Decimal("0")
    desired_saving: Decimal = Decimal("0")


class PlanUpdate(BaseModel):
    """Schema for updating the income and savings target of a plan."""
    total_amount: Decimal = Decimal("0")
    desired_saving: Decimal = Decimal("0")

    @field_validator("total_amount", "desired_saving", mode="before")
    @classmethod
    def parse_amount(cls, value):
        return _non_negative_amount(value)


class PlanInDB(PlanBase):
    """Schema for plan in database."""
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Plan(PlanInDB):
    """Schema for plan response."""
    pass


class DailyEntryUpsert(BaseModel):
    """Schema for recording the amount spent on a day."""
    spent: Decimal = Decimal("0")

    @field_validator("spent", mode="before")
    @classmethod
    def parse_spent(cls, value):
        return _non_negative_amount(value)


class DailyEntry(BaseModel):
    """Schema for daily entry response."""
    id: int
    plan_id: int
    date: date
    spent: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
