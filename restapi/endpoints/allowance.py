"""Daily allowance endpoints for the API."""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.allowance import schemas
from components.allowance.service import get_month_allowances
from components.plan.repository import PlanRepository

router = APIRouter(
    prefix="/allowances",
    tags=["allowances"],
    responses={404: {"description": "Not found"}},
)


@router.get("/{year}/{month}", response_model=schemas.MonthAllowances)
async def read_allowances(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=0, le=11, description="0-based month (0 = January)"),
    today: Optional[date] = Query(None, description="Reference date (defaults to today)"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get allowed spending for every day of a month.

    Returns:
    - Available money (income minus savings target)
    - Base daily allowance (even split over the month)
    - Rollover carried from past days
    - For each day: allowed spending, amount spent, past/today flags
    """
    repo = PlanRepository(db)
    return await get_month_allowances(repo, year, month, today or date.today())


@router.post("/{year}/{month}", response_model=schemas.MonthAllowances)
async def preview_allowances(
    preview: schemas.AllowancePreview,
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=0, le=11, description="0-based month (0 = January)"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get allowances with unsaved edits applied.

    Income, savings target and spent amounts in the body replace the stored
    values for this calculation only. Empty income or savings fall back to
    the stored plan; unparseable amounts count as 0.
    """
    repo = PlanRepository(db)
    return await get_month_allowances(repo, year, month, preview.today or date.today(), preview)
