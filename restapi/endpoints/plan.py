"""Plan endpoints for the API."""

import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.allowance.months import get_month_options
from components.allowance.schemas import MonthOption
from components.plan.repository import PlanRepository, PlanNotFoundError, EntryOutsidePlanError
from components.plan import schemas

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/plans",
    tags=["plans"],
    responses={404: {"description": "Not found"}},
)


@router.get("/months", response_model=List[MonthOption])
async def list_months(
    around: Optional[date] = Query(None, description="Center the options on this date (defaults to today)"),
):
    """
    Get the months available for planning.

    Returns 6 past months, the current month and 5 future months.
    Months are 0-based (0 = January).
    """
    return get_month_options(around or date.today())


@router.get("/{plan_id}/daily", response_model=List[schemas.DailyEntry])
async def list_daily_entries(
    plan_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get the recorded spending of a plan ordered by date."""
    repo = PlanRepository(db)
    if not await repo.get_plan(plan_id):
        raise HTTPException(status_code=404, detail="Plan not found")
    return await repo.list_daily_entries(plan_id)


@router.put("/{plan_id}/daily/{entry_date}", response_model=schemas.DailyEntry)
async def upsert_daily_entry(
    plan_id: int,
    entry_date: date,
    entry: schemas.DailyEntryUpsert,
    db: AsyncSession = Depends(get_db),
):
    """
    Record the amount spent on a date.

    Creates the entry on first save and updates it afterwards.
    The date must fall within the plan's month.
    """
    repo = PlanRepository(db)
    try:
        return await repo.upsert_daily_entry(plan_id, entry_date, entry.spent)
    except PlanNotFoundError:
        raise HTTPException(status_code=404, detail="Plan not found")
    except EntryOutsidePlanError as exc:
        logger.warning("Rejected daily entry: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/{year}/{month}", response_model=schemas.Plan)
async def get_plan(
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=0, le=11, description="0-based month (0 = January)"),
    db: AsyncSession = Depends(get_db),
):
    """Get the plan of a month. An empty plan is created on first access."""
    repo = PlanRepository(db)
    return await repo.get_or_create_plan(year, month)


@router.put("/{plan_id}", response_model=schemas.Plan)
async def update_plan(
    plan_id: int,
    plan: schemas.PlanUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update the total income and savings target of a plan."""
    repo = PlanRepository(db)
    updated_plan = await repo.update_plan(plan_id, plan.total_amount, plan.desired_saving)
    if not updated_plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return updated_plan
