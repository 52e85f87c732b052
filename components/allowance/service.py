"""Evaluate allowances against stored plans."""

from datetime import date
from typing import Optional

from components.allowance import engine
from components.allowance.schemas import AllowancePreview, MonthAllowances
from components.plan.repository import PlanRepository


async def get_month_allowances(
    repo: PlanRepository,
    year: int,
    month: int,
    today: date,
    preview: Optional[AllowancePreview] = None,
) -> MonthAllowances:
    """
    Compute allowances of a month from its stored plan and entries.

    The plan is created empty if the month has none yet. Values in
    ``preview`` are unsaved edits layered over the stored data; they are
    never written.
    """
    plan = await repo.get_or_create_plan(year, month)
    entries = await repo.list_daily_entries(plan.id)

    if preview is None:
        preview = AllowancePreview()

    return engine.compute_allowances(
        year=year,
        month=month,
        total_amount=engine.resolve_amount(preview.total_amount, plan.total_amount),
        desired_saving=engine.resolve_amount(preview.desired_saving, plan.desired_saving),
        spent_by_date=engine.merge_spent(entries, preview.spent_overrides),
        today=today,
    )
