"""Repository for plan operations."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from components.allowance.engine import Amount, parse_amount
from components.plan.models import Plan, DailyEntry

logger = logging.getLogger(__name__)


class PlanNotFoundError(LookupError):
    """Raised when an operation refers to a plan that doesn't exist."""

    def __init__(self, plan_id: int):
        super().__init__(f"Plan {plan_id} not found")
        self.plan_id = plan_id


class EntryOutsidePlanError(ValueError):
    """Raised when a daily entry date doesn't fall within its plan's month."""

    def __init__(self, plan: Plan, entry_date: date):
        super().__init__(
            f"{entry_date.isoformat()} is outside plan {plan.id} "
            f"({plan.year}-{plan.month + 1:02d})"
        )
        self.plan_id = plan.id
        self.entry_date = entry_date


class PlanRepository:
    """Repository for spending plans and their daily entries."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def find_plan(self, year: int, month: int) -> Optional[Plan]:
        """Get the plan of a 0-based month, if there is one."""
        result = await self.session.execute(
            select(Plan).where(Plan.year == year, Plan.month == month)
        )
        return result.scalar_one_or_none()

    async def get_plan(self, plan_id: int) -> Optional[Plan]:
        """Get plan by ID."""
        result = await self.session.execute(
            select(Plan).where(Plan.id == plan_id)
        )
        return result.scalar_one_or_none()

    async def create_plan(
        self,
        year: int,
        month: int,
        total_amount: Amount = 0,
        desired_saving: Amount = 0,
    ) -> Plan:
        """
        Create the plan of a 0-based month.

        If the month already has a plan, its amounts are updated instead, so
        there is never more than one plan per month.
        """
        existing = await self.find_plan(year, month)
        if existing:
            return await self.update_plan(existing.id, total_amount, desired_saving)

        try:
            return await self._insert_plan(year, month, total_amount, desired_saving)
        except IntegrityError:
            await self.session.rollback()
            logger.warning("Plan for %s-%02d was created concurrently, updating it", year, month + 1)
            existing = await self.find_plan(year, month)
            if existing is None:
                raise
            return await self.update_plan(existing.id, total_amount, desired_saving)

    async def get_or_create_plan(self, year: int, month: int) -> Plan:
        """
        Get the plan of a month, creating an empty one on first access.

        If another request creates the same month concurrently, the plan it
        created is returned unchanged.
        """
        plan = await self.find_plan(year, month)
        if plan:
            return plan

        try:
            return await self._insert_plan(year, month, 0, 0)
        except IntegrityError:
            await self.session.rollback()
            logger.warning("Plan for %s-%02d was created concurrently, reloading", year, month + 1)
            plan = await self.find_plan(year, month)
            if plan is None:
                raise
            return plan

    async def _insert_plan(self, year: int, month: int, total_amount: Amount, desired_saving: Amount) -> Plan:
        db_plan = Plan(
            year=year,
            month=month,
            total_amount=parse_amount(total_amount),
            desired_saving=parse_amount(desired_saving),
        )
        self.session.add(db_plan)
        await self.session.commit()
        await self.session.refresh(db_plan)
        logger.info("Created plan %s for %s-%02d", db_plan.id, year, month + 1)
        return db_plan

    async def update_plan(
        self,
        plan_id: int,
        total_amount: Amount,
        desired_saving: Amount,
    ) -> Optional[Plan]:
        """Update income and savings target of a plan. Returns None if it doesn't exist."""
        db_plan = await self.get_plan(plan_id)
        if not db_plan:
            return None

        db_plan.total_amount = parse_amount(total_amount)
        db_plan.desired_saving = parse_amount(desired_saving)
        db_plan.updated_at = datetime.now()

        await self.session.commit()
        await self.session.refresh(db_plan)
        return db_plan

    async def list_daily_entries(self, plan_id: int) -> List[DailyEntry]:
        """Get all daily entries of a plan ordered by date."""
        result = await self.session.execute(
            select(DailyEntry)
            .where(DailyEntry.plan_id == plan_id)
            .order_by(DailyEntry.date)
        )
        return list(result.scalars().all())

    async def find_daily_entry(self, plan_id: int, entry_date: date) -> Optional[DailyEntry]:
        """Get the entry of a plan for a date."""
        result = await self.session.execute(
            select(DailyEntry).where(
                DailyEntry.plan_id == plan_id,
                DailyEntry.date == entry_date,
            )
        )
        return result.scalar_one_or_none()

    async def upsert_daily_entry(self, plan_id: int, entry_date: date, spent: Amount) -> DailyEntry:
        """
        Record the amount spent on a date.

        Updates the existing entry for (plan, date) in place, otherwise
        creates it. There is never more than one entry per date: an insert
        that loses a race with a concurrent one turns into an update.

        Raises:
            PlanNotFoundError: the plan doesn't exist
            EntryOutsidePlanError: the date isn't in the plan's month
        """
        plan = await self.get_plan(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        if (entry_date.year, entry_date.month - 1) != (plan.year, plan.month):
            raise EntryOutsidePlanError(plan, entry_date)

        amount = parse_amount(spent)
        existing = await self.find_daily_entry(plan_id, entry_date)
        if existing:
            return await self._update_entry(existing, amount)

        db_entry = DailyEntry(plan_id=plan_id, date=entry_date, spent=amount)
        self.session.add(db_entry)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.warning(
                "Entry for plan %s on %s was created concurrently, updating it",
                plan_id, entry_date.isoformat(),
            )
            existing = await self.find_daily_entry(plan_id, entry_date)
            if existing is None:
                raise
            return await self._update_entry(existing, amount)

        await self.session.refresh(db_entry)
        logger.info("Recorded %s spent on %s for plan %s", amount, entry_date.isoformat(), plan_id)
        return db_entry

    async def _update_entry(self, db_entry: DailyEntry, amount: Decimal) -> DailyEntry:
        db_entry.spent = amount
        db_entry.updated_at = datetime.now()
        await self.session.commit()
        await self.session.refresh(db_entry)
        logger.info(
            "Updated spent on %s for plan %s to %s",
            db_entry.date.isoformat(), db_entry.plan_id, amount,
        )
        return db_entry
