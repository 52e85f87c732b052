"""Script to seed a demo spending plan into the database."""

from datetime import date, timedelta
import asyncio
import logging

from components.core.init_db import db_manager, get_db
from components.plan.repository import PlanRepository

logger = logging.getLogger(__name__)

DEMO_TOTAL_AMOUNT = "3000.00"
DEMO_DESIRED_SAVING = "600.00"
DEMO_SPENDING = ["45.50", "120.00", "12.30", "0", "80.00", "64.20", "150.75"]


async def seed_data(today: date):
    """Seed the plan of the current month with a week of spending."""
    await db_manager.create_tables()

    async for db in get_db():
        repo = PlanRepository(db)
        plan = await repo.get_or_create_plan(today.year, today.month - 1)
        await repo.update_plan(plan.id, DEMO_TOTAL_AMOUNT, DEMO_DESIRED_SAVING)

        # Only days of this month before today
        first_day = today.replace(day=1)
        for offset, spent in enumerate(DEMO_SPENDING):
            entry_date = first_day + timedelta(days=offset)
            if entry_date >= today:
                break
            await repo.upsert_daily_entry(plan.id, entry_date, spent)

        logger.info("Seeded plan %s for %s", plan.id, first_day.strftime("%B %Y"))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_data(date.today()))
