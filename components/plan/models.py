"""Spending plan models for the database."""

from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Numeric, UniqueConstraint, func
from sqlalchemy.orm import relationship

from components.core.database import Base


class Plan(Base):
    """Budget of a single calendar month."""
    __tablename__ = "spending_plans"
    __table_args__ = (UniqueConstraint("year", "month", name="spending_plans_year_month_unique"),)

    id = Column(Integer, primary_key=True, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)  # 0-indexed (0 = January)
    total_amount = Column(Numeric(12, 2), nullable=False)
    desired_saving = Column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    daily_entries = relationship(
        "DailyEntry",
        back_populates="plan",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class DailyEntry(Base):
    """Amount actually spent on one day of a plan's month."""
    __tablename__ = "daily_spending"
    __table_args__ = (UniqueConstraint("plan_id", "date", name="daily_spending_plan_id_date_unique"),)

    id = Column(Integer, primary_key=True, index=True)
    plan_id = Column(Integer, ForeignKey("spending_plans.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    spent = Column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    plan = relationship("Plan", back_populates="daily_entries")
