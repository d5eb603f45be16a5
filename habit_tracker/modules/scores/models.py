"""
WeeklyScore database model.
One snapshot per user per week, overwritten in place on recalculation.
"""
from sqlalchemy import Column, Integer, DateTime, Date, UniqueConstraint
from datetime import datetime

from habit_tracker.core.database import Base


class WeeklyScore(Base):
    __tablename__ = "weekly_scores"
    __table_args__ = (
        UniqueConstraint("user_id", "week_start_date", name="uq_weekly_scores_user_week"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    week_start_date = Column(Date, nullable=False, index=True)  # Always a Monday

    score = Column(Integer, nullable=False, default=0)
    completed_habits = Column(Integer, nullable=False, default=0)  # Sum of actual completions
    total_habits = Column(Integer, nullable=False, default=0)      # Sum of expected completions

    calculated_at = Column(DateTime, nullable=False, default=datetime.now)
