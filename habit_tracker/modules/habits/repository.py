"""
Habit repository - Data access layer for habits and their completions.
"""
from datetime import date
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_

from .models import Habit, HabitCompletion


class HabitRepository:
    """Repository for Habit data access"""

    @staticmethod
    def list_active(db: Session, user_id: int) -> List[Habit]:
        """Get active habits for a user, ordered by name"""
        return db.query(Habit).filter(
            and_(
                Habit.user_id == user_id,
                Habit.is_active == True
            )
        ).order_by(Habit.name, Habit.id).all()

    @staticmethod
    def count_active(db: Session, user_id: int) -> int:
        """Count active habits for a user"""
        return db.query(Habit).filter(
            and_(
                Habit.user_id == user_id,
                Habit.is_active == True
            )
        ).count()

    @staticmethod
    def list_user_ids_with_active_habits(db: Session) -> List[int]:
        """Get ids of all users owning at least one active habit"""
        rows = db.query(Habit.user_id).filter(
            Habit.is_active == True
        ).distinct().order_by(Habit.user_id).all()
        return [row[0] for row in rows]

    @staticmethod
    def get_by_id_and_user(db: Session, habit_id: int, user_id: int) -> Optional[Habit]:
        """Get habit by ID, scoped to its owner"""
        return db.query(Habit).filter(
            and_(
                Habit.id == habit_id,
                Habit.user_id == user_id
            )
        ).first()

    @staticmethod
    def create(db: Session, habit: Habit) -> Habit:
        """Create new habit"""
        db.add(habit)
        db.commit()
        db.refresh(habit)
        return habit

    @staticmethod
    def update(db: Session, habit: Habit) -> Habit:
        """Update existing habit"""
        db.commit()
        db.refresh(habit)
        return habit

    @staticmethod
    def delete(db: Session, habit: Habit) -> None:
        """Delete a habit together with its completions"""
        db.query(HabitCompletion).filter(
            HabitCompletion.habit_id == habit.id
        ).delete(synchronize_session=False)
        db.delete(habit)
        db.commit()


class CompletionRepository:
    """Repository for HabitCompletion data access"""

    @staticmethod
    def list_in_range(
        db: Session,
        habit_ids: Iterable[int],
        start_date: date,
        end_date: date
    ) -> List[HabitCompletion]:
        """
        Get completion records for the given habits within an inclusive date range.

        Rows with completed=False are included; callers filter them.
        """
        habit_ids = list(habit_ids)
        if not habit_ids:
            return []
        return db.query(HabitCompletion).filter(
            and_(
                HabitCompletion.habit_id.in_(habit_ids),
                HabitCompletion.date >= start_date,
                HabitCompletion.date <= end_date
            )
        ).order_by(HabitCompletion.date).all()

    @staticmethod
    def get_by_habit_and_date(db: Session, habit_id: int, target_date: date) -> Optional[HabitCompletion]:
        """Get the completion record for a habit on a specific date"""
        return db.query(HabitCompletion).filter(
            and_(
                HabitCompletion.habit_id == habit_id,
                HabitCompletion.date == target_date
            )
        ).first()

    @staticmethod
    def create(db: Session, completion: HabitCompletion) -> HabitCompletion:
        """Create new completion record"""
        db.add(completion)
        db.commit()
        db.refresh(completion)
        return completion

    @staticmethod
    def update(db: Session, completion: HabitCompletion) -> HabitCompletion:
        """Update existing completion record"""
        db.commit()
        db.refresh(completion)
        return completion
