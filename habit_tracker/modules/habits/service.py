"""
Habit management service.
Handles habit CRUD and completion toggling. Every mutation invalidates
the owner's cached weekly score.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from habit_tracker.core.database import run_store_call
from habit_tracker.exceptions import HabitNotFoundException, HabitLimitExceededException
from habit_tracker.modules.scores.cache import ScoreCache
from habit_tracker.modules.scores.service import ScoreService
from habit_tracker.shared.constants import MAX_HABITS_PER_USER
from .models import Habit, HabitCompletion
from .repository import HabitRepository, CompletionRepository
from .schemas import HabitCreate, HabitUpdate

logger = logging.getLogger("habit_tracker.habits")


class HabitService:
    """Service for managing habits and their completions"""

    def __init__(self, db: Session, cache: Optional[ScoreCache] = None):
        self.db = db
        self.habit_repo = HabitRepository()
        self.completion_repo = CompletionRepository()
        self.score_service = ScoreService(db, cache)

    def get_habits(self, user_id: int) -> List[Habit]:
        """Get active habits for a user"""
        return self._run("list habits", self.habit_repo.list_active, self.db, user_id)

    def get_habit(self, user_id: int, habit_id: int) -> Habit:
        """Get a habit owned by the user"""
        habit = self._run("find habit", self.habit_repo.get_by_id_and_user, self.db, habit_id, user_id)
        if not habit:
            raise HabitNotFoundException(habit_id)
        return habit

    def create_habit(self, user_id: int, habit_data: HabitCreate) -> Habit:
        """Create a new habit, enforcing the per-user active habit limit"""
        active_count = self._run("count habits", self.habit_repo.count_active, self.db, user_id)
        if active_count >= MAX_HABITS_PER_USER:
            raise HabitLimitExceededException(MAX_HABITS_PER_USER)

        habit = Habit(user_id=user_id, is_active=True, **habit_data.model_dump())
        habit = self._run("create habit", self.habit_repo.create, self.db, habit)
        logger.info(f"Created habit {habit.id} for user {user_id}")

        self.score_service.on_habits_or_completions_changed(user_id)
        return habit

    def update_habit(self, user_id: int, habit_id: int, habit_update: HabitUpdate) -> Habit:
        """Update an existing habit"""
        habit = self.get_habit(user_id, habit_id)

        # Explicit nulls leave the field unchanged
        update_data = habit_update.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(habit, key, value)
        habit = self._run("update habit", self.habit_repo.update, self.db, habit)

        self.score_service.on_habits_or_completions_changed(user_id)
        return habit

    def delete_habit(self, user_id: int, habit_id: int) -> None:
        """Delete a habit and all of its completions"""
        habit = self.get_habit(user_id, habit_id)
        self._run("delete habit", self.habit_repo.delete, self.db, habit)
        logger.info(f"Deleted habit {habit_id} for user {user_id}")

        self.score_service.on_habits_or_completions_changed(user_id)

    def get_completions(
        self,
        user_id: int,
        habit_id: int,
        start_date: date,
        end_date: date
    ) -> List[HabitCompletion]:
        """Get completion records of a habit within an inclusive date range"""
        habit = self.get_habit(user_id, habit_id)
        return self._run(
            "list completions", self.completion_repo.list_in_range,
            self.db, [habit.id], start_date, end_date
        )

    def toggle_completion(self, user_id: int, habit_id: int, target_date: date) -> HabitCompletion:
        """
        Toggle a habit's completion for a date.

        An existing record has its completed flag flipped; otherwise a new
        record is created as completed.
        """
        habit = self.get_habit(user_id, habit_id)

        completion = self._run(
            "find completion", self.completion_repo.get_by_habit_and_date, self.db, habit.id, target_date
        )
        if completion:
            completion.completed = not completion.completed
            completion = self._run("update completion", self.completion_repo.update, self.db, completion)
        else:
            completion = self._run(
                "create completion", self.completion_repo.create,
                self.db, HabitCompletion(habit_id=habit.id, date=target_date, completed=True)
            )

        self.score_service.on_habits_or_completions_changed(user_id)
        return completion

    def _run(self, operation: str, func, *args):
        """Run a store call, converting SQLAlchemy failures to DatabaseException"""
        return run_store_call(self.db, logger, operation, func, *args)
