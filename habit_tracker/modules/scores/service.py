"""
Weekly score service.
Resolves week boundaries, consults the cache and the snapshot store, runs
the calculator and persists results.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from habit_tracker.core.database import run_store_call
from habit_tracker.modules.habits.repository import HabitRepository, CompletionRepository
from habit_tracker.shared.date_utils import (
    get_today, get_week_start, get_week_end, get_history_start
)
from .cache import ScoreCache, score_cache
from .calculator import ScoreCalculator
from .repository import WeeklyScoreRepository
from .schemas import WeeklyScoreResponse

logger = logging.getLogger("habit_tracker.scores")


class ScoreService:
    """Service for weekly score calculation and retrieval"""

    def __init__(self, db: Session, cache: Optional[ScoreCache] = None):
        self.db = db
        self.cache = cache if cache is not None else score_cache
        self.habit_repo = HabitRepository()
        self.completion_repo = CompletionRepository()
        self.score_repo = WeeklyScoreRepository()
        self.calculator = ScoreCalculator()

    def get_current_week_score(self, user_id: int) -> WeeklyScoreResponse:
        """
        Get the score for the week containing today.

        Served from the cache when possible; otherwise recalculated,
        persisted and cached.
        """
        week_start = get_week_start(get_today())

        cached = self.cache.get(user_id, week_start)
        if cached is not None:
            return cached

        score = self._calculate_and_store(user_id, week_start)
        self.cache.put(user_id, score)
        return score

    def get_week_score(self, user_id: int, target_date: date) -> WeeklyScoreResponse:
        """
        Get the score for the week containing target_date.

        An existing snapshot is returned as-is; a missing one is calculated
        and persisted. The cache is not involved.
        """
        week_start = get_week_start(target_date)

        existing = self._run("find snapshot", self.score_repo.find, self.db, user_id, week_start)
        if existing is not None:
            return WeeklyScoreResponse.model_validate(existing)

        return self._calculate_and_store(user_id, week_start)

    def get_historical_scores(self, user_id: int, weeks: int) -> List[WeeklyScoreResponse]:
        """
        Get persisted snapshots for the last `weeks` weeks, most recent first.

        Callers are responsible for bounding `weeks`.
        """
        today = get_today()
        current_week_start = get_week_start(today)
        since = get_history_start(today, weeks)

        snapshots = self._run("list snapshots", self.score_repo.list_since, self.db, user_id, since)
        snapshots = [s for s in snapshots if s.week_start_date <= current_week_start]
        snapshots.sort(key=lambda s: s.week_start_date, reverse=True)
        return [WeeklyScoreResponse.model_validate(s) for s in snapshots]

    def recalculate_current_week(self, user_id: int) -> WeeklyScoreResponse:
        """Force recalculation of the current week and refresh the cache"""
        week_start = get_week_start(get_today())
        self.cache.evict(user_id)

        score = self._calculate_and_store(user_id, week_start)
        self.cache.put(user_id, score)
        logger.info(f"Recalculated week {week_start} for user {user_id}: score={score.score}")
        return score

    def finalize_week(self, user_id: int, target_date: date) -> WeeklyScoreResponse:
        """
        Recalculate and persist the week containing target_date, overwriting
        any existing snapshot. Used to close out a finished week.
        """
        return self._calculate_and_store(user_id, get_week_start(target_date))

    def on_habits_or_completions_changed(self, user_id: int) -> None:
        """
        Invalidate the user's current-week score.

        Called after every habit create/update/delete and completion toggle.
        The next read recalculates.
        """
        if self.cache.evict(user_id) is not None:
            logger.debug(f"Evicted cached score for user {user_id}")

    def list_scored_users(self) -> List[int]:
        """Users owning at least one active habit"""
        return self._run(
            "list users", self.habit_repo.list_user_ids_with_active_habits, self.db
        )

    def _calculate_and_store(self, user_id: int, week_start: date) -> WeeklyScoreResponse:
        """Calculate the score for (user_id, week_start) and upsert the snapshot"""
        week_end = get_week_end(week_start)

        habits = self._run("list habits", self.habit_repo.list_active, self.db, user_id)
        completions = []
        if habits:
            completions = self._run(
                "list completions",
                self.completion_repo.list_in_range,
                self.db, [h.id for h in habits], week_start, week_end
            )

        result = self.calculator.calculate(habits, completions, week_start)

        snapshot = self._run(
            "upsert snapshot", self.score_repo.upsert, self.db, user_id, week_start, result
        )
        return WeeklyScoreResponse.model_validate(snapshot)

    def _run(self, operation: str, func, *args):
        """Run a store call, converting SQLAlchemy failures to DatabaseException"""
        return run_store_call(self.db, logger, operation, func, *args)
