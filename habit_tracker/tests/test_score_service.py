"""
Tests for ScoreService.

Tests cover:
1. Current week score calculation and caching
2. Arbitrary week lookup and normalization to Monday
3. Historical scores ordering and bounds
4. Forced recalculation and invalidation
5. Idempotent recalculation (one snapshot per week)
6. Store failures
"""
import pytest
from datetime import date, timedelta
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from habit_tracker.exceptions import DatabaseException
from habit_tracker.modules.scores.models import WeeklyScore
from habit_tracker.modules.scores.repository import WeeklyScoreRepository
from habit_tracker.modules.scores.service import ScoreService
from habit_tracker.tests.conftest import create_habit, add_completions, week_days

WEDNESDAY = date(2026, 10, 21)
MONDAY = date(2026, 10, 19)


@pytest.fixture(autouse=True)
def fixed_today():
    """Pin 'today' to a Wednesday so week boundaries are predictable"""
    with patch("habit_tracker.modules.scores.service.get_today", return_value=WEDNESDAY):
        yield WEDNESDAY


@pytest.fixture
def service(db_session, score_cache):
    return ScoreService(db_session, score_cache)


def store_snapshot(db, user_id: int, week_start: date, score: int) -> WeeklyScore:
    snapshot = WeeklyScore(
        user_id=user_id,
        week_start_date=week_start,
        score=score,
        completed_habits=score // 10,
        total_habits=10
    )
    db.add(snapshot)
    db.commit()
    db.refresh(snapshot)
    return snapshot


class TestCurrentWeekScore:
    """Tests for get_current_week_score"""

    def test_no_habits_returns_zero_snapshot(self, service, db_session, user_id):
        """No active habits should yield a persisted zero snapshot"""
        result = service.get_current_week_score(user_id)

        assert result.score == 0
        assert result.completed_habits == 0
        assert result.total_habits == 0
        assert result.week_start_date == MONDAY
        assert db_session.query(WeeklyScore).count() == 1

    def test_calculates_mixed_score(self, service, db_session, user_id):
        """habit1: 3/5 = 60%, habit2: 6/7 = 85.7%, average 73"""
        exercise = create_habit(db_session, user_id, "Exercise", 5)
        meditation = create_habit(db_session, user_id, "Meditation", 7)
        add_completions(db_session, exercise, week_days(MONDAY, 3))
        add_completions(db_session, meditation, week_days(MONDAY, 6))

        result = service.get_current_week_score(user_id)

        assert result.score == 73
        assert result.completed_habits == 9
        assert result.total_habits == 12

    def test_perfect_completion_scores_100(self, service, db_session, user_id):
        habit = create_habit(db_session, user_id, "Exercise", 5)
        add_completions(db_session, habit, week_days(MONDAY, 5))

        result = service.get_current_week_score(user_id)

        assert result.score == 100
        assert result.completed_habits == 5
        assert result.total_habits == 5

    def test_inactive_habits_are_ignored(self, service, db_session, user_id):
        active = create_habit(db_session, user_id, "Active", 2)
        inactive = create_habit(db_session, user_id, "Inactive", 7, is_active=False)
        add_completions(db_session, active, week_days(MONDAY, 2))
        add_completions(db_session, inactive, week_days(MONDAY, 1))

        result = service.get_current_week_score(user_id)

        assert result.score == 100
        assert result.total_habits == 2

    def test_other_users_habits_are_ignored(self, service, db_session, user_id):
        create_habit(db_session, user_id, "Mine", 5)
        theirs = create_habit(db_session, user_id + 1, "Theirs", 5)
        add_completions(db_session, theirs, week_days(MONDAY, 5))

        result = service.get_current_week_score(user_id)

        assert result.score == 0
        assert result.total_habits == 5

    def test_second_call_is_served_from_cache(self, service, db_session, user_id, score_cache):
        """Cached value is returned without touching the habit store"""
        create_habit(db_session, user_id, "Exercise", 5)
        first = service.get_current_week_score(user_id)

        with patch.object(service.habit_repo, "list_active") as list_active:
            second = service.get_current_week_score(user_id)

        list_active.assert_not_called()
        assert second == first
        assert user_id in score_cache

    def test_cache_hides_changes_until_invalidated(self, service, db_session, user_id):
        habit = create_habit(db_session, user_id, "Exercise", 5)
        assert service.get_current_week_score(user_id).score == 0

        add_completions(db_session, habit, week_days(MONDAY, 5))
        assert service.get_current_week_score(user_id).score == 0

        service.on_habits_or_completions_changed(user_id)
        assert service.get_current_week_score(user_id).score == 100

    def test_cached_entry_from_last_week_is_recalculated(self, service, db_session, user_id, score_cache):
        """A cached score from a previous week is not served for the new week"""
        create_habit(db_session, user_id, "Exercise", 5)
        with patch("habit_tracker.modules.scores.service.get_today",
                   return_value=WEDNESDAY - timedelta(weeks=1)):
            stale = service.get_current_week_score(user_id)

        result = service.get_current_week_score(user_id)

        assert stale.week_start_date == MONDAY - timedelta(weeks=1)
        assert result.week_start_date == MONDAY
        assert score_cache.get(user_id).week_start_date == MONDAY


class TestWeekScore:
    """Tests for get_week_score"""

    @pytest.mark.parametrize("day_offset", range(7))
    def test_normalizes_any_day_to_monday(self, service, db_session, user_id, day_offset):
        create_habit(db_session, user_id, "Exercise", 5)
        last_monday = MONDAY - timedelta(weeks=1)

        result = service.get_week_score(user_id, last_monday + timedelta(days=day_offset))

        assert result.week_start_date == last_monday
        assert db_session.query(WeeklyScore).count() == 1

    def test_existing_snapshot_returned_without_recalculation(self, service, db_session, user_id):
        """A persisted snapshot is returned verbatim"""
        create_habit(db_session, user_id, "Exercise", 5)
        existing = store_snapshot(db_session, user_id, MONDAY, 85)

        with patch.object(service.habit_repo, "list_active") as list_active:
            result = service.get_week_score(user_id, MONDAY + timedelta(days=3))

        list_active.assert_not_called()
        assert result.id == existing.id
        assert result.score == 85

    def test_missing_snapshot_is_calculated_and_persisted(self, service, db_session, user_id):
        habit = create_habit(db_session, user_id, "Exercise", 5)
        past_monday = MONDAY - timedelta(weeks=2)
        add_completions(db_session, habit, week_days(past_monday, 3))

        result = service.get_week_score(user_id, past_monday)

        assert result.score == 60
        stored = WeeklyScoreRepository.find(db_session, user_id, past_monday)
        assert stored is not None
        assert stored.score == 60

    def test_does_not_touch_cache(self, service, db_session, user_id, score_cache):
        create_habit(db_session, user_id, "Exercise", 5)

        service.get_week_score(user_id, WEDNESDAY)

        assert user_id not in score_cache

    def test_completions_from_neighbouring_weeks_do_not_count(self, service, db_session, user_id):
        habit = create_habit(db_session, user_id, "Exercise", 7)
        add_completions(db_session, habit, [
            MONDAY - timedelta(days=1),
            MONDAY,
            MONDAY + timedelta(days=6),
            MONDAY + timedelta(days=7),
        ])

        result = service.get_week_score(user_id, MONDAY)

        assert result.completed_habits == 2


class TestHistoricalScores:
    """Tests for get_historical_scores"""

    def test_returns_most_recent_first(self, service, db_session, user_id):
        for weeks_ago, score in [(2, 80), (0, 90), (3, 75), (1, 85)]:
            store_snapshot(db_session, user_id, MONDAY - timedelta(weeks=weeks_ago), score)

        result = service.get_historical_scores(user_id, 4)

        assert [r.score for r in result] == [90, 85, 80, 75]
        assert [r.week_start_date for r in result] == [
            MONDAY - timedelta(weeks=n) for n in range(4)
        ]

    def test_excludes_weeks_older_than_window(self, service, db_session, user_id):
        for weeks_ago in range(6):
            store_snapshot(db_session, user_id, MONDAY - timedelta(weeks=weeks_ago), 50)

        result = service.get_historical_scores(user_id, 4)

        assert len(result) == 4
        assert min(r.week_start_date for r in result) == MONDAY - timedelta(weeks=3)

    def test_excludes_future_weeks(self, service, db_session, user_id):
        store_snapshot(db_session, user_id, MONDAY, 50)
        store_snapshot(db_session, user_id, MONDAY + timedelta(weeks=1), 60)

        result = service.get_historical_scores(user_id, 4)

        assert [r.week_start_date for r in result] == [MONDAY]

    def test_only_returns_requested_user(self, service, db_session, user_id):
        store_snapshot(db_session, user_id, MONDAY, 50)
        store_snapshot(db_session, user_id + 1, MONDAY, 60)

        result = service.get_historical_scores(user_id, 4)

        assert len(result) == 1
        assert result[0].score == 50

    def test_missing_weeks_are_not_filled(self, service, db_session, user_id):
        """History only reports persisted snapshots"""
        store_snapshot(db_session, user_id, MONDAY - timedelta(weeks=2), 70)

        result = service.get_historical_scores(user_id, 4)

        assert len(result) == 1


class TestRecalculation:
    """Tests for recalculate_current_week and invalidation"""

    def test_recalculate_updates_existing_snapshot(self, service, db_session, user_id):
        """4/5 completions should overwrite a stale 60 with 80 in place"""
        habit = create_habit(db_session, user_id, "Exercise", 5)
        existing = store_snapshot(db_session, user_id, MONDAY, 60)
        add_completions(db_session, habit, week_days(MONDAY, 4))

        result = service.recalculate_current_week(user_id)

        assert result.id == existing.id
        assert result.score == 80
        assert result.completed_habits == 4
        assert result.total_habits == 5
        assert db_session.query(WeeklyScore).count() == 1

    def test_current_week_reflects_recalculation(self, service, db_session, user_id):
        habit = create_habit(db_session, user_id, "Exercise", 5)
        assert service.get_current_week_score(user_id).score == 0

        add_completions(db_session, habit, week_days(MONDAY, 5))
        service.recalculate_current_week(user_id)

        assert service.get_current_week_score(user_id).score == 100

    def test_recalculation_is_idempotent(self, service, db_session, user_id):
        exercise = create_habit(db_session, user_id, "Exercise", 5)
        reading = create_habit(db_session, user_id, "Reading", 7)
        add_completions(db_session, exercise, week_days(MONDAY, 3))
        add_completions(db_session, reading, week_days(MONDAY, 6))

        first = service.recalculate_current_week(user_id)
        second = service.recalculate_current_week(user_id)

        assert (first.id, first.score, first.completed_habits, first.total_habits) == \
            (second.id, second.score, second.completed_habits, second.total_habits)
        assert first.week_start_date == second.week_start_date
        assert db_session.query(WeeklyScore).count() == 1

    def test_invalidation_evicts_without_recalculating(self, service, db_session, user_id, score_cache):
        create_habit(db_session, user_id, "Exercise", 5)
        service.get_current_week_score(user_id)

        with patch.object(service.score_repo, "upsert") as upsert:
            service.on_habits_or_completions_changed(user_id)

        upsert.assert_not_called()
        assert user_id not in score_cache

    def test_invalidation_for_uncached_user_is_noop(self, service, user_id):
        service.on_habits_or_completions_changed(user_id)

    def test_finalize_week_overwrites_existing_snapshot(self, service, db_session, user_id):
        habit = create_habit(db_session, user_id, "Exercise", 5)
        last_monday = MONDAY - timedelta(weeks=1)
        store_snapshot(db_session, user_id, last_monday, 20)
        add_completions(db_session, habit, week_days(last_monday, 5))

        result = service.finalize_week(user_id, last_monday + timedelta(days=6))

        assert result.week_start_date == last_monday
        assert result.score == 100
        assert service.get_week_score(user_id, last_monday).score == 100


class TestStoreFailures:
    """Tests that store failures propagate as DatabaseException"""

    def test_habit_store_failure_propagates(self, service, user_id, score_cache):
        error = OperationalError("SELECT", {}, Exception("database is locked"))
        with patch.object(service.habit_repo, "list_active", side_effect=error):
            with pytest.raises(DatabaseException) as exc_info:
                service.get_current_week_score(user_id)

        assert exc_info.value.operation == "list habits"
        assert user_id not in score_cache

    def test_upsert_failure_propagates(self, service, db_session, user_id):
        create_habit(db_session, user_id, "Exercise", 5)
        error = OperationalError("INSERT", {}, Exception("disk I/O error"))

        with patch.object(service.score_repo, "upsert", side_effect=error):
            with pytest.raises(DatabaseException):
                service.recalculate_current_week(user_id)
