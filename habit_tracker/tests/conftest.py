"""
Shared fixtures for habit tracker tests.
"""
import os
import tempfile

# Set test environment before application modules read it
os.environ.setdefault("HABIT_TRACKER_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("HABIT_TRACKER_API_KEY", "test-key")
os.environ.setdefault("HABIT_TRACKER_LOG_DIR", tempfile.mkdtemp(prefix="habit-tracker-logs-"))
os.environ.setdefault("HABIT_TRACKER_SCHEDULER_ENABLED", "false")

from datetime import date, timedelta
from typing import Iterable

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from habit_tracker.core.database import Base
from habit_tracker.modules.habits.models import Habit, HabitCompletion
from habit_tracker.modules.scores.cache import ScoreCache
from habit_tracker.modules.scores.models import WeeklyScore  # noqa: F401  (register table)
from habit_tracker.shared.date_utils import get_week_start


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def score_cache():
    """Fresh cache per test so no state leaks between tests"""
    return ScoreCache()


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def week_start(today):
    """Monday of the current week"""
    return get_week_start(today)


@pytest.fixture
def user_id():
    return 1


def create_habit(db, user_id: int, name: str, frequency: int, is_active: bool = True) -> Habit:
    """Create and persist a habit"""
    habit = Habit(user_id=user_id, name=name, frequency=frequency, is_active=is_active)
    db.add(habit)
    db.commit()
    db.refresh(habit)
    return habit


def add_completions(db, habit: Habit, dates: Iterable[date], completed: bool = True) -> None:
    """Persist one completion record per date for a habit"""
    for d in dates:
        db.add(HabitCompletion(habit_id=habit.id, date=d, completed=completed))
    db.commit()


def week_days(week_start: date, count: int) -> list:
    """First `count` days of the week starting at week_start"""
    return [week_start + timedelta(days=i) for i in range(count)]
