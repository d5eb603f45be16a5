"""
Habit HTTP routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from habit_tracker.core.database import get_db
from habit_tracker.core.security import verify_api_key
from habit_tracker.modules.scores.cache import ScoreCache, get_score_cache
from habit_tracker.shared.date_utils import get_today, get_week_range
from .schemas import HabitCreate, HabitUpdate, HabitResponse, HabitCompletionResponse
from .service import HabitService

router = APIRouter(prefix="/api/users/{user_id}/habits", tags=["habits"])


@router.get("", response_model=List[HabitResponse])
def get_habits(
    user_id: int,
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Get all active habits."""
    return HabitService(db, cache).get_habits(user_id)


@router.post("", response_model=HabitResponse, status_code=status.HTTP_201_CREATED)
def create_habit(
    user_id: int,
    habit: HabitCreate,
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Create a new habit."""
    return HabitService(db, cache).create_habit(user_id, habit)


@router.put("/{habit_id}", response_model=HabitResponse)
def update_habit(
    user_id: int,
    habit_id: int,
    habit_update: HabitUpdate,
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Update a habit."""
    return HabitService(db, cache).update_habit(user_id, habit_id, habit_update)


@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_habit(
    user_id: int,
    habit_id: int,
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Delete a habit and its completions."""
    HabitService(db, cache).delete_habit(user_id, habit_id)


@router.get("/{habit_id}/completions", response_model=List[HabitCompletionResponse])
def get_completions(
    user_id: int,
    habit_id: int,
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Get completions in a date range (defaults to the current week)."""
    week_start, week_end = get_week_range(get_today())
    return HabitService(db, cache).get_completions(
        user_id, habit_id, start or week_start, end or week_end
    )


@router.post("/{habit_id}/toggle", response_model=HabitCompletionResponse)
def toggle_completion(
    user_id: int,
    habit_id: int,
    target_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Toggle completion of a habit for a date (defaults to today)."""
    return HabitService(db, cache).toggle_completion(
        user_id, habit_id, target_date or get_today()
    )
