"""
Progress (weekly score) HTTP routes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import List

from habit_tracker.core.database import get_db
from habit_tracker.core.security import verify_api_key
from habit_tracker.shared.constants import DEFAULT_HISTORY_WEEKS, MAX_HISTORY_WEEKS
from .cache import ScoreCache, get_score_cache
from .schemas import WeeklyScoreResponse
from .service import ScoreService

router = APIRouter(prefix="/api/users/{user_id}/progress", tags=["progress"])


@router.get("/current-week", response_model=WeeklyScoreResponse)
def get_current_week_score(
    user_id: int,
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Get the score for the current week."""
    return ScoreService(db, cache).get_current_week_score(user_id)


@router.get("/week", response_model=WeeklyScoreResponse)
def get_week_score(
    user_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Get the score for the week containing the given date."""
    return ScoreService(db, cache).get_week_score(user_id, target_date)


@router.get("/weekly-scores", response_model=List[WeeklyScoreResponse])
def get_weekly_scores(
    user_id: int,
    weeks: int = Query(DEFAULT_HISTORY_WEEKS),
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Get persisted scores for the last N weeks, most recent first."""
    # Limit weeks to a reasonable range
    limited_weeks = min(max(weeks, 1), MAX_HISTORY_WEEKS)
    return ScoreService(db, cache).get_historical_scores(user_id, limited_weeks)


@router.post("/recalculate", response_model=WeeklyScoreResponse)
def recalculate_current_week(
    user_id: int,
    db: Session = Depends(get_db),
    cache: ScoreCache = Depends(get_score_cache),
    _: str = Depends(verify_api_key)
):
    """Force recalculation of the current week's score."""
    return ScoreService(db, cache).recalculate_current_week(user_id)
