from pydantic import BaseModel
from datetime import datetime, date


class ScoreCalculationResult(BaseModel):
    """Result of a weekly score calculation"""
    score: int
    completed_habits: int
    total_habits: int


class WeeklyScoreResponse(BaseModel):
    id: int
    week_start_date: date
    score: int
    completed_habits: int
    total_habits: int
    calculated_at: datetime

    class Config:
        from_attributes = True
