from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional

from habit_tracker.shared.constants import MIN_FREQUENCY, MAX_FREQUENCY


class HabitBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    frequency: int = Field(default=7, ge=MIN_FREQUENCY, le=MAX_FREQUENCY)  # Completions per week


class HabitCreate(HabitBase):
    pass


class HabitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    frequency: Optional[int] = Field(None, ge=MIN_FREQUENCY, le=MAX_FREQUENCY)
    is_active: Optional[bool] = None


class HabitResponse(HabitBase):
    id: int
    user_id: int
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class HabitCompletionResponse(BaseModel):
    id: int
    habit_id: int
    date: date
    completed: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
