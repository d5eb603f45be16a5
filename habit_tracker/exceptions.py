"""
Custom exceptions for the habit tracker application.
Provides specific exception types for better error handling and recovery.
"""


class HabitTrackerException(Exception):
    """Base exception for habit tracker application"""
    pass


class HabitNotFoundException(HabitTrackerException):
    """Raised when a habit is not found for the given user"""
    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Habit with ID {habit_id} not found")


class HabitLimitExceededException(HabitTrackerException):
    """Raised when a user already has the maximum number of active habits"""
    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Cannot create habit. Maximum of {limit} active habits allowed"
        )


class DatabaseException(HabitTrackerException):
    """Raised when database operations fail"""
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Database {operation} failed: {details}")
