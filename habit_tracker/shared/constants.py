"""
Application constants and environment-driven configuration.
"""
import os

# Database
DATABASE_URL = os.getenv("HABIT_TRACKER_DATABASE_URL", "sqlite:///./habits.db")

# API key for protecting endpoints (override in production)
API_KEY = os.getenv("HABIT_TRACKER_API_KEY", "your-secret-key-change-me")

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/habit-tracker"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
LOG_DIR = os.getenv("HABIT_TRACKER_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("HABIT_TRACKER_LOG_FILE", "app.log")

# CORS settings for the frontend
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "HABIT_TRACKER_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]

# Background snapshot jobs
SCHEDULER_ENABLED = os.getenv("HABIT_TRACKER_SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")
SNAPSHOT_TIME = os.getenv("HABIT_TRACKER_SNAPSHOT_TIME", "00:05")  # HH:MM

# Weeks
DAYS_PER_WEEK = 7

# Habits
MIN_FREQUENCY = 1
MAX_FREQUENCY = 21  # Completions per week
MAX_HABITS_PER_USER = 15

# Weekly score history
DEFAULT_HISTORY_WEEKS = 12
MAX_HISTORY_WEEKS = 52

# Score cache
SCORE_CACHE_STRIPES = 16
