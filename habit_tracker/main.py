from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from pathlib import Path

from habit_tracker.core.database import engine, Base
from habit_tracker.exceptions import (
    HabitNotFoundException, HabitLimitExceededException, DatabaseException
)
from habit_tracker.modules.habits import models as habit_models  # noqa: F401  (register tables)
from habit_tracker.modules.scores import models as score_models  # noqa: F401  (register tables)
from habit_tracker.modules.habits.routes import router as habits_router
from habit_tracker.modules.scores.routes import router as progress_router
from habit_tracker.modules.scores.scheduler import start_scheduler, stop_scheduler
from habit_tracker.shared.constants import (
    LOG_DIR, LOG_FILE, DEFAULT_LOG_DIRECTORY_DEV, CORS_ALLOWED_ORIGINS, SCHEDULER_ENABLED
)

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    Path(DEFAULT_LOG_DIRECTORY_DEV).mkdir(parents=True, exist_ok=True)
    log_path = Path(DEFAULT_LOG_DIRECTORY_DEV) / LOG_FILE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()  # Also log to console
    ]
)

logger = logging.getLogger("habit_tracker")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Habit Tracker API",
    description="Habit tracking with weekly completion scores",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(habits_router)
app.include_router(progress_router)


@app.exception_handler(HabitNotFoundException)
async def habit_not_found_handler(request: Request, exc: HabitNotFoundException):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(HabitLimitExceededException)
async def habit_limit_handler(request: Request, exc: HabitLimitExceededException):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(DatabaseException)
async def database_error_handler(request: Request, exc: DatabaseException):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable"}
    )


# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info(f"Habit Tracker API started. Logging to: {log_path}")
    if SCHEDULER_ENABLED:
        start_scheduler()


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Habit Tracker API")
    stop_scheduler()


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "Habit Tracker API", "status": "active"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("habit_tracker.main:app", host="0.0.0.0", port=8000, reload=False)
