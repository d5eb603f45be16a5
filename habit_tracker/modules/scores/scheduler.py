"""
Background scheduler for weekly score snapshots.
Handles:
- Daily snapshot of the current week for every user with active habits
- Monday close-out of the previous week
"""
import logging
from datetime import timedelta
from typing import Callable, Optional
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from habit_tracker.core.database import SessionLocal
from habit_tracker.shared.constants import SNAPSHOT_TIME
from habit_tracker.shared.date_utils import get_today
from .service import ScoreService

logger = logging.getLogger("habit_tracker.scheduler")

# Create scheduler instance
scheduler = BackgroundScheduler()


def _parse_time(time_str: Optional[str]) -> tuple[int, int]:
    """
    Parse "HH:MM" into (hour, minute).
    Examples: '00:05' -> (0, 5), '0005' -> (0, 5), None -> (0, 5)
    """
    t_str = (time_str or "00:05").replace(":", "").zfill(4)
    return int(t_str[:2]), int(t_str[2:])


def _for_each_user(job_name: str, action: Callable[[ScoreService, int], object],
                   session_factory=SessionLocal) -> int:
    """
    Run action for every user with active habits.

    A failure for one user is logged and does not stop the others.

    Returns:
        Number of users processed successfully
    """
    db: Session = session_factory()
    processed = 0
    try:
        service = ScoreService(db)
        user_ids = service.list_scored_users()
        for user_id in user_ids:
            try:
                action(service, user_id)
                processed += 1
            except Exception as e:
                logger.error(f"[{job_name}] Failed for user {user_id}: {e}")
        logger.info(f"[{job_name}] Processed {processed}/{len(user_ids)} users")
    except Exception as e:
        logger.error(f"Scheduler Error ({job_name}): {e}")
    finally:
        db.close()
    return processed


def snapshot_current_week(session_factory=SessionLocal) -> int:
    """Job: recalculate and persist the current week for every user"""
    return _for_each_user(
        "SNAPSHOT_WEEK",
        lambda service, user_id: service.recalculate_current_week(user_id),
        session_factory
    )


def finalize_previous_week(session_factory=SessionLocal) -> int:
    """Job: overwrite last week's snapshots with their final values"""
    last_week = get_today() - timedelta(weeks=1)
    return _for_each_user(
        "FINALIZE_WEEK",
        lambda service, user_id: service.finalize_week(user_id, last_week),
        session_factory
    )


def start_scheduler():
    """Start the background scheduler"""
    if scheduler.running:
        return

    hour, minute = _parse_time(SNAPSHOT_TIME)

    scheduler.add_job(
        finalize_previous_week,
        CronTrigger(day_of_week='mon', hour=hour, minute=minute),
        id='finalize_previous_week',
        replace_existing=True
    )

    scheduler.add_job(
        snapshot_current_week,
        CronTrigger(hour=hour, minute=minute),
        id='snapshot_current_week',
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the background scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped")
