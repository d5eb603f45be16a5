"""
Weekly score repository - Data access layer for WeeklyScore snapshots.
"""
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError

from .models import WeeklyScore
from .schemas import ScoreCalculationResult


class WeeklyScoreRepository:
    """Repository for WeeklyScore data access"""

    @staticmethod
    def find(db: Session, user_id: int, week_start: date) -> Optional[WeeklyScore]:
        """Get the snapshot for a user and week"""
        return db.query(WeeklyScore).filter(
            and_(
                WeeklyScore.user_id == user_id,
                WeeklyScore.week_start_date == week_start
            )
        ).first()

    @staticmethod
    def list_since(db: Session, user_id: int, since: date) -> List[WeeklyScore]:
        """Get snapshots for a user with week_start_date >= since (unordered)"""
        return db.query(WeeklyScore).filter(
            and_(
                WeeklyScore.user_id == user_id,
                WeeklyScore.week_start_date >= since
            )
        ).all()

    @staticmethod
    def upsert(
        db: Session,
        user_id: int,
        week_start: date,
        result: ScoreCalculationResult
    ) -> WeeklyScore:
        """
        Create or overwrite the snapshot for (user_id, week_start) in one transaction.

        If a concurrent writer inserts the same week first, the unique
        constraint rejects our insert and the winner's row is updated instead.

        Returns:
            Persisted snapshot
        """
        snapshot = WeeklyScoreRepository.find(db, user_id, week_start)
        if snapshot is None:
            snapshot = WeeklyScore(user_id=user_id, week_start_date=week_start)
            WeeklyScoreRepository._apply(snapshot, result)
            db.add(snapshot)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                snapshot = WeeklyScoreRepository.find(db, user_id, week_start)
                if snapshot is None:
                    raise
                WeeklyScoreRepository._apply(snapshot, result)
                db.commit()
        else:
            WeeklyScoreRepository._apply(snapshot, result)
            db.commit()

        db.refresh(snapshot)
        return snapshot

    @staticmethod
    def _apply(snapshot: WeeklyScore, result: ScoreCalculationResult) -> None:
        snapshot.score = result.score
        snapshot.completed_habits = result.completed_habits
        snapshot.total_habits = result.total_habits
        snapshot.calculated_at = datetime.now()
