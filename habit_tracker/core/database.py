"""
Database engine and session factory.
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from habit_tracker.exceptions import DatabaseException
from habit_tracker.shared.constants import DATABASE_URL

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def run_store_call(db: Session, log: logging.Logger, operation: str, func, *args):
    """
    Run a store call on the session.

    SQLAlchemy failures roll the session back and are re-raised as
    DatabaseException so callers see one error type for storage outages.
    """
    try:
        return func(*args)
    except SQLAlchemyError as e:
        db.rollback()
        log.error(f"Store {operation} failed: {e}")
        raise DatabaseException(operation, str(e)) from e
