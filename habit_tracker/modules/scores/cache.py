"""
Process-local cache of current-week scores keyed by user id.
No TTL: entries live until evicted by a habit/completion change or a
forced recalculation.
"""
import threading
from datetime import date
from typing import Dict, List, Optional

from habit_tracker.shared.constants import SCORE_CACHE_STRIPES
from .schemas import WeeklyScoreResponse


class ScoreCache:
    """
    Thread-safe map of user id -> current-week score.

    Keys are spread over a fixed set of locks so that requests for
    different users do not contend on a single lock. Single dict operations
    are atomic; a stripe lock makes the check-then-drop in get() atomic per key.
    """

    def __init__(self, stripes: int = SCORE_CACHE_STRIPES):
        self._entries: Dict[int, WeeklyScoreResponse] = {}
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(max(1, stripes))]

    def _lock_for(self, user_id: int) -> threading.Lock:
        return self._locks[hash(user_id) % len(self._locks)]

    def get(self, user_id: int, week_start: Optional[date] = None) -> Optional[WeeklyScoreResponse]:
        """
        Get the cached score for a user.

        If week_start is given, an entry for any other week counts as a miss
        and is dropped.
        """
        with self._lock_for(user_id):
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            if week_start is not None and entry.week_start_date != week_start:
                self._entries.pop(user_id, None)
                return None
            return entry

    def put(self, user_id: int, score: WeeklyScoreResponse) -> None:
        """Store a score, replacing any previous entry for the user"""
        with self._lock_for(user_id):
            self._entries[user_id] = score

    def evict(self, user_id: int) -> Optional[WeeklyScoreResponse]:
        """Remove and return the user's entry"""
        with self._lock_for(user_id):
            return self._entries.pop(user_id, None)

    def clear(self) -> None:
        """Drop all entries"""
        for lock in self._locks:
            lock.acquire()
        try:
            self._entries.clear()
        finally:
            for lock in reversed(self._locks):
                lock.release()

    def __contains__(self, user_id: int) -> bool:
        with self._lock_for(user_id):
            return user_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Shared by every request in this process
score_cache = ScoreCache()


def get_score_cache() -> ScoreCache:
    """FastAPI dependency returning the process-wide score cache"""
    return score_cache
