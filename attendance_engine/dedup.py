"""Replay protection for the incoming event stream."""

from __future__ import annotations

import logging
import threading

from attendance_engine.schema import Keyword

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10_000


class EventDeduplicator:
    """Bounded in-process record of seen ``(event_id, keyword)`` pairs.

    Keys are kept in insertion order. Once more than ``capacity`` keys are
    tracked, only the most recent ``capacity // 2`` survive. Nothing is
    persisted, so a restart forgets every key.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 2:
            raise ValueError("capacity must be at least 2")
        self.capacity = capacity
        self._seen: dict[tuple[str, str], None] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, item) -> bool:
        event_id, keyword = item
        return (str(event_id), _keyword_token(keyword)) in self._seen

    def check_and_mark(self, event_id: str, keyword) -> bool:
        """Return True if the pair was already seen, otherwise record it."""

        key = (str(event_id), _keyword_token(keyword))
        with self._lock:
            if key in self._seen:
                return True
            self._seen[key] = None
            if len(self._seen) > self.capacity:
                self._trim()
            return False

    def forget(self, event_id: str, keyword) -> None:
        """Drop a key so a failed delivery can be retried."""

        with self._lock:
            self._seen.pop((str(event_id), _keyword_token(keyword)), None)

    def _trim(self) -> None:
        keep = self.capacity // 2
        dropped = len(self._seen) - keep
        recent = list(self._seen)[-keep:]
        self._seen = dict.fromkeys(recent)
        logger.debug("Evicted %d oldest dedup keys", dropped)


def _keyword_token(keyword) -> str:
    if isinstance(keyword, Keyword):
        return keyword.token
    return str(keyword)
