"""Event pipeline: classify, deduplicate, persist, recompute."""

from __future__ import annotations

import asyncio
import logging
from datetime import date as date_type
from enum import Enum
from typing import Optional

from attendance_engine.calculator import compute_summary, time_to_minutes
from attendance_engine.config import Settings
from attendance_engine.dedup import EventDeduplicator
from attendance_engine.errors import MalformedTime, StoreTimeout, StoreUnavailable
from attendance_engine.keywords import classify
from attendance_engine.locks import KeyedLock
from attendance_engine.schema import AttendanceEvent, DailySummary, Keyword
from attendance_engine.stores import EventStore, SummarySink

logger = logging.getLogger(__name__)


class LogOutcome(str, Enum):
    RECORDED = "recorded"
    DUPLICATE = "duplicate"
    IGNORED = "ignored"


class AttendanceService:
    """Coordinates the event store, summary sink and replay protection."""

    def __init__(
        self,
        store: EventStore,
        sink: SummarySink,
        deduplicator: Optional[EventDeduplicator] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or Settings()
        self.store = store
        self.sink = sink
        self.deduplicator = deduplicator or EventDeduplicator(settings.dedup_capacity)
        self.timeout = settings.store_timeout_seconds
        self.locks = KeyedLock()

    @staticmethod
    def classify(text: Optional[str]) -> Optional[Keyword]:
        return classify(text)

    def is_duplicate(self, event_id: str, keyword: Keyword) -> bool:
        return self.deduplicator.check_and_mark(event_id, keyword)

    async def _call(self, awaitable, action: str):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except StoreUnavailable:
            raise
        except asyncio.TimeoutError as exc:
            raise StoreTimeout(f"{action} timed out after {self.timeout}s") from exc
        except OSError as exc:
            raise StoreUnavailable(f"{action} failed: {exc}") from exc

    async def handle_message(
        self,
        text: Optional[str],
        event_id: str,
        date: date_type,
        time: str,
        employee_key: str,
        employee_name: Optional[str] = None,
        channel: Optional[str] = None,
    ) -> LogOutcome:
        """Classify a raw message and log it when it carries a keyword."""

        keyword = classify(text)
        if keyword is None:
            logger.info("No keyword in message %s, skipping", event_id)
            return LogOutcome.IGNORED

        event = AttendanceEvent(
            date=date,
            time=time,
            employee_key=employee_key,
            keyword=keyword,
            event_id=event_id,
            employee_name=employee_name,
            channel=channel,
        )
        return await self.log_event(event)

    async def log_event(self, event: AttendanceEvent) -> LogOutcome:
        """Store a new event and refresh the affected daily summary.

        Events with an unparseable time are rejected before they are stored.
        """

        try:
            time_to_minutes(event.time)
        except MalformedTime:
            logger.error("Rejecting event %s with malformed time %r", event.event_id, event.time)
            raise

        if self.is_duplicate(event.event_id, event.keyword):
            logger.info("Skipping duplicate event: %s-%s", event.event_id, event.keyword.token)
            return LogOutcome.DUPLICATE

        try:
            await self._call(self.store.append(event), "append")
        except StoreTimeout:
            logger.error("Append of event %s timed out, keeping its dedup key", event.event_id)
            raise
        except StoreUnavailable:
            self.deduplicator.forget(event.event_id, event.keyword)
            logger.error("Could not store event %s for %s", event.event_id, event.employee_key)
            raise

        await self.recompute_summary(event.date, event.employee_key)
        logger.info(
            "Logged: %s - %s at %s on %s",
            event.employee_name or event.employee_key,
            event.keyword.token,
            event.time,
            event.date,
        )
        return LogOutcome.RECORDED

    async def recompute_summary(self, date: date_type, employee_key: str) -> DailySummary:
        """Rebuild and upsert the summary row for one employee-day.

        An employee-day without events yields an empty summary that is not
        written to the sink.
        """

        async with self.locks.hold((date, employee_key)):
            events = await self._call(self.store.query_by_day(date, employee_key), "query")
            if not events:
                return DailySummary(date=date, employee_key=employee_key)

            try:
                summary = compute_summary(events, date=date, employee_key=employee_key)
            except MalformedTime:
                logger.exception("Cannot summarize %s on %s", employee_key, date)
                raise

            await self._call(self.sink.upsert(summary), "upsert")
            return summary

    async def get_summary(self, date: date_type, employee_key: str) -> Optional[DailySummary]:
        return await self._call(self.sink.get(date, employee_key), "get")
