import asyncio
import csv
import time
from datetime import date

import pytest

from attendance_engine.config import Settings
from attendance_engine.errors import MalformedTime, StoreTimeout, StoreUnavailable
from attendance_engine.schema import AttendanceEvent, DailySummary, Keyword
from attendance_engine.service import AttendanceService, LogOutcome
from attendance_engine.stores import CsvEventStore, InMemoryEventStore, InMemorySummarySink

DAY = date(2025, 3, 3)


def make_service(store=None, sink=None, **settings):
    return AttendanceService(
        store or InMemoryEventStore(),
        sink or InMemorySummarySink(),
        settings=Settings(**settings),
    )


class FailingStore(InMemoryEventStore):
    async def append(self, event):
        raise OSError("disk gone")


class SlowSink(InMemorySummarySink):
    async def upsert(self, summary):
        await asyncio.sleep(1)
        await super().upsert(summary)


class SlowCsvEventStore(CsvEventStore):
    def _append(self, event):
        time.sleep(0.2)
        super()._append(event)


class RecordingStore(InMemoryEventStore):
    """Yields during reads so concurrent pipelines can interleave."""

    async def query_by_day(self, date, employee_key):
        snapshot = await super().query_by_day(date, employee_key)
        await asyncio.sleep(0.01)
        return snapshot


def test_redelivery_is_stored_once():
    service = make_service()
    event = AttendanceEvent(DAY, "09:00", "asha", Keyword.ENTRY, "1.1")

    async def scenario():
        first = await service.log_event(event)
        second = await service.log_event(event)
        return first, second

    assert asyncio.run(scenario()) == (LogOutcome.RECORDED, LogOutcome.DUPLICATE)
    assert len(service.store.events) == 1
    assert service.sink.writes == 1
    assert service.sink.rows[(DAY, "asha")].entry_time == "09:00"


def test_handle_message_classifies_and_recomputes():
    service = make_service()

    async def scenario():
        outcomes = [
            await service.handle_message("hi #daily-task", "1", DAY, "09:15", "asha", "Asha"),
            await service.handle_message("#breakstart", "2", DAY, "13:00", "asha"),
            await service.handle_message("lunch soon?", "3", DAY, "13:05", "asha"),
            await service.handle_message("#breakend", "4", DAY, "13:15", "asha"),
            await service.handle_message("#daily-report", "5", DAY, "18:00", "asha"),
        ]
        return outcomes, await service.get_summary(DAY, "asha")

    outcomes, summary = asyncio.run(scenario())
    assert outcomes[2] is LogOutcome.IGNORED
    assert outcomes.count(LogOutcome.RECORDED) == 4
    assert summary.employee_name == "Asha"
    assert summary.break_minutes == 15
    assert summary.net_working_minutes == 510


def test_same_message_id_with_two_keywords_counts_both():
    service = make_service()

    async def scenario():
        await service.log_event(AttendanceEvent(DAY, "12:00", "ben", Keyword.LUNCH_START, "9"))
        return await service.log_event(AttendanceEvent(DAY, "12:00", "ben", Keyword.BREAK_START, "9"))

    assert asyncio.run(scenario()) is LogOutcome.RECORDED
    assert len(service.store.events) == 2


def test_recompute_without_events_writes_nothing():
    service = make_service()
    summary = asyncio.run(service.recompute_summary(DAY, "nobody"))
    assert summary == DailySummary(date=DAY, employee_key="nobody")
    assert service.sink.writes == 0


def test_store_failure_surfaces_and_allows_retry():
    service = make_service(store=FailingStore())
    event = AttendanceEvent(DAY, "09:00", "asha", Keyword.ENTRY, "1")
    with pytest.raises(StoreUnavailable):
        asyncio.run(service.log_event(event))
    assert service.sink.writes == 0
    assert service.deduplicator.check_and_mark("1", Keyword.ENTRY) is False


def test_sink_timeout_raises_store_unavailable():
    service = make_service(sink=SlowSink(), store_timeout_seconds=0.05)
    event = AttendanceEvent(DAY, "09:00", "asha", Keyword.ENTRY, "1")
    with pytest.raises(StoreUnavailable, match="timed out"):
        asyncio.run(service.log_event(event))
    assert service.sink.rows == {}


def test_malformed_time_is_rejected_and_later_events_still_count():
    service = make_service()

    async def scenario():
        await service.log_event(AttendanceEvent(DAY, "09:00", "asha", Keyword.TASK_START, "1"))
        with pytest.raises(MalformedTime):
            await service.log_event(AttendanceEvent(DAY, "nine", "asha", Keyword.BREAK_START, "2"))
        return await service.log_event(AttendanceEvent(DAY, "17:00", "asha", Keyword.TASK_END, "3"))

    assert asyncio.run(scenario()) is LogOutcome.RECORDED
    assert len(service.store.events) == 2
    summary = service.sink.rows[(DAY, "asha")]
    assert summary.task_end_time == "17:00"
    assert summary.net_working_minutes == 480
    assert service.deduplicator.check_and_mark("2", Keyword.BREAK_START) is False


def test_append_timeout_keeps_dedup_key(tmp_path):
    path = tmp_path / "raw_logs.csv"
    service = make_service(store=SlowCsvEventStore(path), store_timeout_seconds=0.05)
    event = AttendanceEvent(DAY, "09:00", "asha", Keyword.ENTRY, "1.1")

    async def scenario():
        with pytest.raises(StoreTimeout):
            await service.log_event(event)
        return await service.log_event(event)

    assert asyncio.run(scenario()) is LogOutcome.DUPLICATE
    with open(path, newline="", encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert len(rows) == 2
    assert rows[1][-1] == "1.1"


def test_concurrent_events_for_same_key_end_with_full_summary():
    service = make_service(store=RecordingStore())
    events = [
        AttendanceEvent(DAY, "09:00", "asha", Keyword.TASK_START, "1"),
        AttendanceEvent(DAY, "10:00", "asha", Keyword.BREAK_START, "2"),
        AttendanceEvent(DAY, "10:30", "asha", Keyword.BREAK_END, "3"),
        AttendanceEvent(DAY, "17:00", "asha", Keyword.TASK_END, "4"),
    ]

    async def scenario():
        await asyncio.gather(*(service.log_event(event) for event in events))

    asyncio.run(scenario())
    summary = service.sink.rows[(DAY, "asha")]
    assert summary.break_count == 1
    assert summary.net_working_minutes == 450
    assert len(service.locks) == 0


def test_classify_and_is_duplicate_passthrough():
    service = make_service()
    assert service.classify("#EXIT now") is Keyword.EXIT
    assert service.is_duplicate("z", Keyword.EXIT) is False
    assert service.is_duplicate("z", Keyword.EXIT) is True
