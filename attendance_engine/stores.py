"""Event store and summary sink collaborators."""

from __future__ import annotations

import asyncio
import csv
import logging
import os
import tempfile
import threading
from datetime import date as date_type
from pathlib import Path
from typing import Optional, Protocol

from attendance_engine.errors import StoreUnavailable
from attendance_engine.formatting import format_duration, parse_duration
from attendance_engine.schema import ABSENT, AttendanceEvent, DailySummary, Keyword

logger = logging.getLogger(__name__)

RAW_LOG_HEADERS = ["Date", "Time", "Employee Name", "Employee Key", "Channel", "Keyword", "Event Id"]
SUMMARY_HEADERS = [
    "Date",
    "Employee Key",
    "Employee Name",
    "Entry Time",
    "Exit Time",
    "Total Presence",
    "Task Start",
    "Task End",
    "Task Window",
    "Lunch Duration",
    "Break Duration",
    "Break Count",
    "Net Working Hours",
]


class EventStore(Protocol):
    async def append(self, event: AttendanceEvent) -> None: ...

    async def query_by_day(self, date: date_type, employee_key: str) -> list[AttendanceEvent]: ...


class SummarySink(Protocol):
    async def upsert(self, summary: DailySummary) -> None: ...

    async def get(self, date: date_type, employee_key: str) -> Optional[DailySummary]: ...


class InMemoryEventStore:
    """Append-only event list kept in process memory."""

    def __init__(self):
        self.events: list[AttendanceEvent] = []

    async def append(self, event: AttendanceEvent) -> None:
        self.events.append(event)

    async def query_by_day(self, date: date_type, employee_key: str) -> list[AttendanceEvent]:
        return [e for e in self.events if e.date == date and e.employee_key == employee_key]


class InMemorySummarySink:
    """Summary rows keyed by (date, employee_key)."""

    def __init__(self):
        self.rows: dict[tuple, DailySummary] = {}
        self.writes = 0

    async def upsert(self, summary: DailySummary) -> None:
        self.rows[summary.key] = summary
        self.writes += 1

    async def get(self, date: date_type, employee_key: str) -> Optional[DailySummary]:
        return self.rows.get((date, employee_key))


def _ensure_header(path: Path, headers: list[str]) -> None:
    if path.exists() and path.stat().st_size:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as handle:
        csv.writer(handle).writerow(headers)
    logger.info("Created %s", path)


class CsvEventStore:
    """Raw event log persisted as an append-only CSV file."""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _append(self, event: AttendanceEvent) -> None:
        with self._lock:
            _ensure_header(self.path, RAW_LOG_HEADERS)
            with open(self.path, "a", newline="", encoding="utf-8") as handle:
                csv.writer(handle).writerow(
                    [
                        event.date.isoformat(),
                        event.time,
                        event.employee_name or "",
                        event.employee_key,
                        event.channel or "",
                        event.keyword.name,
                        event.event_id,
                    ]
                )

    def _query(self, date: date_type, employee_key: str) -> list[AttendanceEvent]:
        if not self.path.exists():
            return []
        wanted = date.isoformat()
        with self._lock, open(self.path, newline="", encoding="utf-8") as handle:
            return [
                AttendanceEvent(
                    date=date,
                    time=row["Time"],
                    employee_key=row["Employee Key"],
                    keyword=Keyword[row["Keyword"]],
                    event_id=row["Event Id"],
                    employee_name=row["Employee Name"] or None,
                    channel=row["Channel"] or None,
                )
                for row in csv.DictReader(handle)
                if row["Date"] == wanted and row["Employee Key"] == employee_key
            ]

    async def append(self, event: AttendanceEvent) -> None:
        try:
            await asyncio.to_thread(self._append, event)
        except OSError as exc:
            raise StoreUnavailable(f"cannot append to {self.path}: {exc}") from exc

    async def query_by_day(self, date: date_type, employee_key: str) -> list[AttendanceEvent]:
        try:
            return await asyncio.to_thread(self._query, date, employee_key)
        except (OSError, KeyError, csv.Error) as exc:
            raise StoreUnavailable(f"cannot read {self.path}: {exc}") from exc


def _summary_to_csv(summary: DailySummary) -> list[str]:
    return [
        summary.date.isoformat(),
        summary.employee_key,
        summary.employee_name or "",
        summary.entry_time,
        summary.exit_time,
        format_duration(summary.total_presence_minutes),
        summary.task_start_time,
        summary.task_end_time,
        format_duration(summary.task_minutes),
        format_duration(summary.lunch_minutes),
        format_duration(summary.break_minutes),
        str(summary.break_count),
        format_duration(summary.net_working_minutes),
    ]


def _summary_from_csv(row: list[str]) -> DailySummary:
    values = dict(zip(SUMMARY_HEADERS, row))
    return DailySummary(
        date=date_type.fromisoformat(values["Date"]),
        employee_key=values["Employee Key"],
        employee_name=values["Employee Name"] or None,
        entry_time=values["Entry Time"] or ABSENT,
        exit_time=values["Exit Time"] or ABSENT,
        total_presence_minutes=parse_duration(values["Total Presence"]),
        task_start_time=values["Task Start"] or ABSENT,
        task_end_time=values["Task End"] or ABSENT,
        task_minutes=parse_duration(values["Task Window"]),
        lunch_minutes=parse_duration(values["Lunch Duration"]),
        break_minutes=parse_duration(values["Break Duration"]),
        break_count=int(values["Break Count"]),
        net_working_minutes=parse_duration(values["Net Working Hours"]),
    )


class CsvSummarySink:
    """Daily summary table persisted as CSV, one row per (date, employee)."""

    def __init__(self, path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_rows(self) -> list[list[str]]:
        if not self.path.exists():
            return []
        with open(self.path, newline="", encoding="utf-8") as handle:
            rows = list(csv.reader(handle))
        return [row for row in rows[1:] if row]

    def _upsert(self, summary: DailySummary) -> None:
        record = _summary_to_csv(summary)
        with self._lock:
            rows = self._read_rows()
            for index, row in enumerate(rows):
                if row[:2] == record[:2]:
                    rows[index] = record
                    break
            else:
                rows.append(record)

            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", newline="", encoding="utf-8") as handle:
                    writer = csv.writer(handle)
                    writer.writerow(SUMMARY_HEADERS)
                    writer.writerows(rows)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise

    def _get(self, date: date_type, employee_key: str) -> Optional[DailySummary]:
        with self._lock:
            rows = self._read_rows()
        for row in rows:
            if row[0] == date.isoformat() and row[1] == employee_key:
                return _summary_from_csv(row)
        return None

    async def upsert(self, summary: DailySummary) -> None:
        try:
            await asyncio.to_thread(self._upsert, summary)
        except OSError as exc:
            raise StoreUnavailable(f"cannot write {self.path}: {exc}") from exc

    async def get(self, date: date_type, employee_key: str) -> Optional[DailySummary]:
        try:
            return await asyncio.to_thread(self._get, date, employee_key)
        except (OSError, ValueError, csv.Error) as exc:
            raise StoreUnavailable(f"cannot read {self.path}: {exc}") from exc
