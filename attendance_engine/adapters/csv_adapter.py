"""CSV adapter for attendance event logs."""

from __future__ import annotations

import csv
from datetime import date

from attendance_engine.calculator import time_to_minutes
from attendance_engine.keywords import parse_keyword
from attendance_engine.schema import AttendanceEvent

_REQUIRED_FIELDS = ("date", "time", "employee_key", "keyword", "event_id")


def _parse_row(row: dict, row_number: int) -> AttendanceEvent:
    missing = [field for field in _REQUIRED_FIELDS if not (row.get(field) or "").strip()]
    if missing:
        raise ValueError(f"Row {row_number}: missing required fields {missing}")

    try:
        day = date.fromisoformat(row["date"].strip())
    except ValueError as exc:
        raise ValueError(f"Row {row_number}: malformed date") from exc

    time = row["time"].strip()
    try:
        time_to_minutes(time)
    except ValueError as exc:
        raise ValueError(f"Row {row_number}: malformed time '{time}'") from exc

    keyword = parse_keyword(row["keyword"])
    if keyword is None:
        raise ValueError(f"Row {row_number}: unknown keyword '{row['keyword'].strip()}'")

    name_raw = row.get("employee_name")
    channel_raw = row.get("channel")

    return AttendanceEvent(
        date=day,
        time=time,
        employee_key=row["employee_key"].strip(),
        keyword=keyword,
        event_id=row["event_id"].strip(),
        employee_name=name_raw.strip() if name_raw else None,
        channel=channel_raw.strip() if channel_raw else None,
    )


def parse(file_path: str) -> list[AttendanceEvent]:
    """Parse CSV file into a list of attendance events."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        events: list[AttendanceEvent] = []
        for row_number, row in enumerate(reader, start=2):
            events.append(_parse_row(row, row_number))
        return events
