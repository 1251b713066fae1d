"""JSON adapter for attendance event logs."""

from __future__ import annotations

import json
from datetime import date

from attendance_engine.calculator import time_to_minutes
from attendance_engine.keywords import parse_keyword
from attendance_engine.schema import AttendanceEvent

_REQUIRED_FIELDS = ("date", "time", "employee_key", "keyword", "event_id")


def _parse_item(item: dict, index: int) -> AttendanceEvent:
    if not isinstance(item, dict):
        raise ValueError(f"Item {index}: expected an object")

    missing = [field for field in _REQUIRED_FIELDS if not str(item.get(field) or "").strip()]
    if missing:
        raise ValueError(f"Item {index}: missing required fields {missing}")

    try:
        day = date.fromisoformat(str(item["date"]).strip())
    except ValueError as exc:
        raise ValueError(f"Item {index}: malformed date") from exc

    time = str(item["time"]).strip()
    try:
        time_to_minutes(time)
    except ValueError as exc:
        raise ValueError(f"Item {index}: malformed time '{time}'") from exc

    keyword = parse_keyword(str(item["keyword"]))
    if keyword is None:
        raise ValueError(f"Item {index}: unknown keyword '{item['keyword']}'")

    name_raw = item.get("employee_name")
    channel_raw = item.get("channel")

    return AttendanceEvent(
        date=day,
        time=time,
        employee_key=str(item["employee_key"]).strip(),
        keyword=keyword,
        event_id=str(item["event_id"]).strip(),
        employee_name=str(name_raw).strip() if name_raw else None,
        channel=str(channel_raw).strip() if channel_raw else None,
    )


def parse(file_path: str) -> list[AttendanceEvent]:
    """Parse JSON file into attendance events."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise ValueError("JSON payload must be a list of objects")

    return [_parse_item(item, i) for i, item in enumerate(payload, start=1)]
