"""Daily attendance summary computation."""

from __future__ import annotations

import re
from datetime import date as date_type
from typing import Iterable, Optional

from attendance_engine.errors import MalformedTime
from attendance_engine.schema import ABSENT, AttendanceEvent, DailySummary, Keyword

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` or ``HH:MM:SS`` to minutes since midnight.

    Seconds are validated and then truncated.
    """

    match = _TIME_RE.match(str(value).strip()) if value is not None else None
    if not match:
        raise MalformedTime(value)
    hours, minutes, seconds = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise MalformedTime(value)
    return hours * 60 + minutes


def _span(start: Optional[int], end: Optional[int]) -> int:
    if start is None or end is None or end <= start:
        return 0
    return end - start


def pair_breaks(starts: Iterable[int], ends: Iterable[int]) -> list[tuple[int, int]]:
    """Greedily match each break start to the earliest unused later end."""

    remaining = sorted(ends)
    pairs = []
    for start in sorted(starts):
        for index, end in enumerate(remaining):
            if end > start:
                pairs.append((start, end))
                del remaining[index]
                break
    return pairs


def compute_summary(
    events: Iterable[AttendanceEvent],
    date: Optional[date_type] = None,
    employee_key: Optional[str] = None,
    employee_name: Optional[str] = None,
) -> DailySummary:
    """Recompute the full daily summary from one employee-day of events."""

    timed = [(time_to_minutes(event.time), event) for event in events]
    timed.sort(key=lambda item: item[0])

    if timed:
        first = timed[0][1]
        date = date if date is not None else first.date
        employee_key = employee_key if employee_key is not None else first.employee_key
        if employee_name is None:
            employee_name = next((e.employee_name for _, e in reversed(timed) if e.employee_name), None)

    by_kind: dict[Keyword, list[tuple[int, str]]] = {keyword: [] for keyword in Keyword}
    for minutes, event in timed:
        by_kind[event.keyword].append((minutes, event.time))

    def first(keyword: Keyword):
        found = by_kind[keyword]
        return found[0] if found else (None, ABSENT)

    def last(keyword: Keyword):
        found = by_kind[keyword]
        return found[-1] if found else (None, ABSENT)

    entry_minutes, entry_time = first(Keyword.ENTRY)
    exit_minutes, exit_time = last(Keyword.EXIT)
    task_start_minutes, task_start_time = first(Keyword.TASK_START)
    task_end_minutes, task_end_time = last(Keyword.TASK_END)
    lunch_start, _ = first(Keyword.LUNCH_START)
    lunch_end, _ = first(Keyword.LUNCH_END)

    breaks = pair_breaks(
        (minutes for minutes, _ in by_kind[Keyword.BREAK_START]),
        (minutes for minutes, _ in by_kind[Keyword.BREAK_END]),
    )
    break_minutes = sum(end - start for start, end in breaks)

    task_minutes = _span(task_start_minutes, task_end_minutes)
    lunch_minutes = _span(lunch_start, lunch_end)

    return DailySummary(
        date=date,
        employee_key=employee_key,
        employee_name=employee_name,
        entry_time=entry_time,
        exit_time=exit_time,
        total_presence_minutes=_span(entry_minutes, exit_minutes),
        task_start_time=task_start_time,
        task_end_time=task_end_time,
        task_minutes=task_minutes,
        lunch_minutes=lunch_minutes,
        break_minutes=break_minutes,
        break_count=len(breaks),
        net_working_minutes=max(0, task_minutes - lunch_minutes - break_minutes),
    )
