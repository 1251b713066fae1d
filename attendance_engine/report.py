"""Batch summarization of an event log."""

from __future__ import annotations

import logging
from collections import defaultdict

from attendance_engine.calculator import compute_summary
from attendance_engine.errors import MalformedTime
from attendance_engine.schema import AttendanceEvent, DailySummary

logger = logging.getLogger(__name__)


def summarize_log(events: list[AttendanceEvent], skip_malformed: bool = False) -> list[DailySummary]:
    """Compute one summary per (date, employee_key), ordered by date then key.

    With ``skip_malformed`` an employee-day containing an unparseable time is
    logged and left out instead of aborting the whole batch.
    """

    by_key: dict[tuple, list[AttendanceEvent]] = defaultdict(list)
    for event in events:
        by_key[(event.date, event.employee_key)].append(event)

    summaries = []
    for (day, employee_key), day_events in sorted(by_key.items(), key=lambda item: item[0]):
        try:
            summaries.append(compute_summary(day_events, date=day, employee_key=employee_key))
        except MalformedTime:
            if not skip_malformed:
                raise
            logger.warning("Skipping %s on %s: malformed time", employee_key, day)
    return summaries
