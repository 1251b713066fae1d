"""Core data schema for attendance events and daily summaries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from enum import Enum
from typing import Optional

from attendance_engine.formatting import format_duration

ABSENT = "-"


class Keyword(Enum):
    """Attendance event kinds, in classification order."""

    ENTRY = "#entry"
    EXIT = "#exit"
    TASK_START = "#daily-task"
    TASK_END = "#daily-report"
    LUNCH_START = "#lunchstart"
    LUNCH_END = "#lunchend"
    BREAK_START = "#breakstart"
    BREAK_END = "#breakend"

    @property
    def token(self) -> str:
        return self.value


@dataclass(frozen=True)
class AttendanceEvent:
    """One timestamped keyword occurrence for one employee on one day."""

    date: date_type
    time: str
    employee_key: str
    keyword: Keyword
    event_id: str
    employee_name: Optional[str] = None
    channel: Optional[str] = None


@dataclass
class DailySummary:
    """Derived attendance row for a single (date, employee_key)."""

    date: Optional[date_type]
    employee_key: Optional[str]
    employee_name: Optional[str] = None
    entry_time: str = ABSENT
    exit_time: str = ABSENT
    total_presence_minutes: int = 0
    task_start_time: str = ABSENT
    task_end_time: str = ABSENT
    task_minutes: int = 0
    lunch_minutes: int = 0
    break_minutes: int = 0
    break_count: int = 0
    net_working_minutes: int = 0

    @property
    def key(self) -> tuple:
        return (self.date, self.employee_key)

    def to_row(self) -> dict:
        """Render the summary as a display row with formatted durations."""

        return {
            "date": self.date.isoformat() if self.date else ABSENT,
            "employee_key": self.employee_key or ABSENT,
            "employee_name": self.employee_name or self.employee_key or ABSENT,
            "entry_time": self.entry_time,
            "exit_time": self.exit_time,
            "total_presence": format_duration(self.total_presence_minutes),
            "task_start_time": self.task_start_time,
            "task_end_time": self.task_end_time,
            "lunch_duration": format_duration(self.lunch_minutes),
            "break_duration": format_duration(self.break_minutes),
            "break_count": self.break_count,
            "net_working_hours": format_duration(self.net_working_minutes),
        }
