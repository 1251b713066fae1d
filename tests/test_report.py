from datetime import date

import pytest

from attendance_engine.errors import MalformedTime
from attendance_engine.report import summarize_log
from attendance_engine.schema import AttendanceEvent, Keyword


def sample_events():
    return [
        AttendanceEvent(date(2025, 3, 4), "09:00", "asha", Keyword.TASK_START, "1"),
        AttendanceEvent(date(2025, 3, 3), "09:00", "ben", Keyword.TASK_START, "2"),
        AttendanceEvent(date(2025, 3, 3), "17:00", "ben", Keyword.TASK_END, "3"),
        AttendanceEvent(date(2025, 3, 3), "10:00", "asha", Keyword.ENTRY, "4"),
        AttendanceEvent(date(2025, 3, 4), "17:30", "asha", Keyword.TASK_END, "5"),
    ]


def test_summarize_log_groups_by_day_and_employee():
    summaries = summarize_log(sample_events())
    assert [s.key for s in summaries] == [
        (date(2025, 3, 3), "asha"),
        (date(2025, 3, 3), "ben"),
        (date(2025, 3, 4), "asha"),
    ]
    assert summaries[1].net_working_minutes == 480
    assert summaries[2].net_working_minutes == 510


def test_summarize_log_malformed():
    events = sample_events() + [AttendanceEvent(date(2025, 3, 3), "??", "ben", Keyword.EXIT, "6")]
    with pytest.raises(MalformedTime):
        summarize_log(events)
    summaries = summarize_log(events, skip_malformed=True)
    assert [s.employee_key for s in summaries] == ["asha", "asha"]
