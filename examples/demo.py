"""Demo script for attendance-engine."""

import asyncio
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from attendance_engine.adapters.csv_adapter import parse
from attendance_engine.report import summarize_log
from attendance_engine.service import AttendanceService
from attendance_engine.stores import InMemoryEventStore, InMemorySummarySink


async def replay(events) -> AttendanceService:
    service = AttendanceService(InMemoryEventStore(), InMemorySummarySink())
    for event in events + events[:3]:
        outcome = await service.log_event(event)
        print(f"{event.event_id} {event.keyword.name}: {outcome.value}")
    return service


def main() -> None:
    events = parse(str(Path(__file__).with_name("sample_events.csv")))
    for summary in summarize_log(events):
        print(summary.to_row())

    service = asyncio.run(replay(events))
    print("Stored summary:", service.sink.rows[(date(2025, 3, 3), "asha")].to_row())


if __name__ == "__main__":
    main()
