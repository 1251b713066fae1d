"""Streamlit dashboard for attendance-engine."""

from __future__ import annotations

import tempfile
from collections import Counter
from pathlib import Path
from typing import Any

from attendance_engine.adapters import csv_adapter, json_adapter
from attendance_engine.report import summarize_log
from attendance_engine.schema import Keyword

DEMO_DATASET = "examples/sample_events.csv"


def _parse_events_from_path(file_path: str) -> list:
    suffix = Path(file_path).suffix.lower()
    if suffix == ".csv":
        return csv_adapter.parse(file_path)
    if suffix == ".json":
        return json_adapter.parse(file_path)
    raise ValueError("Unsupported file type. Please use .csv or .json")


def _parse_uploaded(uploaded_file) -> list:
    suffix = Path(uploaded_file.name).suffix.lower()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as handle:
        handle.write(uploaded_file.getbuffer())
        temp_path = handle.name
    return _parse_events_from_path(temp_path)


def _build_overview(events: list) -> dict[str, Any]:
    keyword_counts = Counter(event.keyword for event in events)
    return {
        "total_events": len(events),
        "employees": len({event.employee_key for event in events}),
        "days": len({event.date for event in events}),
        "keyword_counts": {keyword.token: keyword_counts.get(keyword, 0) for keyword in Keyword},
    }


def run_engine(events: list, employee: str | None = None, day: str | None = None) -> dict[str, Any]:
    """Summarize events and return a UI-friendly payload."""

    summaries = summarize_log(events, skip_malformed=True)
    if employee:
        summaries = [s for s in summaries if s.employee_key == employee]
    if day:
        summaries = [s for s in summaries if s.date.isoformat() == day]

    open_breaks = {}
    for summary in summaries:
        starts = sum(
            1
            for e in events
            if e.keyword is Keyword.BREAK_START and (e.date, e.employee_key) == summary.key
        )
        open_breaks[summary.key] = starts - summary.break_count

    return {
        "overview": _build_overview(events),
        "rows": [summary.to_row() for summary in summaries],
        "unmatched_breaks": sum(open_breaks.values()),
    }


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Attendance Engine", layout="wide")
    st.title("Attendance Engine — Daily Summaries")

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload event log", type=["csv", "json"])
        use_demo = st.checkbox("Load demo dataset", value=True)
        employee = st.text_input("Employee key filter", value="")
        day = st.text_input("Date filter (YYYY-MM-DD)", value="")
        run = st.button("Summarize", type="primary")

    if not run:
        st.info("Choose an event log in the sidebar and click **Summarize**.")
        return

    try:
        if use_demo:
            events = csv_adapter.parse(DEMO_DATASET)
            data_source = f"demo dataset ({DEMO_DATASET})"
        elif uploaded is not None:
            events = _parse_uploaded(uploaded)
            data_source = f"uploaded file ({uploaded.name})"
        else:
            st.error("Please upload a CSV/JSON file or enable 'Load demo dataset'.")
            return

        if not events:
            st.error("No events were found in the selected input.")
            return

        result = run_engine(events, employee=employee.strip() or None, day=day.strip() or None)

        st.success(f"Loaded {len(events)} events from {data_source}.")

        st.subheader("A) Event Overview")
        overview = result["overview"]
        c1, c2, c3 = st.columns(3)
        c1.metric("Total events", overview["total_events"])
        c2.metric("Employees", overview["employees"])
        c3.metric("Days", overview["days"])
        st.table([overview["keyword_counts"]])

        st.subheader("B) Daily Summary")
        if result["rows"]:
            st.dataframe(result["rows"], use_container_width=True)
        else:
            st.write("No rows match the current filters.")

        st.subheader("C) Open Breaks")
        st.metric("Open breaks", result["unmatched_breaks"])

    except ValueError as exc:
        st.error(f"Input error: {exc}")


if __name__ == "__main__":
    main()
