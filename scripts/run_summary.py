"""Compute daily attendance summaries from a CSV/JSON event log."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from attendance_engine.adapters import csv_adapter, json_adapter
from attendance_engine.config import configure_logging
from attendance_engine.report import summarize_log

logger = logging.getLogger("run_summary")


def _load_events(path: Path):
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return csv_adapter.parse(str(path))
    if suffix == ".json":
        return json_adapter.parse(str(path))
    raise ValueError("Unsupported input format, expected .csv or .json")


def main() -> None:
    parser = argparse.ArgumentParser(description="Summarize an attendance event log")
    parser.add_argument("--data", required=True, help="Path to CSV/JSON events file")
    parser.add_argument("--out", default="outputs/daily_summary.json", help="Where to write the JSON report")
    parser.add_argument("--skip-malformed", action="store_true", help="Skip employee-days with bad times")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    configure_logging(args.log_level)

    events = _load_events(Path(args.data))
    summaries = summarize_log(events, skip_malformed=args.skip_malformed)
    report = [summary.to_row() for summary in summaries]
    logger.info("Summarized %d events into %d rows", len(events), len(report))

    print(json.dumps(report, indent=2))

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(f"Saved daily summary to {out_path}")


if __name__ == "__main__":
    main()
