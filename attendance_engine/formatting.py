"""Duration display helpers."""

from __future__ import annotations


def format_duration(minutes: int) -> str:
    """Format a non-negative minute count as ``H:MM``."""

    if not minutes:
        return "0:00"
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}:{mins:02d}"


def parse_duration(value: str) -> int:
    """Inverse of :func:`format_duration`."""

    hours, _, mins = str(value).strip().partition(":")
    if not hours.isdigit() or len(mins) != 2 or not mins.isdigit():
        raise ValueError(f"invalid duration '{value}'")
    return int(hours) * 60 + int(mins)

