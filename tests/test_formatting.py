import pytest

from attendance_engine.formatting import format_duration, parse_duration


def test_format_duration_examples():
    assert format_duration(0) == "0:00"
    assert format_duration(5) == "0:05"
    assert format_duration(540) == "9:00"
    assert format_duration(510) == "8:30"
    assert format_duration(1439) == "23:59"


def test_format_duration_parts_add_up():
    for minutes in (1, 59, 60, 61, 125, 600, 1000):
        hours, mins = format_duration(minutes).split(":")
        assert len(mins) == 2
        assert int(hours) * 60 + int(mins) == minutes


def test_parse_duration():
    assert parse_duration("8:30") == 510
    with pytest.raises(ValueError):
        parse_duration("8:3")
    with pytest.raises(ValueError):
        parse_duration("-")
