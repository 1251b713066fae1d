from attendance_engine.keywords import classify, parse_keyword
from attendance_engine.schema import Keyword


def test_classify_is_case_insensitive_substring():
    assert classify("Good morning team #Daily-Task") is Keyword.TASK_START
    assert classify("#BREAKEND back at desk") is Keyword.BREAK_END
    assert classify("heading out #exit") is Keyword.EXIT


def test_classify_no_match():
    assert classify("just chatting") is None
    assert classify("") is None
    assert classify(None) is None


def test_classify_first_in_enum_order_wins():
    assert classify("#lunchend #entry") is Keyword.ENTRY
    assert classify("#breakend then #lunchstart") is Keyword.LUNCH_START


def test_parse_keyword_accepts_names_and_text():
    assert parse_keyword("BREAK_START") is Keyword.BREAK_START
    assert parse_keyword("task-end") is Keyword.TASK_END
    assert parse_keyword("#daily-report") is Keyword.TASK_END
    assert parse_keyword("nothing") is None
