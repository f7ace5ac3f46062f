"""Tests for normalizing loose task records."""

from datetime import datetime, timedelta, timezone

from salesboard.models import DEFAULT_TITLE
from salesboard.normalizer import (
    coerce_revenue,
    coerce_status,
    coerce_time_taken,
    normalize_tasks,
    parse_timestamp,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _ids():
    counter = iter(range(1, 1000))
    return lambda: f"gen-{next(counter)}"


SAMPLE_RECORDS = [
    {
        "id": "t1",
        "title": "  Call Acme  ",
        "revenue": 1200,
        "timeTaken": 4,
        "priority": "High",
        "status": "Done",
        "createdAt": "2024-04-01T09:00:00Z",
    },
    {"id": "t2", "title": "Email Globex", "revenue": "300.5", "timeTaken": "2"},
    {"title": "", "revenue": None, "timeTaken": -3},
]


def test_normalize_basic_structure():
    tasks = normalize_tasks(SAMPLE_RECORDS, now=NOW, id_factory=_ids())
    assert [t.id for t in tasks] == ["t1", "t2", "gen-1"]


def test_title_is_trimmed_or_defaulted():
    tasks = normalize_tasks(SAMPLE_RECORDS, now=NOW, id_factory=_ids())
    assert tasks[0].title == "Call Acme"
    assert tasks[2].title == DEFAULT_TITLE


def test_non_string_title_is_defaulted():
    tasks = normalize_tasks([{"id": "a", "title": 42}], now=NOW)
    assert tasks[0].title == DEFAULT_TITLE


def test_revenue_coercion():
    tasks = normalize_tasks(SAMPLE_RECORDS, now=NOW, id_factory=_ids())
    assert tasks[0].revenue == 1200
    assert tasks[1].revenue == 300.5
    assert tasks[2].revenue == 0


def test_non_numeric_revenue_becomes_zero():
    for bad in [None, "abc", "", "NaN", "Infinity", float("nan"), float("inf"), [], {}]:
        assert coerce_revenue(bad) == 0, bad


def test_non_positive_time_taken_becomes_one():
    for bad in [None, 0, -1, "-2.5", "0", "x", float("nan")]:
        assert coerce_time_taken(bad) == 1, bad
    assert coerce_time_taken(0.5) == 0.5
    assert coerce_time_taken("3") == 3


def test_defaults_for_priority_status_notes():
    tasks = normalize_tasks([{"id": "a", "title": "A"}], now=NOW)
    assert tasks[0].priority == "Low"
    assert tasks[0].status == "Todo"
    assert tasks[0].notes == ""
    assert tasks[0].completed_at is None


def test_status_spellings_are_canonicalized():
    assert coerce_status("in-progress") == "In Progress"
    assert coerce_status("DONE") == "Done"
    assert coerce_status("completed") == "Done"
    assert coerce_status("to do") == "Todo"
    assert coerce_status("Blocked") == "Blocked"
    assert coerce_status(None) == "Todo"


def test_created_at_is_parsed_when_supplied():
    tasks = normalize_tasks(SAMPLE_RECORDS, now=NOW, id_factory=_ids())
    assert tasks[0].created_at == datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc)


def test_created_at_synthesized_from_batch_position():
    records = [{"id": "a", "title": "A"}, {"id": "b", "title": "B"}]
    tasks = normalize_tasks(records, now=NOW)
    assert tasks[0].created_at == NOW - timedelta(days=1)
    assert tasks[1].created_at == NOW - timedelta(days=2)
    # earlier records look older
    assert tasks[0].created_at > tasks[1].created_at


def test_done_without_completion_gets_created_plus_one_day():
    tasks = normalize_tasks(SAMPLE_RECORDS, now=NOW, id_factory=_ids())
    assert tasks[0].completed_at == tasks[0].created_at + timedelta(days=1)
    assert tasks[1].completed_at is None


def test_explicit_completed_at_is_kept():
    records = [
        {
            "id": "a",
            "title": "A",
            "status": "Done",
            "createdAt": "2024-04-01T00:00:00Z",
            "completedAt": "2024-04-10T00:00:00Z",
        }
    ]
    tasks = normalize_tasks(records, now=NOW)
    assert tasks[0].completed_at == datetime(2024, 4, 10, tzinfo=timezone.utc)


def test_duplicate_ids_keep_first():
    records = [
        {"id": "dup", "title": "First", "revenue": 1},
        {"id": "dup", "title": "Second", "revenue": 2},
        {"id": "other", "title": "Third"},
    ]
    tasks = normalize_tasks(records, now=NOW)
    assert [t.title for t in tasks] == ["First", "Third"]


def test_numeric_ids_are_stringified():
    tasks = normalize_tasks([{"id": 7, "title": "A"}], now=NOW)
    assert tasks[0].id == "7"


def test_missing_ids_are_unique():
    tasks = normalize_tasks([{"title": "A"}, {"title": "B"}, {"title": "C"}], now=NOW)
    assert len({t.id for t in tasks}) == 3


def test_malformed_input_never_raises():
    assert normalize_tasks(None) == []
    assert normalize_tasks("not a list") == []
    assert normalize_tasks({"id": "a"}) == []
    tasks = normalize_tasks([None, 5, "x", ["nested"]], now=NOW, id_factory=_ids())
    assert len(tasks) == 4
    assert all(t.title == DEFAULT_TITLE and t.revenue == 0 for t in tasks)


def test_snake_case_keys_are_accepted():
    tasks = normalize_tasks([{"id": "a", "title": "A", "time_taken": 6}], now=NOW)
    assert tasks[0].time_taken == 6


def test_parse_timestamp_variants():
    assert parse_timestamp("2024-01-02T03:04:05Z") == datetime(
        2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc
    )
    assert parse_timestamp("2024-01-02") == datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert parse_timestamp(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp(True) is None


def test_huge_numbers_are_defaulted_not_raised():
    huge = 10**400
    records = [{"id": "a", "title": "A", "revenue": huge, "timeTaken": huge, "createdAt": huge}]
    tasks = normalize_tasks(records, now=NOW)
    assert tasks[0].revenue == 0
    assert tasks[0].time_taken == 1
    assert tasks[0].created_at == NOW - timedelta(days=1)


def test_huge_completed_at_falls_back_to_synthesized():
    records = [{"id": "a", "title": "A", "status": "Done", "completedAt": 10**400}]
    tasks = normalize_tasks(records, now=NOW)
    assert tasks[0].completed_at == tasks[0].created_at + timedelta(days=1)
    assert parse_timestamp(-(10**400)) is None
