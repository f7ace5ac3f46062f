"""Tests for the dashboard's initial load and command surface.

The feed client is mocked; no network calls are made.
"""

from __future__ import annotations

import random
from unittest.mock import MagicMock

import httpx

from salesboard.config import Settings
from salesboard.dashboard import LOAD_FAILED_MESSAGE, Dashboard
from salesboard.feed import TaskFeedClient
from salesboard.store import TaskStore


def _mock_source(records=None) -> MagicMock:
    source = MagicMock(spec=TaskFeedClient)
    source.fetch_records.return_value = records
    return source


def _make_dashboard(source=None, seed_count=5) -> Dashboard:
    return Dashboard(
        TaskStore(),
        source=source,
        settings=Settings(seed_count=seed_count),
        rng=random.Random(1),
    )


# ===================================================================
# load()
# ===================================================================


class TestLoad:
    def test_loads_normalized_records(self):
        source = _mock_source([
            {"id": "a", "title": "A", "revenue": 100, "timeTaken": 2, "status": "Done"},
            {"id": "b", "title": "B", "revenue": 50, "timeTaken": 5},
        ])
        dash = _make_dashboard(source)
        assert dash.loading is True

        dash.load()

        assert dash.loading is False
        assert dash.error is None
        assert [t.id for t in dash.tasks] == ["a", "b"]
        assert dash.metrics.total_revenue == 100

    def test_missing_payload_falls_back_to_generated(self):
        dash = _make_dashboard(_mock_source(None), seed_count=7)
        dash.load()
        assert len(dash.tasks) == 7
        assert dash.error is None

    def test_empty_payload_falls_back_to_generated(self):
        dash = _make_dashboard(_mock_source([]), seed_count=3)
        dash.load()
        assert len(dash.tasks) == 3

    def test_no_source_uses_generated(self):
        dash = _make_dashboard(None, seed_count=4)
        dash.load()
        assert len(dash.tasks) == 4
        assert dash.loading is False

    def test_unexpected_error_is_surfaced(self):
        source = _mock_source()
        source.fetch_records.side_effect = httpx.ConnectError("connection refused")
        dash = _make_dashboard(source)

        dash.load()

        assert dash.error == "connection refused"
        assert dash.tasks == ()
        assert dash.loading is False
        assert dash.metrics.performance_grade == "Needs Improvement"

    def test_error_without_message_gets_default(self):
        source = _mock_source()
        source.fetch_records.side_effect = RuntimeError()
        dash = _make_dashboard(source)
        dash.load()
        assert dash.error == LOAD_FAILED_MESSAGE

    def test_load_runs_once(self):
        source = _mock_source([{"id": "a", "title": "A"}])
        dash = _make_dashboard(source)

        dash.load()
        dash.add_task({"title": "Added later"})
        dash.load()

        source.fetch_records.assert_called_once()
        assert len(dash.tasks) == 2
        assert dash.loading is False


# ===================================================================
# Commands
# ===================================================================


def test_commands_delegate_to_store():
    dash = _make_dashboard(_mock_source([{"id": "a", "title": "A", "revenue": 10}]))
    dash.load()

    added = dash.add_task({"title": "B", "revenue": 40, "timeTaken": 2})
    dash.update_task(added.id, {"status": "Done"})
    assert dash.metrics.total_revenue == 40

    dash.delete_task("a")
    assert dash.last_deleted.id == "a"
    assert [d.id for d in dash.derived_sorted] == [added.id]

    dash.undo_delete()
    assert dash.last_deleted is None
    assert {t.id for t in dash.tasks} == {"a", added.id}

    dash.delete_task(added.id)
    dash.clear_last_deleted()
    assert dash.last_deleted is None
    assert dash.undo_delete() is None
