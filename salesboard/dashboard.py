"""The read/command surface a dashboard view binds to."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from typing import Any, Protocol

from .config import Settings
from .models import DerivedTask, Metrics, Task
from .normalizer import normalize_tasks
from .seed import generate_sales_tasks
from .store import TaskStore

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load tasks"


class RecordSource(Protocol):
    def fetch_records(self) -> list[Any] | None: ...


class Dashboard:
    """Binds a TaskStore to its initial data source.

    Views read ``tasks``, ``loading``, ``error``, ``derived_sorted``,
    ``metrics`` and ``last_deleted``, and call the command methods. The
    initial load runs at most once per instance.
    """

    def __init__(
        self,
        store: TaskStore,
        source: RecordSource | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.source = source
        self.settings = settings or Settings()
        self._rng = rng
        self.loading = True
        self.error: str | None = None
        self._load_started = False

    # ------------------------------------------------------------------
    # Initial load
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Populate the store from the source, or from generated data."""
        if self._load_started:
            self.loading = False
            return
        self._load_started = True
        self.loading = True
        try:
            self.store.replace_all(self._initial_tasks())
            logger.info("Loaded %d task(s)", len(self.store))
        except Exception as e:
            self.error = str(e) or LOAD_FAILED_MESSAGE
            self.store.replace_all([])
            logger.error("Failed to load tasks: %s", self.error)
        finally:
            self.loading = False

    def _initial_tasks(self) -> list[Task]:
        records = self.source.fetch_records() if self.source is not None else None
        tasks = normalize_tasks(records) if records is not None else []
        if tasks:
            return tasks
        logger.warning(
            "No usable task data; generating %d demo task(s)", self.settings.seed_count
        )
        return generate_sales_tasks(self.settings.seed_count, rng=self._rng)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self.store.tasks

    @property
    def derived_sorted(self) -> list[DerivedTask]:
        return self.store.derived_sorted

    @property
    def metrics(self) -> Metrics:
        return self.store.metrics

    @property
    def last_deleted(self) -> Task | None:
        return self.store.last_deleted

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_task(self, record: Mapping[str, Any]) -> Task:
        return self.store.add(record)

    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Task | None:
        return self.store.update(task_id, patch)

    def delete_task(self, task_id: str) -> Task | None:
        return self.store.delete(task_id)

    def undo_delete(self) -> Task | None:
        return self.store.undo_delete()

    def clear_last_deleted(self) -> None:
        self.store.clear_last_deleted()
