"""In-memory task store with a one-level undo for deletes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from datetime import datetime, timezone
from typing import Any

from . import normalizer
from .logic import DEFAULT_THRESHOLDS, GradeThresholds, compute_metrics, derive_sorted
from .models import FIELD_ALIASES, STATUS_DONE, DerivedTask, Metrics, Task

logger = logging.getLogger(__name__)

# Patch coercion per Task attribute. There is no entry for id: a patch never
# renames a task.
_PATCH_COERCERS: dict[str, Callable[[Any], Any]] = {
    "title": normalizer.coerce_title,
    "revenue": normalizer.coerce_revenue,
    "time_taken": normalizer.coerce_time_taken,
    "priority": normalizer.coerce_priority,
    "status": normalizer.coerce_status,
    "notes": normalizer.coerce_notes,
    "created_at": normalizer.parse_timestamp,
    "completed_at": normalizer.parse_timestamp,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStore:
    """Owns the current task set for one dashboard session.

    Ids are unique at all times: any incoming task whose id is already taken
    gets a fresh one. Deleting a task moves it into a single tombstone slot
    (``last_deleted``) that ``undo_delete`` restores from. A second delete
    before an undo replaces the tombstone, so only the most recent delete can
    be undone.
    """

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
        thresholds: GradeThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self._clock = clock or _utcnow
        self._id_factory = id_factory or normalizer.new_id
        self.thresholds = thresholds
        self._tasks: list[Task] = []
        self._last_deleted: Task | None = None
        self._derived: list[DerivedTask] | None = None
        self._metrics: Metrics | None = None
        self.replace_all(tasks)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    # Callers only ever receive copies; every change goes through the
    # mutation methods so the cached views stay in step with the task set.

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(t.copy() for t in self._tasks)

    @property
    def last_deleted(self) -> Task | None:
        return None if self._last_deleted is None else self._last_deleted.copy()

    def get(self, task_id: str) -> Task | None:
        task = self._find(task_id)
        return None if task is None else task.copy()

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def __contains__(self, task_id: object) -> bool:
        return any(t.id == task_id for t in self._tasks)

    @property
    def derived_sorted(self) -> list[DerivedTask]:
        """Tasks with ROI in display order, recomputed after each mutation."""
        if self._derived is None:
            self._derived = derive_sorted(self._tasks)
        return list(self._derived)

    @property
    def metrics(self) -> Metrics:
        if self._metrics is None:
            self._metrics = compute_metrics(self._tasks, self.thresholds)
        return self._metrics

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Replace the whole task set, e.g. with a freshly loaded batch."""
        self._tasks = []
        for incoming in tasks:
            task = incoming.copy()
            task.id = self._unique_id(task.id)
            if not task.time_taken > 0:
                task.time_taken = 1.0
            self._tasks.append(task)
        self._last_deleted = None
        self._invalidate()
        logger.debug("Store populated with %d task(s)", len(self._tasks))

    def add(self, record: Mapping[str, Any]) -> Task:
        """Create a task from a loose record and append it."""
        raw = normalizer.canonical_fields(record)
        now = self._clock()
        status = normalizer.coerce_status(raw.get("status"))
        task = Task(
            id=self._unique_id(normalizer.coerce_id(raw.get("id"))),
            title=normalizer.coerce_title(raw.get("title")),
            revenue=normalizer.coerce_revenue(raw.get("revenue")),
            time_taken=normalizer.coerce_time_taken(raw.get("time_taken")),
            priority=normalizer.coerce_priority(raw.get("priority")),
            status=status,
            notes=normalizer.coerce_notes(raw.get("notes")),
            created_at=now,
            completed_at=now if status == STATUS_DONE else None,
        )
        self._tasks.append(task)
        self._invalidate()
        logger.debug("Added task '%s' (%s)", task.title, task.id)
        return task.copy()

    def update(self, task_id: str, patch: Mapping[str, Any]) -> Task | None:
        """Merge ``patch`` onto a task. Unknown ids are ignored."""
        task = self._find(task_id)
        if task is None:
            logger.debug("Update ignored: no task with id %s", task_id)
            return None

        was_done = task.is_done
        fields = normalizer.canonical_fields(patch)
        for key in patch:
            if key not in FIELD_ALIASES or key == "id":
                logger.debug("Update of %s: ignoring field %r", task_id, key)
        for name, value in fields.items():
            coerce = _PATCH_COERCERS.get(name)
            if coerce is None:
                continue
            coerced = coerce(value)
            if name in ("created_at", "completed_at") and coerced is None:
                continue
            setattr(task, name, coerced)

        if not was_done and task.is_done and task.completed_at is None:
            task.completed_at = self._clock()
        if not task.time_taken > 0:
            task.time_taken = 1.0

        self._invalidate()
        logger.debug("Updated task '%s' (%s)", task.title, task.id)
        return task.copy()

    def delete(self, task_id: str) -> Task | None:
        """Remove a task, keeping it as the undo tombstone.

        An unknown id is a no-op and leaves any existing tombstone in place.
        """
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                del self._tasks[i]
                self._last_deleted = task
                self._invalidate()
                logger.debug("Deleted task '%s' (%s)", task.title, task.id)
                return task.copy()
        logger.debug("Delete ignored: no task with id %s", task_id)
        return None

    def undo_delete(self) -> Task | None:
        """Reinsert the last deleted task, re-keying it if its id was reused."""
        tombstone = self._last_deleted
        if tombstone is None:
            return None
        self._last_deleted = None
        restored = tombstone.copy()
        restored.id = self._unique_id(restored.id)
        self._tasks.append(restored)
        self._invalidate()
        logger.debug("Restored task '%s' (%s)", restored.title, restored.id)
        return restored.copy()

    def clear_last_deleted(self) -> None:
        self._last_deleted = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _unique_id(self, candidate: str | None) -> str:
        if candidate and candidate not in self:
            return candidate
        fresh = self._id_factory()
        while fresh in self:
            fresh = self._id_factory()
        if candidate:
            logger.debug("Id %s already in use; assigned %s", candidate, fresh)
        return fresh

    def _invalidate(self) -> None:
        self._derived = None
        self._metrics = None
