"""Data models for sales tasks and the views derived from them."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone

STATUS_TODO = "Todo"
STATUS_IN_PROGRESS = "In Progress"
STATUS_DONE = "Done"
STATUSES = (STATUS_TODO, STATUS_IN_PROGRESS, STATUS_DONE)

PRIORITY_LOW = "Low"
PRIORITY_MEDIUM = "Medium"
PRIORITY_HIGH = "High"
PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH)

DEFAULT_TITLE = "Untitled Task"
GRADE_NEEDS_IMPROVEMENT = "Needs Improvement"
GRADE_GOOD = "Good"
GRADE_EXCELLENT = "Excellent"

# Loose records and patches may use either the JSON (camelCase) or the
# attribute (snake_case) spelling of a field.
FIELD_ALIASES: dict[str, str] = {
    "id": "id",
    "title": "title",
    "revenue": "revenue",
    "timeTaken": "time_taken",
    "time_taken": "time_taken",
    "priority": "priority",
    "status": "status",
    "notes": "notes",
    "createdAt": "created_at",
    "created_at": "created_at",
    "completedAt": "completed_at",
    "completed_at": "completed_at",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


@dataclass
class Task:
    """A single sales task held by a TaskStore."""

    id: str
    title: str
    revenue: float = 0.0
    time_taken: float = 1.0
    priority: str = PRIORITY_LOW
    status: str = STATUS_TODO
    notes: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None

    @property
    def is_done(self) -> bool:
        return self.status == STATUS_DONE

    def copy(self) -> Task:
        return copy.copy(self)

    def to_dict(self) -> dict:
        """Return the task in its JSON (camelCase) shape."""
        d: dict = {
            "id": self.id,
            "title": self.title,
            "revenue": self.revenue,
            "timeTaken": self.time_taken,
            "priority": self.priority,
            "status": self.status,
            "notes": self.notes,
            "createdAt": _isoformat(self.created_at),
        }
        if self.completed_at is not None:
            d["completedAt"] = _isoformat(self.completed_at)
        return d


@dataclass(frozen=True)
class DerivedTask:
    """A snapshot of a task annotated with its ROI, used for display and sorting."""

    task: Task
    roi: float | None

    @property
    def id(self) -> str:
        return self.task.id

    @property
    def title(self) -> str:
        return self.task.title

    @property
    def revenue(self) -> float:
        return self.task.revenue

    @property
    def time_taken(self) -> float:
        return self.task.time_taken

    @property
    def priority(self) -> str:
        return self.task.priority

    @property
    def status(self) -> str:
        return self.task.status

    def to_dict(self) -> dict:
        d = self.task.to_dict()
        d["roi"] = self.roi
        return d


@dataclass(frozen=True)
class Metrics:
    """Aggregate statistics over a whole task set."""

    total_revenue: float = 0.0
    total_time_taken: float = 0.0
    time_efficiency_pct: float = 0.0
    revenue_per_hour: float = 0.0
    average_roi: float = 0.0
    performance_grade: str = GRADE_NEEDS_IMPROVEMENT

    @classmethod
    def empty(cls) -> Metrics:
        return cls()

    def to_dict(self) -> dict:
        return {
            "totalRevenue": self.total_revenue,
            "totalTimeTaken": self.total_time_taken,
            "timeEfficiencyPct": self.time_efficiency_pct,
            "revenuePerHour": self.revenue_per_hour,
            "averageROI": self.average_roi,
            "performanceGrade": self.performance_grade,
        }
