"""Per-task derivations (ROI, display order) and aggregate metrics."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .models import (
    GRADE_EXCELLENT,
    GRADE_GOOD,
    GRADE_NEEDS_IMPROVEMENT,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    STATUS_DONE,
    STATUS_IN_PROGRESS,
    STATUS_TODO,
    DerivedTask,
    Metrics,
    Task,
)

# Display order: active work first, finished work last, unknown statuses after.
STATUS_ORDER = {STATUS_IN_PROGRESS: 0, STATUS_TODO: 1, STATUS_DONE: 2}
PRIORITY_WEIGHT = {PRIORITY_HIGH: 3, PRIORITY_MEDIUM: 2, PRIORITY_LOW: 1}


@dataclass(frozen=True)
class GradeThresholds:
    """Average-ROI cut-offs for the performance grade."""

    excellent: float = 500.0
    good: float = 200.0


DEFAULT_THRESHOLDS = GradeThresholds()


def finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def _safe_divide(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return 0.0
    return finite_or_zero(numerator / denominator)


# ------------------------------------------------------------------
# Derivation
# ------------------------------------------------------------------


def compute_roi(task: Task) -> float | None:
    """Revenue per hour of a single task, or None when it is undefined."""
    if not task.time_taken > 0:
        return None
    roi = task.revenue / task.time_taken
    return roi if math.isfinite(roi) else None


def with_derived(task: Task) -> DerivedTask:
    return DerivedTask(task=task.copy(), roi=compute_roi(task))


def _sort_key(derived: DerivedTask) -> tuple:
    roi = derived.roi if derived.roi is not None else 0.0
    return (
        STATUS_ORDER.get(derived.status, len(STATUS_ORDER)),
        -roi,
        -PRIORITY_WEIGHT.get(derived.priority, 0),
        -finite_or_zero(derived.revenue),
    )


def sort_tasks(derived: Iterable[DerivedTask]) -> list[DerivedTask]:
    """Order derived tasks for display.

    Status group, then ROI, priority and revenue descending. Ties keep
    their input order.
    """
    return sorted(derived, key=_sort_key)


def derive_sorted(tasks: Iterable[Task]) -> list[DerivedTask]:
    return sort_tasks(with_derived(t) for t in tasks)


# ------------------------------------------------------------------
# Aggregation
# ------------------------------------------------------------------


def compute_total_revenue(tasks: Iterable[Task]) -> float:
    return finite_or_zero(sum(finite_or_zero(t.revenue) for t in tasks if t.is_done))


def compute_total_time(tasks: Iterable[Task]) -> float:
    return finite_or_zero(sum(finite_or_zero(t.time_taken) for t in tasks))


def compute_time_efficiency(tasks: Sequence[Task]) -> float:
    """Share of tasks that are Done, as a whole percentage."""
    if not tasks:
        return 0.0
    done = sum(1 for t in tasks if t.is_done)
    return float(round(done * 100 / len(tasks)))


def compute_revenue_per_hour(tasks: Sequence[Task]) -> float:
    return _safe_divide(compute_total_revenue(tasks), compute_total_time(tasks))


def compute_average_roi(tasks: Iterable[Task]) -> float:
    """Mean ROI over tasks whose ROI is finite and non-negative."""
    valid = [roi for roi in map(compute_roi, tasks) if roi is not None and roi >= 0]
    if not valid:
        return 0.0
    return _safe_divide(sum(valid), len(valid))


def compute_performance_grade(
    average_roi: float,
    thresholds: GradeThresholds = DEFAULT_THRESHOLDS,
) -> str:
    if average_roi > thresholds.excellent:
        return GRADE_EXCELLENT
    if average_roi >= thresholds.good:
        return GRADE_GOOD
    return GRADE_NEEDS_IMPROVEMENT


def compute_metrics(
    tasks: Sequence[Task],
    thresholds: GradeThresholds = DEFAULT_THRESHOLDS,
) -> Metrics:
    """Compute the aggregate snapshot for a task set."""
    if not tasks:
        return Metrics.empty()
    average_roi = compute_average_roi(tasks)
    return Metrics(
        total_revenue=compute_total_revenue(tasks),
        total_time_taken=compute_total_time(tasks),
        time_efficiency_pct=compute_time_efficiency(tasks),
        revenue_per_hour=compute_revenue_per_hour(tasks),
        average_roi=average_roi,
        performance_grade=compute_performance_grade(average_roi, thresholds),
    )
