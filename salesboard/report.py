"""Plain-text and JSON renderings of the dashboard state."""

from __future__ import annotations

import math

from .dashboard import Dashboard
from .models import DerivedTask, Metrics


def _finite(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _fixed(value: object, digits: int = 1) -> str:
    v = _finite(value)
    return f"{(v if v is not None else 0.0):.{digits}f}"


def format_money(value: object) -> str:
    v = _finite(value)
    if v is None:
        return "$0"
    if v == int(v):
        return f"${int(v):,}"
    return f"${v:,.2f}"


def format_metrics(metrics: Metrics) -> dict[str, str]:
    """Display strings for each metric, in display order."""
    efficiency = _finite(metrics.time_efficiency_pct)
    return {
        "Total Revenue": format_money(metrics.total_revenue),
        "Time Efficiency": f"{round(efficiency) if efficiency is not None else 0}%",
        "Revenue / Hour": f"${_fixed(metrics.revenue_per_hour)}",
        "Average ROI": _fixed(metrics.average_roi),
        "Grade": metrics.performance_grade or "-",
    }


def format_task_row(derived: DerivedTask) -> str:
    roi = "n/a" if derived.roi is None else _fixed(derived.roi)
    return (
        f"[{derived.status}] {derived.title} | {format_money(derived.revenue)} "
        f"in {derived.time_taken:g}h | ROI {roi} | {derived.priority}"
    )


def build_export(dashboard: Dashboard) -> dict:
    """JSON-ready snapshot of the metrics and the ordered tasks."""
    return {
        "metrics": dashboard.metrics.to_dict(),
        "tasks": [d.to_dict() for d in dashboard.derived_sorted],
        "error": dashboard.error,
    }
