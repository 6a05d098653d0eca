"""
Enums and normalization helpers for statrace.

Defines the small controlled vocabulary shared by every layer:
- Metric: the selectable numeric field (deaths | rate).
- ProjectionMode: ranking (snapshot at one time step) or trend (history per entity).
- ViewKind: the visualization pages that own a controller/pipeline pair.

Notes:
    - Serialized values are lower_snake and double as widget values in the app.
    - Zero-IO, stdlib only.

Examples:
    >>> from statrace.core.grammar import Metric, metric_from_value
    >>> metric_from_value(" Deaths ") is Metric.DEATHS
    True
    >>> Metric.RATE.label
    'Age Adjusted Rate'
"""

from __future__ import annotations

from enum import Enum
from typing import Any

__all__ = [
    "Metric",
    "ProjectionMode",
    "ViewKind",
    "metric_from_value",
    "mode_from_value",
]


class Metric(Enum):
    """
    Numeric field used for value, color, and position mapping.

    Notes:
        DEATHS is a count (summed for totals), RATE a per-100k rate (averaged).
    """

    DEATHS = "deaths"
    RATE = "rate"

    @property
    def label(self) -> str:
        return "Total Deaths" if self is Metric.DEATHS else "Age Adjusted Rate"

    @property
    def short_label(self) -> str:
        return "Deaths" if self is Metric.DEATHS else "Rate"

    @property
    def is_count(self) -> bool:
        return self is Metric.DEATHS

    def value_of(self, record: Any) -> float:
        """Return this metric's value for a Record (or any object with deaths/rate)."""
        return float(record.deaths if self is Metric.DEATHS else record.rate)


class ProjectionMode(Enum):
    """
    Ordering/filter semantics of a projection.

    RANKING: one time step, value descending; empty filter means all entities.
    TREND: all time steps up to the current one per entity; empty filter means none.
    """

    RANKING = "ranking"
    TREND = "trend"


class ViewKind(Enum):
    """Visualization pages; each instance owns its own clock and visual state."""

    BAR_RACE = "bar_race"
    LINE_RACE = "line_race"
    DASHBOARD = "dashboard"
    SCROLL_MAP = "scroll_map"


def metric_from_value(s: str | Metric) -> Metric:
    """
    Parse a metric name into a Metric.

    Args:
        s (str | Metric): Metric name (case/whitespace-insensitive) or a Metric.

    Returns:
        Metric: Parsed metric.

    Raises:
        ValueError: If s is not a known metric.
    """
    if isinstance(s, Metric):
        return s
    return Metric(str(s).strip().lower())


def mode_from_value(s: str | ProjectionMode) -> ProjectionMode:
    """Parse a projection mode name; raises ValueError for unknown modes."""
    if isinstance(s, ProjectionMode):
        return s
    return ProjectionMode(str(s).strip().lower())
