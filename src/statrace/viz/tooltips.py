"""
Tooltip rows for chart data.

Each function returns plain dicts (one per mark) whose keys double as Altair tooltip
field names, so the chart builders can pass them straight to `alt.Data(values=...)`.
"""

from __future__ import annotations

from typing import Any

from statrace.core.grammar import Metric
from statrace.engine.projection import Projection

from .format import format_value

__all__ = ["ranking_tooltips", "trend_tooltips", "tooltip_title"]


def tooltip_title(entity: str, time_step: int) -> str:
    return f"{entity} - {time_step}"


def ranking_tooltips(projection: Projection) -> list[dict[str, Any]]:
    """
    One row per ranked entity: title, Rank, Deaths, and Age Adjusted Rate.

    Examples:
        >>> from statrace.core.schema import Record
        >>> from statrace.engine.projection import project
        >>> from statrace.io.dataset import Dataset
        >>> ds = Dataset([Record(entity="Ohio", time_step=2020, deaths=5611, rate=47.2)])
        >>> ranking_tooltips(project(ds, None, 2020, "deaths"))[0]["Rank"]
        '#1'
    """
    rows: list[dict[str, Any]] = []
    for i, p in enumerate(projection.points):
        rows.append(
            {
                "entity": p.entity,
                "title": tooltip_title(p.entity, projection.time_step),
                "Rank": f"#{i + 1}",
                "Deaths": format_value(p.record.deaths, Metric.DEATHS),
                "Age Adjusted Rate": format_value(p.record.rate, Metric.RATE),
            }
        )
    return rows


def trend_tooltips(projection: Projection) -> list[dict[str, Any]]:
    """One row per trend point: entity, Year, and the metric value."""
    label = "Deaths" if projection.metric.is_count else "Rate"
    return [
        {
            "entity": p.entity,
            "title": p.entity,
            "Year": p.time_step,
            label: format_value(p.value, projection.metric),
        }
        for p in projection.points
    ]
