"""
Dashboard charts: top-N ranking bars and the time-series panel.

Both charts are redrawn per render (no transitions) and use Altair's own scales over
data-space fields; colors still come from the engine's sequential color scale.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

import altair as alt

from statrace.core.grammar import Metric, ProjectionMode, metric_from_value
from statrace.engine.projection import Projection, average_trend, project
from statrace.engine.scales import ScaleSet
from statrace.io.dataset import Dataset, Indices

from .format import format_value
from .races import placeholder_chart
from .theme import apply_chart_defaults, entity_palette
from .tooltips import ranking_tooltips

__all__ = ["top_bars_chart", "time_series_chart", "time_series_rows"]


def top_bars_chart(
    projection: Projection,
    scales: ScaleSet | None,
    *,
    width: float = 600,
    height: float = 300,
) -> alt.TopLevelMixin:
    """Horizontal bars for an already-truncated ranking (dashboard top 15)."""
    if projection.is_empty or scales is None:
        return placeholder_chart(f"No data for {projection.time_step}", width=width, height=height)
    metric = projection.metric
    tips = {r["entity"]: r for r in ranking_tooltips(projection)}
    rows = [
        {
            **tips[p.entity],
            "value": p.value,
            "color": scales.color(p.value),
        }
        for p in projection.points
    ]
    order = list(projection.entities)
    ch = (
        alt.Chart(alt.Data(values=rows))
        .mark_bar(cornerRadius=2)
        .encode(
            x=alt.X("value:Q", title=metric.label, scale=alt.Scale(nice=True, zero=True)),
            y=alt.Y("entity:N", title=None, sort=order, scale=alt.Scale(paddingInner=0.2)),
            color=alt.Color("color:N", scale=None),
            tooltip=["title:N", "Rank:N", "Deaths:N", "Age Adjusted Rate:N"],
        )
        .properties(width=width, height=height)
    )
    return apply_chart_defaults(ch)


def time_series_rows(
    dataset: Dataset,
    indices: Indices,
    metric: Metric | str,
    entity_filter: Collection[str] = (),
    *,
    comparison: bool = False,
) -> list[dict[str, Any]]:
    """
    Rows for the time-series panel.

    Comparison mode with a non-empty selection yields one series per selected entity;
    otherwise a single "Average" series over the selection (empty selection = all).
    """
    m = metric_from_value(metric)
    if comparison and entity_filter:
        last = indices.time_steps[-1] if indices.time_steps else 0
        trend = project(dataset, indices, last, m, entity_filter, ProjectionMode.TREND)
        return [
            {
                "series": p.entity,
                "t": p.time_step,
                "value": p.value,
                "Deaths": format_value(p.record.deaths, Metric.DEATHS),
                "Age Adjusted Rate": format_value(p.record.rate, Metric.RATE),
            }
            for p in trend.points
        ]
    return [
        {
            "series": "Average",
            "t": a.time_step,
            "value": a.value,
            m.short_label: format_value(a.value, m),
        }
        for a in average_trend(dataset, m, entity_filter)
    ]


def time_series_chart(
    dataset: Dataset,
    indices: Indices,
    metric: Metric | str,
    entity_filter: Collection[str] = (),
    *,
    comparison: bool = False,
    current_time_step: int | None = None,
    width: float = 600,
    height: float = 300,
) -> alt.TopLevelMixin:
    """Lines over every time step with an optional rule at the current one."""
    m = metric_from_value(metric)
    rows = time_series_rows(dataset, indices, m, entity_filter, comparison=comparison)
    if not rows:
        return placeholder_chart("No data", width=width, height=height)
    series = list(dict.fromkeys(r["series"] for r in rows))
    palette = entity_palette(series)
    for r in rows:
        r["color"] = palette[r["series"]]
    tooltip = ["series:N", "t:O"] + [
        f"{k}:N" for k in rows[0] if k not in {"series", "t", "value", "color"}
    ]
    base = alt.Chart(alt.Data(values=rows)).encode(
        x=alt.X("t:Q", title="Year", axis=alt.Axis(format="d")),
        y=alt.Y("value:Q", title=m.label, scale=alt.Scale(nice=True, zero=False)),
        color=alt.Color("color:N", scale=None),
        detail="series:N",
    )
    layers: list[alt.Chart] = [
        base.mark_line(strokeWidth=2.5, interpolate="monotone"),
        base.mark_circle(size=50).encode(tooltip=tooltip),
    ]
    if current_time_step is not None:
        layers.append(
            alt.Chart(alt.Data(values=[{"t": current_time_step}]))
            .mark_rule(color="#999", strokeDash=[4, 4])
            .encode(x="t:Q")
        )
    ch = alt.layer(*layers).properties(width=width, height=height)
    return apply_chart_defaults(ch)
