"""
Race charts drawn from engine marks.

Overview
- bar_race_chart(): ranking bars, entity labels, value labels, and a tick grid.
- line_race_chart(): per-entity lines and points up to the current time step.
- color_legend_chart(): gradient bar for the sequential color scale.
- placeholder_chart(): a centered message in place of marks.

Notes
- Marks arrive in pixel space (VisualAttrs from TransitionPipeline.current()), so every
  positional channel uses `scale=None`; a mid-transition sample draws exactly as sampled.
- Colors are precomputed hex strings, also passed through with `scale=None`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import altair as alt

from statrace.core.constants import LEGEND_STOPS
from statrace.core.grammar import Metric
from statrace.engine.scales import LinearScale, SequentialColorScale
from statrace.engine.transitions import VisualAttrs, point_key
from statrace.engine.views import RenderFrame

from .format import format_tick, format_trend_tick, format_value
from .theme import GRID_COLOR, TEXT_COLOR, apply_chart_defaults, entity_palette
from .tooltips import ranking_tooltips, trend_tooltips

__all__ = [
    "placeholder_chart",
    "bar_race_chart",
    "line_race_chart",
    "color_legend_chart",
]


def _px(field: str) -> alt.X:
    return alt.X(f"{field}:Q", scale=None, axis=None)


def _py(field: str) -> alt.Y:
    return alt.Y(f"{field}:Q", scale=None, axis=None)


def placeholder_chart(text: str, *, width: float = 960, height: float = 300) -> alt.TopLevelMixin:
    """A single centered message sized like the chart it replaces."""
    ch = (
        alt.Chart(alt.Data(values=[{"x": width / 2, "y": height / 2, "text": text}]))
        .mark_text(fontSize=16, color="#7f8c8d")
        .encode(x=_px("x"), y=_py("y"), text="text:N")
        .properties(width=width, height=height)
    )
    return apply_chart_defaults(ch)


def _x_axis_layers(
    scale: LinearScale,
    *,
    y0: float,
    y1: float,
    fmt: Callable[[float], str],
    count: int = 5,
) -> list[alt.Chart]:
    ticks = scale.ticks(count)
    rows = [{"x": scale(t), "y0": y0, "y1": y1, "label": fmt(t)} for t in ticks]
    data = alt.Data(values=rows)
    grid = (
        alt.Chart(data)
        .mark_rule(color=GRID_COLOR, strokeDash=[2, 2])
        .encode(x=_px("x"), y=_py("y0"), y2="y1:Q")
    )
    labels = (
        alt.Chart(data)
        .mark_text(baseline="top", dy=6, fontSize=11, color=TEXT_COLOR)
        .encode(x=_px("x"), y=_py("y1"), text="label:N")
    )
    return [grid, labels]


def _y_axis_layers(
    scale: LinearScale,
    *,
    x0: float,
    x1: float,
    fmt: Callable[[float], str],
    count: int = 6,
) -> list[alt.Chart]:
    rows = [{"y": scale(t), "x0": x0, "x1": x1, "label": fmt(t)} for t in scale.ticks(count)]
    data = alt.Data(values=rows)
    grid = (
        alt.Chart(data)
        .mark_rule(color=GRID_COLOR, strokeDash=[2, 2])
        .encode(y=_py("y"), x=_px("x0"), x2="x1:Q")
    )
    labels = (
        alt.Chart(data)
        .mark_text(align="right", dx=-8, fontSize=11, color=TEXT_COLOR)
        .encode(y=_py("y"), x=_px("x0"), text="label:N")
    )
    return [grid, labels]


def bar_race_chart(
    frame: RenderFrame,
    marks: Mapping[str, VisualAttrs],
    *,
    title: str | None = None,
) -> alt.TopLevelMixin:
    """
    Ranking bars for one (possibly mid-transition) render.

    Args:
        frame (RenderFrame): Latest frame of a ranking view.
        marks (Mapping[str, VisualAttrs]): Displayed marks keyed by entity.
        title (str | None): Optional chart title.

    Returns:
        alt.TopLevelMixin: Layered chart, or a placeholder when nothing is displayed.
    """
    lay = frame.layout
    if not marks:
        return placeholder_chart(
            frame.placeholder or "No data", width=lay.width, height=lay.height
        )

    metric = frame.projection.metric
    values = {p.entity: p.value for p in frame.projection.points}
    tips = {row["entity"]: row for row in ranking_tooltips(frame.projection)}
    rows: list[dict[str, Any]] = []
    for key, a in marks.items():
        row: dict[str, Any] = {
            "entity": key,
            "x": a.x,
            "x2": a.x + a.width,
            "y": a.y,
            "y2": a.y + a.height,
            "yc": a.y + a.height / 2,
            "color": a.color,
            "opacity": a.opacity,
            "label": format_value(values[key], metric) if key in values else "",
        }
        row.update(tips.get(key, {"title": key}))
        rows.append(row)
    data = alt.Data(values=rows)
    tooltip = ["title:N", "Rank:N", "Deaths:N", "Age Adjusted Rate:N"]

    bars = (
        alt.Chart(data)
        .mark_rect(cornerRadius=2)
        .encode(
            x=_px("x"),
            x2="x2:Q",
            y=_py("y"),
            y2="y2:Q",
            color=alt.Color("color:N", scale=None),
            opacity=alt.Opacity("opacity:Q", scale=None),
            tooltip=tooltip,
        )
    )
    names = (
        alt.Chart(data)
        .mark_text(align="right", dx=-10, fontSize=13, color=TEXT_COLOR)
        .encode(x=_px("x"), y=_py("yc"), text="entity:N", opacity=alt.Opacity("opacity:Q", scale=None))
    )
    labels = (
        alt.Chart(data)
        .mark_text(align="left", dx=15, fontSize=13, fontWeight=600, color=TEXT_COLOR)
        .encode(x=_px("x2"), y=_py("yc"), text="label:N", opacity=alt.Opacity("opacity:Q", scale=None))
    )
    layers: list[alt.Chart] = []
    if frame.scales is not None:
        y0, y1 = lay.y_range
        layers += _x_axis_layers(
            frame.scales.position, y0=y0, y1=y1, fmt=lambda v: format_tick(v, metric)
        )
    layers += [bars, names, labels]
    ch = alt.layer(*layers).properties(width=lay.width, height=lay.height)
    if title:
        ch = ch.properties(title=title)
    return apply_chart_defaults(ch)


def _split_point_key(key: str) -> tuple[str, int]:
    entity, _, t = key.rpartition("|")
    return entity, int(t)


def line_race_chart(
    frame: RenderFrame,
    marks: Mapping[str, VisualAttrs],
    *,
    title: str | None = None,
) -> alt.TopLevelMixin:
    """
    Trend lines (one categorical color per entity) with points and a right-side legend.

    Entering points fade in through their sampled opacity; lines follow the sampled points.
    """
    lay = frame.layout
    if frame.placeholder is not None or frame.scales is None or not marks:
        return placeholder_chart(
            frame.placeholder or "No data", width=lay.width, height=lay.height
        )

    metric = frame.projection.metric
    entities = list(frame.projection.entities)
    colors = entity_palette(entities)
    tips = {point_key(r["entity"], r["Year"]): r for r in trend_tooltips(frame.projection)}
    value_label = "Deaths" if metric.is_count else "Rate"

    rows: list[dict[str, Any]] = []
    for key, a in marks.items():
        entity, t = _split_point_key(key)
        if entity not in colors:
            continue
        row: dict[str, Any] = {
            "entity": entity,
            "t": t,
            "x": a.x,
            "y": a.y,
            "size": a.width * a.height,
            "color": colors[entity],
            "opacity": a.opacity,
        }
        row.update(tips.get(key, {}))
        rows.append(row)
    rows.sort(key=lambda r: (r["entity"], r["t"]))
    data = alt.Data(values=rows)

    lines = (
        alt.Chart(data)
        .mark_line(strokeWidth=2.5)
        .encode(
            x=_px("x"),
            y=_py("y"),
            detail="entity:N",
            order="t:Q",
            color=alt.Color("color:N", scale=None),
        )
    )
    points = (
        alt.Chart(data)
        .mark_circle(stroke="white", strokeWidth=1.5)
        .encode(
            x=_px("x"),
            y=_py("y"),
            size=alt.Size("size:Q", scale=None),
            color=alt.Color("color:N", scale=None),
            opacity=alt.Opacity("opacity:Q", scale=None),
            tooltip=["title:N", "Year:O", f"{value_label}:N"],
        )
    )

    legend_x = lay.width - lay.margins.right + 10
    legend_rows = [
        {"x": legend_x, "y": lay.margins.top + 20 * i, "entity": e, "color": colors[e]}
        for i, e in enumerate(entities)
    ]
    legend_data = alt.Data(values=legend_rows)
    legend_swatch = (
        alt.Chart(legend_data)
        .mark_tick(thickness=2.5, size=20, orient="horizontal")
        .encode(x=_px("x"), y=_py("y"), color=alt.Color("color:N", scale=None))
    )
    legend_text = (
        alt.Chart(legend_data)
        .mark_text(align="left", dx=14, fontSize=11, color="#333")
        .encode(x=_px("x"), y=_py("y"), text="entity:N")
    )

    x0, x1 = lay.x_range
    y0, y1 = lay.y_range
    layers = _x_axis_layers(frame.scales.position, y0=y0, y1=y1, fmt=lambda v: f"{v:.0f}", count=10)
    if frame.scales.value is not None:
        layers += _y_axis_layers(
            frame.scales.value, x0=x0, x1=x1, fmt=lambda v: format_trend_tick(v, metric)
        )
    layers += [lines, points, legend_swatch, legend_text]
    ch = alt.layer(*layers).properties(width=lay.width, height=lay.height)
    if title:
        ch = ch.properties(title=title)
    return apply_chart_defaults(ch)


def color_legend_chart(
    color: SequentialColorScale,
    metric: Metric,
    *,
    width: float = 300,
    height: float = 12,
    intervals: int = LEGEND_STOPS,
) -> alt.TopLevelMixin:
    """Gradient legend: `intervals` swatches plus min/max labels under the bar."""
    stops: Sequence[tuple[float, str]] = color.stops(intervals)
    rows = [
        {"x": width * o0, "x2": width * o1, "color": c0}
        for (o0, c0), (o1, _) in zip(stops, stops[1:], strict=False)
    ]
    d0, d1 = color.domain
    swatches = (
        alt.Chart(alt.Data(values=rows))
        .mark_rect(height=height)
        .encode(x=_px("x"), x2="x2:Q", y=alt.value(height / 2), color=alt.Color("color:N", scale=None))
    )
    ends = alt.Data(
        values=[
            {"x": 0.0, "label": format_tick(d0, metric), "align": "left"},
            {"x": float(width), "label": format_tick(d1, metric), "align": "right"},
        ]
    )
    low = (
        alt.Chart(ends)
        .transform_filter("datum.align == 'left'")
        .mark_text(align="left", baseline="top", fontSize=11, color=TEXT_COLOR)
        .encode(x=_px("x"), y=alt.value(height + 4), text="label:N")
    )
    high = (
        alt.Chart(ends)
        .transform_filter("datum.align == 'right'")
        .mark_text(align="right", baseline="top", fontSize=11, color=TEXT_COLOR)
        .encode(x=_px("x"), y=alt.value(height + 4), text="label:N")
    )
    ch = alt.layer(swatches, low, high).properties(
        width=width, height=height + 20, title=metric.label
    )
    return apply_chart_defaults(ch)
