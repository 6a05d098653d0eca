"""
Choropleth map over the us-atlas states topology.

Overview
- map_rows(): per-entity fill color, tooltip fields, and selection flag.
- choropleth_chart(): geoshape layer (albersUsa) joined to map_rows by feature name,
  plus optional postal-code labels at precomputed centroids.
- MAP_UNAVAILABLE: placeholder text when the topology could not be loaded.

Notes
- The topology is inlined (topojson format) so the browser never refetches it.
- Features without a matching row fall back to MISSING_COLOR.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any

import altair as alt

from statrace.core.constants import GEO_OBJECT, MISSING_COLOR
from statrace.engine.projection import Projection
from statrace.engine.scales import SequentialColorScale
from statrace.io.geo import abbreviation

from .races import placeholder_chart
from .theme import apply_chart_defaults
from .tooltips import ranking_tooltips

__all__ = [
    "MAP_UNAVAILABLE",
    "PICK_PARAM",
    "map_rows",
    "label_rows",
    "choropleth_chart",
    "picked_names",
]

MAP_UNAVAILABLE = "Map unavailable: the geography reference could not be loaded"

PICK_PARAM = "pick"

_LOOKUP_FIELDS = ["color", "title", "Rank", "Deaths", "Age Adjusted Rate", "selected"]


def map_rows(
    projection: Projection,
    color: SequentialColorScale,
    selected: Collection[str] = (),
) -> list[dict[str, Any]]:
    """Lookup rows keyed by entity (the topology's `properties.name`)."""
    chosen = set(selected)
    rows: list[dict[str, Any]] = []
    for tip, p in zip(ranking_tooltips(projection), projection.points, strict=True):
        rows.append({**tip, "color": color(p.value), "selected": p.entity in chosen})
    return rows


def label_rows(centroids: Mapping[str, tuple[float, float]]) -> list[dict[str, Any]]:
    return [
        {"entity": name, "lon": lon, "lat": lat, "abbr": abbreviation(name)}
        for name, (lon, lat) in centroids.items()
    ]


def choropleth_chart(
    projection: Projection,
    color: SequentialColorScale,
    topology: Mapping[str, Any] | None,
    *,
    centroids: Mapping[str, tuple[float, float]] | None = None,
    selected: Collection[str] = (),
    width: float = 960,
    height: float = 600,
    title: str | None = None,
    clickable: bool = False,
) -> alt.TopLevelMixin:
    """
    Filled state map for one projection.

    Args:
        projection (Projection): Ranking projection for the displayed time step.
        color (SequentialColorScale): Fill scale (visible or all-time-steps domain).
        topology (Mapping[str, Any] | None): us-atlas topology; None renders the
            "map unavailable" placeholder.
        centroids (Mapping[str, tuple[float, float]] | None): (lon, lat) label anchors.
        selected (Collection[str]): Entities drawn with a heavier outline.
        width (float): Chart width in pixels.
        height (float): Chart height in pixels.
        title (str | None): Optional title.
        clickable (bool): Attach a click selection named PICK_PARAM over `name`.

    Returns:
        alt.TopLevelMixin: Layered geoshape (+ text) chart or a placeholder.
    """
    if topology is None:
        return placeholder_chart(MAP_UNAVAILABLE, width=width, height=height)

    shapes = alt.Data(values=topology, format=alt.DataFormat(type="topojson", feature=GEO_OBJECT))
    lookup = alt.LookupData(
        data=alt.Data(values=map_rows(projection, color, selected)),
        key="entity",
        fields=_LOOKUP_FIELDS,
    )
    states = (
        alt.Chart(shapes)
        .transform_lookup(lookup="properties.name", from_=lookup)
        .transform_calculate(
            fill=f"datum.color ? datum.color : '{MISSING_COLOR}'",
            outline="datum.selected ? 2.5 : 0.5",
            name="datum.properties.name",
        )
        .mark_geoshape(stroke="white")
        .encode(
            color=alt.Color("fill:N", scale=None),
            strokeWidth=alt.StrokeWidth("outline:Q", scale=None),
            tooltip=["name:N", "Rank:N", "Deaths:N", "Age Adjusted Rate:N"],
        )
        .project(type="albersUsa")
    )
    if clickable:
        states = states.add_params(alt.selection_point(name=PICK_PARAM, fields=["name"]))
    layers: list[alt.Chart] = [states]
    if centroids:
        layers.append(
            alt.Chart(alt.Data(values=label_rows(centroids)))
            .mark_text(fontSize=9, fontWeight=600, color="#333")
            .encode(longitude="lon:Q", latitude="lat:Q", text="abbr:N")
            .project(type="albersUsa")
        )
    ch = alt.layer(*layers).properties(width=width, height=height)
    if title:
        ch = ch.properties(title=title)
    return apply_chart_defaults(ch)


def picked_names(selection: Mapping[str, Any] | None) -> list[str]:
    """
    Feature names from a Streamlit selection event payload.

    Examples:
        >>> picked_names({"pick": [{"name": "Ohio"}]})
        ['Ohio']
        >>> picked_names(None)
        []
    """
    if not selection:
        return []
    return [str(row["name"]) for row in selection.get(PICK_PARAM, []) if row.get("name")]
