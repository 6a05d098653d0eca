"""
statrace.viz — Altair chart builders over engine frames.

## Responsibilities
- Turn RenderFrames and displayed marks into Vega-Lite specs (bars, lines, maps).
- Format numbers for axes, labels, tooltips, and headlines.
- Never mutate engine state; read-only by contract.

## Public API
- races — bar_race_chart, line_race_chart, color_legend_chart, placeholder_chart.
- dashboard — top_bars_chart, time_series_chart.
- maps — choropleth_chart (inline topojson, albersUsa).
- format — format_tick, format_value, format_headline, progress_text.
- tooltips — ranking_tooltips, trend_tooltips.

## Import DAG discipline
- Depends on: statrace.engine, statrace.io (read-only), altair, matplotlib (palettes).
- Must not import app or streamlit.

## Examples
```python
from statrace.engine import RaceView, ViewConfig
from statrace.core import ViewKind
from statrace.viz import bar_race_chart

view = RaceView(ds, idx, ViewConfig.for_kind(ViewKind.BAR_RACE))  # doctest: +SKIP
ch = bar_race_chart(view.last_frame, view.current_marks())  # doctest: +SKIP
```
"""

from __future__ import annotations

from .dashboard import time_series_chart, time_series_rows, top_bars_chart
from .format import (
    format_headline,
    format_tick,
    format_trend_headline,
    format_trend_tick,
    format_value,
    progress_text,
)
from .maps import (
    MAP_UNAVAILABLE,
    PICK_PARAM,
    choropleth_chart,
    label_rows,
    map_rows,
    picked_names,
)
from .races import bar_race_chart, color_legend_chart, line_race_chart, placeholder_chart
from .theme import apply_chart_defaults, entity_palette
from .tooltips import ranking_tooltips, trend_tooltips

__all__ = [
    "bar_race_chart",
    "line_race_chart",
    "color_legend_chart",
    "placeholder_chart",
    "top_bars_chart",
    "time_series_chart",
    "time_series_rows",
    "choropleth_chart",
    "map_rows",
    "label_rows",
    "MAP_UNAVAILABLE",
    "PICK_PARAM",
    "picked_names",
    "format_tick",
    "format_trend_tick",
    "format_value",
    "format_headline",
    "format_trend_headline",
    "progress_text",
    "ranking_tooltips",
    "trend_tooltips",
    "apply_chart_defaults",
    "entity_palette",
]
