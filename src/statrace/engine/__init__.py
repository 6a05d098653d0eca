"""
statrace.engine — Pure projection, scaling, animation, and transition logic.

## Responsibilities
- Project the dataset for the current controls (ranking snapshot or trend history).
- Build position/band/color scales from a projection.
- Drive the per-view time index (Playing/Paused state machine with wraparound).
- Reconcile keyed visual state into enter/update/exit transitions.
- Compose the above into independent views (RaceView, ViewGroup).

## Import DAG discipline
- Depends on stdlib, polars, matplotlib (colormaps, tick locators), statrace.core, statrace.io.
- MUST NOT import statrace.viz or app; drawing happens downstream of RenderFrame.
"""

from __future__ import annotations

from .animation import (
    AnimationClock,
    AnimationController,
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    advance,
)
from .projection import AveragePoint, Projection, Summary, average_trend, project, summarize, top_n
from .scales import (
    BandScale,
    Layout,
    LinearScale,
    Margins,
    ScaleSet,
    SequentialColorScale,
    build_scales,
    global_color_domain,
)
from .transitions import (
    Reconciliation,
    TransitionPipeline,
    TransitionRun,
    TransitionTiming,
    VisualAttrs,
    layout_bars,
    layout_points,
    reconcile,
)
from .views import RaceView, RenderFrame, ViewConfig, ViewGroup, ViewState, time_step_from_scroll

__all__ = [
    "AnimationClock",
    "AnimationController",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "advance",
    "Projection",
    "Summary",
    "AveragePoint",
    "project",
    "top_n",
    "summarize",
    "average_trend",
    "Margins",
    "Layout",
    "LinearScale",
    "BandScale",
    "SequentialColorScale",
    "ScaleSet",
    "build_scales",
    "global_color_domain",
    "VisualAttrs",
    "TransitionTiming",
    "Reconciliation",
    "TransitionRun",
    "TransitionPipeline",
    "reconcile",
    "layout_bars",
    "layout_points",
    "ViewConfig",
    "ViewState",
    "RenderFrame",
    "RaceView",
    "ViewGroup",
    "time_step_from_scroll",
]
