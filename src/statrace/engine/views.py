"""
Per-view composition of the engine.

Overview
- ViewConfig: per-view parameters (mode, canvas, margins, row sizing, color scope).
- ViewState: explicit, immutable control state (metric, entity filter); every control
  operation returns a new state instead of mutating shared globals.
- RaceView: one controller + one transition pipeline + one ViewState over the shared,
  read-only Dataset/Indices. Every tick or control change calls refresh().
- ViewGroup: keeps exactly one view of a page active (combined race page).
- time_step_from_scroll(): scroll fraction -> time step (scroll-driven map).

Notes
- Views never mutate the Dataset/Indices; each owns its clock and visual state.
- Empty projections produce a RenderFrame with placeholder text, never an exception.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass, field, replace

from statrace.core.grammar import Metric, ProjectionMode, ViewKind, metric_from_value
from statrace.io.config import VizSettings
from statrace.io.dataset import Dataset, Indices, time_bounds

from .animation import AnimationClock, AnimationController, ManualScheduler, Scheduler
from .projection import Projection, Summary, project, summarize, top_n
from .scales import Layout, Margins, ScaleSet, SequentialColorScale, build_scales
from .transitions import (
    TransitionPipeline,
    TransitionRun,
    TransitionTiming,
    VisualAttrs,
    layout_bars,
    layout_points,
)

logger = logging.getLogger(__name__)

__all__ = [
    "SELECT_ENTITIES_PROMPT",
    "ViewConfig",
    "ViewState",
    "RenderFrame",
    "RaceView",
    "ViewGroup",
    "time_step_from_scroll",
]

SELECT_ENTITIES_PROMPT = "Please select states from the dropdown above to see their trends"


@dataclass(frozen=True)
class ViewConfig:
    """
    Static parameters of one visualization.

    Attributes:
        kind (ViewKind): Page the view belongs to.
        mode (ProjectionMode): Ranking or trend projection.
        width (float): Canvas width in pixels.
        height (float): Canvas height (fixed-height views).
        margins (Margins): Space reserved for labels/legend.
        row_height (float | None): Ranking rows: height = max(min_height, n * row_height + row_extra).
        min_height (float): Lower bound for row-sized canvases.
        row_extra (float): Fixed space added to row-sized canvases.
        top_n (int | None): Keep only the first n ranked points.
        color_scope (str | None): "visible" / "all"; None uses the mode default.
        draw_marks (bool): False for map views, which only need projection + color scale.
        metric (Metric): Metric selected when the view is created.
        default_filter (str | None): "all" or "none"; None picks "all" for ranking and
            "none" for trend.
    """

    kind: ViewKind
    mode: ProjectionMode
    width: float = 960.0
    height: float = 600.0
    margins: Margins = field(default_factory=Margins)
    row_height: float | None = None
    min_height: float = 400.0
    row_extra: float = 60.0
    top_n: int | None = None
    color_scope: str | None = None
    draw_marks: bool = True
    metric: Metric = Metric.DEATHS
    default_filter: str | None = None

    @property
    def initial_filter(self) -> str:
        if self.default_filter is not None:
            return self.default_filter
        return "all" if self.mode is ProjectionMode.RANKING else "none"

    @classmethod
    def for_kind(cls, kind: ViewKind, *, width: float = 960.0) -> ViewConfig:
        """Per-page defaults (margins and sizing follow each page's layout)."""
        if kind is ViewKind.BAR_RACE:
            return cls(
                kind,
                ProjectionMode.RANKING,
                width=width,
                margins=Margins(top=40, right=200, bottom=40, left=220),
                row_height=24,
            )
        if kind is ViewKind.LINE_RACE:
            return cls(
                kind,
                ProjectionMode.TREND,
                width=width,
                height=max(500.0, width * 0.6),
                margins=Margins(top=40, right=80, bottom=60, left=80),
            )
        if kind is ViewKind.DASHBOARD:
            return cls(
                kind,
                ProjectionMode.RANKING,
                width=width,
                height=300,
                margins=Margins(top=20, right=30, bottom=60, left=80),
                draw_marks=False,
                default_filter="none",
            )
        return cls(
            kind,
            ProjectionMode.RANKING,
            width=width,
            height=max(600.0, width * 0.6),
            color_scope="all",
            draw_marks=False,
        )

    def layout_for(self, rows: int) -> Layout:
        height = self.height
        if self.row_height is not None:
            height = max(self.min_height, max(rows, 1) * self.row_height + self.row_extra)
        return Layout(width=self.width, height=height, margins=self.margins)


@dataclass(frozen=True)
class ViewState:
    """
    Control state of one view.

    Attributes:
        metric (Metric): Selected metric.
        entity_filter (frozenset[str]): Selected entities; meaning of "empty" is per mode.
        comparison (bool): Overlay toggle (dashboard: one line per selected entity).
    """

    metric: Metric = Metric.DEATHS
    entity_filter: frozenset[str] = frozenset()
    comparison: bool = False

    @classmethod
    def initial(cls, config: ViewConfig, indices: Indices) -> ViewState:
        """Ranking views start with every entity selected, trend views with none."""
        if config.initial_filter == "all":
            return cls(metric=config.metric, entity_filter=frozenset(indices.entities))
        return cls(metric=config.metric)

    def with_metric(self, metric: Metric | str) -> ViewState:
        return replace(self, metric=metric_from_value(metric))

    def with_filter(self, entities: Collection[str]) -> ViewState:
        return replace(self, entity_filter=frozenset(entities))

    def toggled(self, entity: str) -> ViewState:
        """Add or remove one entity (map click in comparison mode)."""
        return replace(self, entity_filter=self.entity_filter ^ {entity})

    def select_all(self, indices: Indices) -> ViewState:
        return self.with_filter(indices.entities)

    def clear_all(self) -> ViewState:
        return self.with_filter(())

    def with_comparison(self, on: bool) -> ViewState:
        return replace(self, comparison=bool(on))


@dataclass(frozen=True)
class RenderFrame:
    """
    Everything a drawing step needs for one render.

    Attributes:
        time_step (int): Time step rendered.
        projection (Projection): Projected points.
        scales (ScaleSet | None): None when the projection is empty.
        layout (Layout): Canvas used for the scales.
        run (TransitionRun | None): Transition started by this render, if any.
        summary (Summary | None): Headline aggregates for ranking views.
        placeholder (str | None): Message to show instead of marks.
        map_projection (Projection | None): Map views only: every entity at the time
            step, regardless of the entity filter (the filter only outlines states).
        map_color (SequentialColorScale | None): Fill scale over `map_projection`.
    """

    time_step: int
    projection: Projection
    scales: ScaleSet | None
    layout: Layout
    run: TransitionRun | None = None
    summary: Summary | None = None
    placeholder: str | None = None
    map_projection: Projection | None = None
    map_color: SequentialColorScale | None = None


class RaceView:
    """
    One independent visualization instance over shared data.

    Notes:
        - The controller's listener calls refresh(); control setters also call it, so
          "changing X re-triggers projection with X applied".
        - `last_frame` holds the most recent completed render; drawing code reads it.
    """

    def __init__(
        self,
        dataset: Dataset,
        indices: Indices,
        config: ViewConfig,
        *,
        scheduler: Scheduler | None = None,
        settings: VizSettings | None = None,
        state: ViewState | None = None,
        now_ms: Callable[[], float] | None = None,
        autostart: bool = True,
    ) -> None:
        self.dataset = dataset
        self.indices = indices
        self.config = config
        self.settings = settings or VizSettings()
        self._scheduler = scheduler or ManualScheduler()
        if now_ms is not None:
            self._now_ms = now_ms
        elif isinstance(self._scheduler, ManualScheduler):
            sched = self._scheduler
            self._now_ms = lambda: sched.now_ms
        else:
            self._now_ms = lambda: time.monotonic() * 1000.0
        self._state = state or ViewState.initial(config, indices)
        self.pipeline = TransitionPipeline(
            TransitionTiming(
                enter_ms=self.settings.enter_duration_ms,
                update_ms=self.settings.enter_duration_ms,
                exit_ms=self.settings.exit_duration_ms,
            )
        )
        lo, hi = time_bounds(indices)
        self.controller = AnimationController(
            AnimationClock.initial(lo, hi, self.settings.interval_ms),
            self._scheduler,
            autostart=autostart,
        )
        self.controller.subscribe(lambda _clock: self.refresh())
        self.last_frame: RenderFrame | None = None
        self.refresh()

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def clock(self) -> AnimationClock:
        return self.controller.clock

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def _apply(self, state: ViewState) -> RenderFrame:
        self._state = state
        return self.refresh()

    def set_metric(self, metric: Metric | str) -> RenderFrame:
        return self._apply(self._state.with_metric(metric))

    def set_filter(self, entities: Collection[str]) -> RenderFrame:
        return self._apply(self._state.with_filter(entities))

    def toggle_entity(self, entity: str) -> RenderFrame:
        return self._apply(self._state.toggled(entity))

    def select_all(self) -> RenderFrame:
        return self._apply(self._state.select_all(self.indices))

    def clear_all(self) -> RenderFrame:
        return self._apply(self._state.clear_all())

    def set_comparison(self, on: bool) -> RenderFrame:
        return self._apply(self._state.with_comparison(on))

    def current_marks(self) -> dict[str, VisualAttrs]:
        """Displayed marks right now (mid-transition values included)."""
        return self.pipeline.current(self._now_ms())

    def refresh(self) -> RenderFrame:
        """Re-project for the current clock/state, rebuild scales, and reconcile marks."""
        cfg = self.config
        t = self.controller.clock.current_time_step
        st = self._state
        proj = project(self.dataset, self.indices, t, st.metric, st.entity_filter, cfg.mode)
        if cfg.top_n is not None:
            proj = top_n(proj, cfg.top_n)
        layout = cfg.layout_for(len(proj.entities))
        summary = (
            summarize(self.dataset, t, st.metric, st.entity_filter)
            if cfg.mode is ProjectionMode.RANKING
            else None
        )

        map_proj, map_color = (None, None) if cfg.draw_marks else self._map_fill(t, layout)

        if proj.is_empty:
            if cfg.mode is ProjectionMode.TREND:
                placeholder = (
                    SELECT_ENTITIES_PROMPT if not st.entity_filter else f"No data up to {t}"
                )
                run = self.pipeline.render({}, self._now_ms()) if cfg.draw_marks else None
            else:
                # Ranking with no rows at this time step: keep the previous marks.
                placeholder = f"No data for {t}"
                run = None
            frame = RenderFrame(
                t, proj, None, layout, run, summary, placeholder, map_proj, map_color
            )
            self.last_frame = frame
            return frame

        scales = build_scales(
            proj.points,
            st.metric,
            mode=cfg.mode,
            layout=layout,
            indices=self.indices,
            color_scope=cfg.color_scope,
            headroom=self.settings.bar_headroom,
            scheme=self.settings.color_scheme,
        )
        run = None
        if cfg.draw_marks:
            if cfg.mode is ProjectionMode.RANKING:
                targets = layout_bars(proj, scales)
                baseline: float | None = scales.position.range[0]
            else:
                targets = layout_points(proj, scales)
                baseline = None
            run = self.pipeline.render(targets, self._now_ms(), baseline_x=baseline)
        frame = RenderFrame(
            t, proj, scales, layout, run, summary, map_projection=map_proj, map_color=map_color
        )
        self.last_frame = frame
        return frame

    def _map_fill(self, t: int, layout: Layout) -> tuple[Projection, SequentialColorScale]:
        """Unfiltered ranking and its color scale; maps fill every state with data."""
        metric = self._state.metric
        proj = project(self.dataset, self.indices, t, metric, (), ProjectionMode.RANKING)
        color = build_scales(
            proj.points,
            metric,
            mode=ProjectionMode.RANKING,
            layout=layout,
            indices=self.indices,
            color_scope=self.config.color_scope,
            headroom=self.settings.bar_headroom,
            scheme=self.settings.color_scheme,
        ).color
        return proj, color

    def dispose(self) -> None:
        self.controller.dispose()
        self.pipeline.clear()


class ViewGroup:
    """
    Views sharing one page where only the active one animates.

    Examples:
        Switching from the bar race to the line race cancels the bar race's pending tick
        and restarts the line race's timer if it is still playing.
    """

    def __init__(self, views: dict[str, RaceView], active: str | None = None) -> None:
        if not views:
            raise ValueError("ViewGroup needs at least one view")
        self._views = dict(views)
        self._active = active if active is not None else next(iter(self._views))
        self.activate(self._active)

    @property
    def active(self) -> str:
        return self._active

    @property
    def active_view(self) -> RaceView:
        return self._views[self._active]

    def __getitem__(self, name: str) -> RaceView:
        return self._views[name]

    def activate(self, name: str) -> RaceView:
        if name not in self._views:
            raise KeyError(name)
        for key, view in self._views.items():
            if key != name:
                view.controller.deactivate()
        self._active = name
        view = self._views[name]
        view.controller.activate()
        logger.debug("active view -> %s", name)
        return view

    def dispose(self) -> None:
        for view in self._views.values():
            view.dispose()


def time_step_from_scroll(fraction: float, time_steps: Sequence[int]) -> int:
    """
    Map a scroll position in [0, 1] to a time step.

    Returns ``first + round(fraction * (last - first))`` with halves rounded up; the
    fraction is clamped to [0, 1].

    Raises:
        ValueError: If `time_steps` is empty.

    Examples:
        >>> time_step_from_scroll(0.5, [2014, 2023])
        2019
        >>> time_step_from_scroll(7.0, [2014, 2023])
        2023
    """
    if not time_steps:
        raise ValueError("no time steps")
    first, last = min(time_steps), max(time_steps)
    f = 0.0 if math.isnan(fraction) else min(max(float(fraction), 0.0), 1.0)
    return first + int(math.floor(f * (last - first) + 0.5))
