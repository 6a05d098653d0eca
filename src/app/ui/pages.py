"""
Page renderers for the statrace Streamlit application.

Each page mounts its controls (player, metric toggle, entity filter) and one or more
charts. Animated charts are drawn inside a fragment that reruns every
FRAME_INTERVAL_S while a view is playing or a transition is in flight; every rerun
first advances the shared scheduler by elapsed wall time.

Notes:
    - Controls call RaceView/AnimationController methods through widget callbacks, so
      the engine state is updated before the script body re-reads it.
    - Play/pause triggers a full rerun so the fragment's refresh cadence is recomputed.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import streamlit as st

from statrace.core import Metric, ProjectionMode
from statrace.engine import RaceView, time_step_from_scroll, top_n
from statrace.io import Dataset, Indices, VizSettings
from statrace.viz import (
    bar_race_chart,
    choropleth_chart,
    color_legend_chart,
    line_race_chart,
    picked_names,
    placeholder_chart,
    progress_text,
    time_series_chart,
    top_bars_chart,
)

from .helpers import FRAME_INTERVAL_S, entity_options, headline_for, is_animating, speed_label
from .session import COMBINED_BAR, COMBINED_LINE, ViewSession

_METRICS = [m.value for m in Metric]


def _metric_label(value: str) -> str:
    return Metric(value).label


# ----------------------------
# Shared controls
# ----------------------------


def render_metric_toggle(view: RaceView, key: str) -> None:
    """Metric radio; switching re-projects with the new metric."""
    st.radio(
        "Metric",
        options=_METRICS,
        index=_METRICS.index(view.state.metric.value),
        format_func=_metric_label,
        horizontal=True,
        key=key,
        on_change=lambda: view.set_metric(st.session_state[key]),
    )


def render_entity_filter(view: RaceView, indices: Indices, key: str) -> None:
    """Multiselect with Select all / Clear all buttons, mirrored from the view state."""
    options = entity_options(indices)

    # The view state is the source of truth; callbacks update it before this rerun.
    st.session_state[key] = sorted(view.state.entity_filter)
    b1, b2, _ = st.columns([0.15, 0.15, 0.70])
    with b1:
        st.button("Select all", key=f"{key}_all", on_click=view.select_all)
    with b2:
        st.button("Clear all", key=f"{key}_none", on_click=view.clear_all)
    st.multiselect(
        "States",
        options=options,
        key=key,
        on_change=lambda: view.set_filter(st.session_state[key]),
    )


def render_player(view: RaceView, settings: VizSettings, key: str) -> None:
    """Play/pause, speed, and year scrub controls bound to one controller."""
    clock = view.clock
    c1, c2, c3 = st.columns([0.15, 0.35, 0.50])
    with c1:
        if st.button("Pause" if clock.is_playing else "Play", key=f"{key}_toggle"):
            view.controller.toggle()
            st.rerun()
    with c2:
        speed_key = f"{key}_speed"
        st.slider(
            "Speed (ms per year)",
            min_value=settings.min_interval_ms,
            max_value=settings.max_interval_ms,
            value=settings.clamp_interval(clock.interval_ms),
            step=100,
            key=speed_key,
            help=speed_label(clock.interval_ms),
            on_change=lambda: view.controller.set_speed(
                settings.clamp_interval(st.session_state[speed_key])
            ),
        )
    with c3:
        render_year_slider(view, f"{key}_year")


def render_year_slider(view: RaceView, key: str) -> None:
    clock = view.clock
    # Keep the slider in sync with ticks that happened since the last rerun.
    st.session_state[key] = clock.current_time_step
    st.slider(
        "Year",
        min_value=clock.bounds_min,
        max_value=clock.bounds_max,
        step=1,
        key=key,
        on_change=lambda: view.controller.set_time_step(int(st.session_state[key])),
    )


def _headline(view: RaceView) -> None:
    frame = view.last_frame
    c1, c2, c3 = st.columns(3)
    with c1:
        st.metric("Year", str(view.clock.current_time_step))
    with c2:
        st.caption(progress_text(view.clock))
    with c3:
        st.markdown(f"**{headline_for(frame, view.config.mode)}**")


def _animated(session: ViewSession, views: list[RaceView], draw: Callable[[], None]) -> None:
    run_every = FRAME_INTERVAL_S if is_animating(views, session.scheduler.now_ms) else None

    @st.fragment(run_every=run_every)
    def _frame() -> None:
        session.pump.pump(session.scheduler, time.monotonic())
        draw()

    _frame()


# ----------------------------
# Race pages
# ----------------------------


def _draw_race(view: RaceView, title: str) -> None:
    _headline(view)
    frame = view.last_frame
    if frame is None:
        st.altair_chart(placeholder_chart("Loading"), use_container_width=False)
        return
    marks = view.current_marks()
    if view.config.mode is ProjectionMode.RANKING:
        st.altair_chart(bar_race_chart(frame, marks, title=title), use_container_width=False)
    else:
        st.altair_chart(line_race_chart(frame, marks, title=title), use_container_width=False)
    if frame.scales is not None and view.config.mode is ProjectionMode.RANKING:
        st.altair_chart(
            color_legend_chart(frame.scales.color, frame.projection.metric),
            use_container_width=False,
        )


def render_race(
    session: ViewSession,
    view: RaceView,
    indices: Indices,
    settings: VizSettings,
    *,
    key: str,
    title: str,
) -> None:
    """Player, metric toggle, entity filter, and the animated race chart."""
    render_player(view, settings, key)
    c1, c2 = st.columns([0.35, 0.65])
    with c1:
        render_metric_toggle(view, f"{key}_metric")
    with c2:
        render_entity_filter(view, indices, f"{key}_states")
    _animated(session, [view], lambda: _draw_race(view, title))


def render_bar_race_page(session: ViewSession, indices: Indices, settings: VizSettings) -> None:
    render_race(
        session, session.bar_race, indices, settings, key="bar", title="Bar chart race"
    )


def render_line_race_page(session: ViewSession, indices: Indices, settings: VizSettings) -> None:
    render_race(
        session, session.line_race, indices, settings, key="line", title="Line graph race"
    )


def render_combined_page(session: ViewSession, indices: Indices, settings: VizSettings) -> None:
    """Race view toggle; only the selected race animates."""
    labels = {COMBINED_BAR: "Bar chart race", COMBINED_LINE: "Line graph race"}
    names = list(labels)
    st.radio(
        "Race view",
        options=names,
        index=names.index(session.combined.active),
        format_func=lambda n: labels[n],
        horizontal=True,
        key="combined_view",
        on_change=lambda: session.combined.activate(st.session_state["combined_view"]),
    )
    active = session.combined.active
    render_race(
        session,
        session.combined.active_view,
        indices,
        settings,
        key=f"combined_{active}",
        title=labels[active],
    )


# ----------------------------
# Dashboard
# ----------------------------


def render_dashboard_page(
    session: ViewSession,
    dataset: Dataset,
    indices: Indices,
    settings: VizSettings,
    *,
    topology: dict | None,
    centroids: dict[str, tuple[float, float]],
) -> None:
    """Map, top-N bars, and time series for one year (year slider, no player)."""
    view = session.dashboard
    c1, c2, c3 = st.columns([0.35, 0.40, 0.25])
    with c1:
        render_metric_toggle(view, "dash_metric")
    with c2:
        render_year_slider(view, "dash_year")
    with c3:
        st.toggle(
            "Comparison mode",
            value=view.state.comparison,
            key="dash_compare",
            on_change=lambda: view.set_comparison(st.session_state["dash_compare"]),
        )
    render_entity_filter(view, indices, "dash_states")

    frame = view.last_frame
    if frame is None:
        return
    _headline(view)
    if view.state.metric is Metric.RATE:
        st.caption("Age-adjusted rates are deaths per 100,000 population.")

    if frame.map_projection is None or frame.map_color is None or frame.map_projection.is_empty:
        st.altair_chart(placeholder_chart(frame.placeholder or "No data"))
        return

    pickable = view.state.comparison and topology is not None
    event = st.altair_chart(
        choropleth_chart(
            frame.map_projection,
            frame.map_color,
            topology,
            centroids=centroids,
            selected=view.state.entity_filter,
            width=frame.layout.width,
            height=500,
            clickable=pickable,
        ),
        use_container_width=False,
        on_select="rerun" if pickable else "ignore",
        key="dash_map",
    )
    if pickable:
        # A click toggles membership once; the same selection on later reruns is ignored.
        picks = picked_names(event.selection)
        if picks != st.session_state.get("dash_last_pick", []):
            st.session_state["dash_last_pick"] = picks
            for name in picks:
                view.toggle_entity(name)
            st.rerun()
    st.altair_chart(
        color_legend_chart(frame.map_color, frame.map_projection.metric),
        use_container_width=False,
    )

    left, right = st.columns(2)
    with left:
        st.subheader(f"Top {settings.top_n} states")
        if frame.scales is None:
            st.caption(frame.placeholder or "No data")
        else:
            st.altair_chart(
                top_bars_chart(top_n(frame.projection, settings.top_n), frame.scales, width=420),
                use_container_width=False,
            )
    with right:
        st.subheader("Trend over time")
        st.altair_chart(
            time_series_chart(
                dataset,
                indices,
                view.state.metric,
                view.state.entity_filter,
                comparison=view.state.comparison,
                current_time_step=frame.time_step,
                width=420,
            ),
            use_container_width=False,
        )


# ----------------------------
# Scroll map
# ----------------------------


def render_scroll_map_page(
    session: ViewSession,
    indices: Indices,
    *,
    topology: dict | None,
    centroids: dict[str, tuple[float, float]],
) -> None:
    """Map whose year follows a scroll-position slider (colors comparable across years)."""
    view = session.scroll_map
    render_metric_toggle(view, "scroll_metric")

    def _scrolled() -> None:
        fraction = float(st.session_state["scroll_pos"]) / 100.0
        view.controller.set_time_step(time_step_from_scroll(fraction, indices.time_steps))

    st.slider(
        "Scroll position",
        min_value=0,
        max_value=100,
        value=0,
        key="scroll_pos",
        on_change=_scrolled,
    )
    frame = view.last_frame
    if frame is None:
        return
    st.markdown(f"## {frame.time_step}")
    st.markdown(f"**{headline_for(frame, ProjectionMode.RANKING)}**")
    if frame.map_projection is None or frame.map_color is None or frame.map_projection.is_empty:
        st.altair_chart(placeholder_chart(frame.placeholder or "No data"))
        return
    st.altair_chart(
        choropleth_chart(
            frame.map_projection,
            frame.map_color,
            topology,
            centroids=centroids,
            width=frame.layout.width,
            height=frame.layout.height,
        ),
        use_container_width=False,
    )
    st.altair_chart(
        color_legend_chart(frame.map_color, frame.map_projection.metric),
        use_container_width=False,
    )
