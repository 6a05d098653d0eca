"""
Per-session view graph for the statrace Streamlit UI.

One ViewSession is created per (browser session, data source) and stored in
st.session_state. It owns a single ManualScheduler shared by all views; the UI
advances it by elapsed wall time on every rerun (WallClockPump), so timer semantics
(tick interval, cancel on pause, restart on speed change) stay those of the engine.

Notes:
    - Pure Python; no Streamlit calls, so the graph is unit-tested directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from statrace.core import ViewKind
from statrace.engine import ManualScheduler, RaceView, ViewConfig, ViewGroup
from statrace.io import Dataset, Indices, VizSettings

from .helpers import WallClockPump

COMBINED_BAR = "bar"
COMBINED_LINE = "line"


@dataclass
class ViewSession:
    """Views of every page plus their shared scheduler.

    Attributes:
        scheduler (ManualScheduler): Virtual clock driving every controller.
        dashboard (RaceView): Year-slider dashboard (paused; no player).
        bar_race (RaceView): Standalone bar chart race.
        line_race (RaceView): Standalone line graph race.
        combined (ViewGroup): Combined race page; only its active view animates.
        scroll_map (RaceView): Scroll-driven map (paused; scrubbed by scroll position).
        pump (WallClockPump): Wall time -> scheduler bridge.
    """

    scheduler: ManualScheduler
    dashboard: RaceView
    bar_race: RaceView
    line_race: RaceView
    combined: ViewGroup
    scroll_map: RaceView
    pump: WallClockPump = field(default_factory=WallClockPump)

    def pages(self) -> dict[str, list[RaceView]]:
        """Views that animate on each page (see helpers.activate_page)."""
        return {
            "Dashboard": [self.dashboard],
            "Bar race": [self.bar_race],
            "Line race": [self.line_race],
            "Combined race": [self.combined.active_view],
            "Scroll map": [self.scroll_map],
        }

    def all_views(self) -> list[RaceView]:
        return [
            self.dashboard,
            self.bar_race,
            self.line_race,
            self.combined[COMBINED_BAR],
            self.combined[COMBINED_LINE],
            self.scroll_map,
        ]

    def dispose(self) -> None:
        for view in self.all_views():
            view.dispose()


def build_session(
    dataset: Dataset,
    indices: Indices,
    settings: VizSettings,
    *,
    width: float = 960.0,
) -> ViewSession:
    """Create every page's views over one shared dataset.

    Args:
        dataset (Dataset): Loaded rows (shared read-only).
        indices (Indices): Lookups (shared read-only).
        settings (VizSettings): Timings, headroom, color scheme.
        width (float): Canvas width for race views.

    Returns:
        ViewSession: Race views start Playing; the dashboard and scroll map start Paused.
    """
    scheduler = ManualScheduler()

    def make(kind: ViewKind, *, playing: bool = True) -> RaceView:
        view = RaceView(
            dataset,
            indices,
            ViewConfig.for_kind(kind, width=width),
            scheduler=scheduler,
            settings=settings,
            autostart=playing,
        )
        if not playing:
            view.controller.pause()
        return view

    combined = ViewGroup(
        {
            COMBINED_BAR: make(ViewKind.BAR_RACE),
            COMBINED_LINE: make(ViewKind.LINE_RACE),
        },
        active=COMBINED_BAR,
    )
    return ViewSession(
        scheduler=scheduler,
        dashboard=make(ViewKind.DASHBOARD, playing=False),
        bar_race=make(ViewKind.BAR_RACE),
        line_race=make(ViewKind.LINE_RACE),
        combined=combined,
        scroll_map=make(ViewKind.SCROLL_MAP, playing=False),
    )
