"""
Shared UI helper utilities for the statrace Streamlit application.

This module centralizes small cross-cutting helpers (wall-clock pumping of the
animation scheduler, headline text, entity option lists, page activation) used by
multiple UI components. Keeping these here avoids circular imports and makes the
per-page modules leaner.

Notes:
    - All functions include Google-style docstrings.
    - This module contains no Streamlit state manipulation itself, so it is unit-tested
      without a running server.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import altair as alt

from statrace.core import ProjectionMode
from statrace.engine import ManualScheduler, RaceView, RenderFrame
from statrace.io import Indices
from statrace.viz import format_headline, format_trend_headline

# Frames per second the UI redraws at while any view is playing.
FRAME_INTERVAL_S = 0.1

# Longest stretch of wall time replayed in one pump (a backgrounded tab resumes
# without firing a burst of ticks).
MAX_CATCHUP_MS = 2000.0


def enable_vegafusion_optional() -> str | None:
    """Attempt to enable the VegaFusion accelerator for Altair if available.

    Returns:
        str | None: Short status message if enabling succeeded, otherwise None.

    Notes:
        This is an optional performance accelerator. If the environment does not
        have VegaFusion installed or configured, the function returns None.
    """
    try:
        alt.data_transformers.enable("vegafusion")
    except (ImportError, ValueError):
        return None
    return "VegaFusion enabled (optional accelerator)."


@dataclass
class WallClockPump:
    """Advance a ManualScheduler by elapsed wall time between UI reruns.

    Attributes:
        last_s (float | None): Wall time (seconds) of the previous pump; None before the first.
        max_catchup_ms (float): Upper bound on virtual time advanced per pump.

    Examples:
        >>> s = ManualScheduler()
        >>> pump = WallClockPump()
        >>> pump.pump(s, 10.0)
        0.0
        >>> pump.pump(s, 10.25)
        250.0
        >>> s.now_ms
        250.0
    """

    last_s: float | None = None
    max_catchup_ms: float = MAX_CATCHUP_MS

    def pump(self, scheduler: ManualScheduler, now_s: float) -> float:
        """Advance `scheduler` by the wall time since the last call.

        Args:
            scheduler (ManualScheduler): Shared virtual clock of the session's views.
            now_s (float): Current monotonic wall time in seconds.

        Returns:
            float: Milliseconds advanced (0 on the first call or if time went backwards).
        """
        if self.last_s is None:
            self.last_s = now_s
            return 0.0
        elapsed = max(0.0, (now_s - self.last_s) * 1000.0)
        self.last_s = now_s
        step = min(elapsed, self.max_catchup_ms)
        scheduler.advance(step)
        return step


def headline_for(frame: RenderFrame | None, mode: ProjectionMode) -> str:
    """Headline text for a frame ('Total: 1,234' / 'Average: 12.34').

    Args:
        frame (RenderFrame | None): Latest frame of a view.
        mode (ProjectionMode): Ranking pages show totals for counts; trend pages averages.

    Returns:
        str: Headline, or an empty string when there is nothing to summarize.
    """
    if frame is None:
        return ""
    if mode is ProjectionMode.TREND:
        return format_trend_headline(frame.summary)
    return format_headline(frame.summary)


def entity_options(indices: Indices) -> list[str]:
    """Sorted entity names for multiselect widgets."""
    return list(indices.entities)


def speed_label(interval_ms: int) -> str:
    """Human label for the speed slider.

    Examples:
        >>> speed_label(800)
        '0.80 s per year'
    """
    return f"{interval_ms / 1000:.2f} s per year"


def activate_page(pages: Mapping[str, Iterable[RaceView]], page: str) -> None:
    """Deactivate every view not on `page`; (re)activate the ones on it.

    Args:
        pages (Mapping[str, Iterable[RaceView]]): Views owned by each page.
        page (str): Page being displayed.

    Notes:
        Pages that manage their own active view (the combined race page) pass only the
        view that should animate.
    """
    for name, views in pages.items():
        if name == page:
            continue
        for view in views:
            view.controller.deactivate()
    for view in pages.get(page, ()):
        view.controller.activate()


def any_playing(views: Iterable[RaceView]) -> bool:
    """True when at least one active view is playing (the UI must keep redrawing)."""
    return any(v.controller.active and v.clock.is_playing for v in views)


def is_animating(views: Iterable[RaceView], now_ms: float) -> bool:
    """True while a view is playing or a transition is still in flight."""
    for v in views:
        if v.controller.active and v.clock.is_playing:
            return True
        run = v.pipeline.run
        if run is not None and not run.done(now_ms):
            return True
    return False
