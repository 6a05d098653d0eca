"""
Streamlit application orchestrator for statrace.

This module composes the global header and the selected page while delegating
supporting concerns to focused modules under app.ui.* (header, pages, session,
helpers).

Responsibilities:
    - Configure Streamlit page.
    - Resolve VizSettings (env > TOML > defaults, CLI flags on top).
    - Load the dataset via app.data with configurable caching.
    - Keep one ViewSession per (session, data source) in st.session_state.
    - Activate the selected page's views and mount the page.

Notes:
    - Load errors are terminal for the page: the error is shown and nothing is drawn.
    - A geography failure only affects map charts, which show a placeholder.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace

import streamlit as st

from app.data import load_dataset, load_geo, load_indices
from statrace.io import ConfigError, LoadError, VizSettings

from .header import render_header
from .helpers import activate_page
from .pages import (
    render_bar_race_page,
    render_combined_page,
    render_dashboard_page,
    render_line_race_page,
    render_scroll_map_page,
)
from .session import ViewSession, build_session

logger = logging.getLogger(__name__)

_SESSION_KEY = "view_session"
_SESSION_ID_KEY = "view_session_id"


def _settings(default_data: str | None, default_interval_ms: int | None) -> VizSettings:
    settings = VizSettings.load()
    if default_data:
        settings = replace(settings, data_path=default_data)
    if default_interval_ms is not None:
        settings = replace(settings, interval_ms=settings.clamp_interval(default_interval_ms))
    return settings


def streamlit_app(
    default_data: str | None = None,
    default_interval_ms: int | None = None,
) -> None:
    """Render the statrace Streamlit application.

    Args:
        default_data (str | None): Optional CSV path/URL overriding VizSettings.data_path.
        default_interval_ms (int | None): Optional initial tick interval.

    Returns:
        None

    Notes:
        - Views are rebuilt when the data source or the Reload counter changes, so each
          dataset gets fresh clocks and visual state.
    """
    st.set_page_config(page_title="statrace", layout="wide")

    try:
        settings = _settings(default_data, default_interval_ms)
    except ConfigError as e:
        st.error(f"Invalid configuration: {e}")
        return

    header = render_header(default_data=settings.data_path)

    try:
        with st.spinner("Loading data ..."):
            dataset = load_dataset(
                header.data_path, timeout_s=settings.data_timeout_s, cfg=header.cache
            )
    except LoadError as e:
        st.error(f"Failed to load {header.data_path}: {e}")
        return
    indices = load_indices(dataset)
    if not indices.time_steps:
        st.error("The dataset has no rows.")
        return

    session_id = f"{header.data_path}#{header.reload_bump}"
    session: ViewSession | None = st.session_state.get(_SESSION_KEY)
    if session is None or st.session_state.get(_SESSION_ID_KEY) != session_id:
        if session is not None:
            session.dispose()
        session = build_session(dataset, indices, settings)
        st.session_state[_SESSION_KEY] = session
        st.session_state[_SESSION_ID_KEY] = session_id
        logger.info("built views for %s (%d rows)", header.data_path, len(dataset))

    session.pump.pump(session.scheduler, time.monotonic())
    activate_page(session.pages(), header.page)

    if header.page in ("Dashboard", "Scroll map"):
        geo = load_geo(
            settings.geo_primary_url,
            settings.geo_fallback_url,
            timeout_s=settings.geo_timeout_s,
            cfg=header.cache,
        )
        if not geo.available:
            st.warning("Map unavailable: the geography reference could not be loaded.")
        if header.page == "Dashboard":
            render_dashboard_page(
                session,
                dataset,
                indices,
                settings,
                topology=geo.topology,
                centroids=geo.centroids,
            )
        else:
            render_scroll_map_page(
                session, indices, topology=geo.topology, centroids=geo.centroids
            )
    elif header.page == "Bar race":
        render_bar_race_page(session, indices, settings)
    elif header.page == "Line race":
        render_line_race_page(session, indices, settings)
    else:
        render_combined_page(session, indices, settings)
