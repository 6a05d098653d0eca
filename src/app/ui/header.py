"""
Header (global controls) for the statrace Streamlit application.

This module renders the top-of-page controls, including:
- Data source (CSV path or URL) with a reload button.
- Page picker (Dashboard, Bar race, Line race, Combined race, Scroll map).
- Cache preferences panel.
- Construction of a CacheConfig used by data loaders.

Notes:
    - Avoids performing heavy IO directly; app.data owns loading and caching.
"""

from __future__ import annotations

from dataclasses import dataclass

import streamlit as st

from app.data import CacheConfig

from .helpers import enable_vegafusion_optional

PAGES: tuple[str, ...] = ("Dashboard", "Bar race", "Line race", "Combined race", "Scroll map")


@dataclass(frozen=True)
class HeaderState:
    """Selections made in the header.

    Attributes:
        data_path (str): CSV path or URL to load.
        page (str): One of PAGES.
        cache (CacheConfig): Loader cache behavior.
        reload_bump (int): Incremented by the Reload button; part of the session view key.
    """

    data_path: str
    page: str
    cache: CacheConfig
    reload_bump: int


def render_header(*, default_data: str) -> HeaderState:
    """Render the global header and return the selected data source, page, and cache config.

    Args:
        default_data (str): Initial data path (CLI flag or VizSettings.data_path).

    Returns:
        HeaderState: Current selections.
    """
    st.markdown("### Drug Overdose Deaths by State")
    accel_msg = enable_vegafusion_optional()
    if accel_msg:
        st.caption(accel_msg)

    # Session defaults
    if "data_path" not in st.session_state:
        st.session_state["data_path"] = default_data
    if "reload_bump" not in st.session_state:
        st.session_state["reload_bump"] = 0
    if "cache_ttl" not in st.session_state:
        st.session_state["cache_ttl"] = 600
    if "cache_persist" not in st.session_state:
        st.session_state["cache_persist"] = False

    c1, c2, c3 = st.columns([0.45, 0.40, 0.15])

    with c1:
        data_path = st.text_input(
            "Data (CSV path or URL)",
            value=st.session_state["data_path"],
            key="data_path_header",
        )
        st.session_state["data_path"] = data_path.strip() or default_data
        if st.button("Reload"):
            st.session_state["reload_bump"] += 1
            st.cache_data.clear()
            st.rerun()

    with c2:
        page = st.radio("Page", options=list(PAGES), horizontal=True, key="page_header")

    with c3:
        with st.expander("Cache", expanded=False):
            ttl = st.number_input(
                "Cache TTL (seconds)",
                min_value=0,
                value=int(st.session_state["cache_ttl"]),
                step=60,
                help="0 disables TTL",
                key="cache_ttl_header",
            )
            persist = st.checkbox(
                "Persist to disk",
                value=bool(st.session_state["cache_persist"]),
                key="cache_persist_header",
            )
            st.session_state["cache_ttl"] = int(ttl)
            st.session_state["cache_persist"] = bool(persist)

    cache_cfg = CacheConfig(
        ttl=int(st.session_state["cache_ttl"]) if int(st.session_state["cache_ttl"]) > 0 else None,
        persist=bool(st.session_state["cache_persist"]),
    )
    return HeaderState(
        data_path=st.session_state["data_path"],
        page=str(page),
        cache=cache_cfg,
        reload_bump=int(st.session_state["reload_bump"]),
    )
