"""
statrace App UI package.

This package contains the decomposed Streamlit UI. It exposes high-level
orchestration and focused modules for separate concerns.

Modules:
    - app: Streamlit application orchestrator (streamlit_app).
    - header: Global header (data source, cache preferences, page picker).
    - pages: One render function per page (dashboard, races, scroll map).
    - session: Per-session view graph (one shared scheduler, every page's views).
    - helpers: Small cross-cutting helpers (scheduler pumping, headlines, activation).

Usage:
    from app.ui import streamlit_app
    streamlit_app(default_data="data-table.csv")
"""

from __future__ import annotations

from .app import streamlit_app
from .header import render_header

__all__ = [
    "streamlit_app",
    "render_header",
]
