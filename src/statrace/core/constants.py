"""
statrace core defaults.

Defines the fixed input column names, animation timings, and layout defaults consumed by
downstream layers. This module is zero-IO and uses only the Python standard library.

Notes:
    - Changing a timing here changes every view; per-run overrides go through
      statrace.io.config.VizSettings.
    - Transition durations mirror the race pages: enter/update 800 ms, exit 400 ms.
"""

from __future__ import annotations

__all__ = [
    "CSV_YEAR",
    "CSV_STATE",
    "CSV_DEATHS",
    "CSV_RATE",
    "CSV_URL",
    "REQUIRED_COLUMNS",
    "DEFAULT_INTERVAL_MS",
    "MIN_INTERVAL_MS",
    "MAX_INTERVAL_MS",
    "ENTER_DURATION_MS",
    "EXIT_DURATION_MS",
    "BAR_HEADROOM",
    "BAR_PADDING",
    "TOP_N",
    "COLOR_SCHEME",
    "MISSING_COLOR",
    "LEGEND_STOPS",
    "GEO_PRIMARY_URL",
    "GEO_FALLBACK_URL",
    "GEO_OBJECT",
]

# Input CSV header names (fixed by the published data table).
CSV_YEAR: str = "Year"
CSV_STATE: str = "State"
CSV_DEATHS: str = "Deaths"
CSV_RATE: str = "Age Adjusted Rate"
CSV_URL: str = "URL"

REQUIRED_COLUMNS: tuple[str, ...] = (CSV_YEAR, CSV_STATE, CSV_DEATHS, CSV_RATE)

# Animation player (milliseconds per time step).
DEFAULT_INTERVAL_MS: int = 800
MIN_INTERVAL_MS: int = 100
MAX_INTERVAL_MS: int = 2000

# Transition timing; exit must stay shorter than enter/update.
ENTER_DURATION_MS: int = 800
EXIT_DURATION_MS: int = 400

# Ranking layout.
BAR_HEADROOM: float = 1.1
BAR_PADDING: float = 0.3
TOP_N: int = 15

# Matplotlib colormap name; matches d3.interpolateYlOrRd.
COLOR_SCHEME: str = "YlOrRd"
MISSING_COLOR: str = "#e0e0e0"
LEGEND_STOPS: int = 10

GEO_PRIMARY_URL: str = "https://cdn.jsdelivr.net/npm/us-atlas@3/states-10m.json"
GEO_FALLBACK_URL: str = "https://raw.githubusercontent.com/topojson/us-atlas/master/states-10m.json"
GEO_OBJECT: str = "states"
