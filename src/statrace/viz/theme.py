"""
Shared chart look: axis/legend/title defaults and the categorical entity palette.
"""

from __future__ import annotations

from collections.abc import Sequence

import altair as alt
import matplotlib
from matplotlib.colors import to_hex

__all__ = ["apply_chart_defaults", "entity_palette", "TEXT_COLOR", "GRID_COLOR"]

TEXT_COLOR = "#2c3e50"
GRID_COLOR = "#e0e0e0"

# tab10 then Set2 then Set3 (d3's category10 + Set2 + Set3 ordering).
_PALETTES = ("tab10", "Set2", "Set3")


def apply_chart_defaults(ch: alt.TopLevelMixin) -> alt.TopLevelMixin:
    """Uniform fonts, no view stroke."""
    return (
        ch.configure_axis(labelFontSize=12, titleFontSize=12, grid=True)
        .configure_legend(labelFontSize=12, titleFontSize=12)
        .configure_title(fontSize=14)
        .configure_view(strokeOpacity=0)
    )


def _palette() -> list[str]:
    colors: list[str] = []
    for name in _PALETTES:
        cmap = matplotlib.colormaps[name]
        colors.extend(to_hex(cmap(i)) for i in range(cmap.N))
    return colors


def entity_palette(entities: Sequence[str]) -> dict[str, str]:
    """
    Assign categorical colors by position (wrapping past the palette length).

    Examples:
        >>> entity_palette(["Ohio", "Utah"])
        {'Ohio': '#1f77b4', 'Utah': '#ff7f0e'}
    """
    colors = _palette()
    return {e: colors[i % len(colors)] for i, e in enumerate(entities)}
