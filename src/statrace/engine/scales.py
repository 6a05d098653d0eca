"""
Scale builder: value -> position and value -> color mappings for the current projection.

Overview
- LinearScale: continuous domain -> pixel range, with nice() and ticks() via matplotlib's
  MaxNLocator (1-2-5 steps, like d3).
- BandScale: ordinal keys -> evenly spaced bands (bar rows).
- SequentialColorScale: domain -> matplotlib sequential colormap (YlOrRd by default).
- build_scales(): derive the scale set for a ranking or trend layout.

Domain rules
- Ranking: position [0, max * headroom]; color [min, max] of the visible points, so color
  reflects standing within the current snapshot.
- Trend: x = extent(all time steps); y = extent(visible values), niced; color [min, max]
  over every time step, so colors stay comparable across the whole animation.
- Degenerate domains (min == max) map to the range midpoint / colormap midpoint.
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Sequence
from dataclasses import dataclass, field

import matplotlib
from matplotlib.colors import to_hex
from matplotlib.ticker import MaxNLocator

from statrace.core.constants import BAR_HEADROOM, BAR_PADDING, COLOR_SCHEME, MISSING_COLOR
from statrace.core.grammar import Metric, ProjectionMode, metric_from_value, mode_from_value
from statrace.core.schema import ProjectedPoint
from statrace.io.dataset import Indices

__all__ = [
    "Margins",
    "Layout",
    "LinearScale",
    "BandScale",
    "SequentialColorScale",
    "ScaleSet",
    "build_scales",
    "global_color_domain",
]

_STEPS = [1, 2, 5, 10]


@dataclass(frozen=True)
class Margins:
    top: float = 40.0
    right: float = 200.0
    bottom: float = 40.0
    left: float = 220.0


@dataclass(frozen=True)
class Layout:
    """Pixel canvas for one view; `margins` reserve room for labels and legends."""

    width: float = 960.0
    height: float = 600.0
    margins: Margins = field(default_factory=Margins)

    @property
    def x_range(self) -> tuple[float, float]:
        return (self.margins.left, self.width - self.margins.right)

    @property
    def y_range(self) -> tuple[float, float]:
        return (self.margins.top, self.height - self.margins.bottom)


def _finite_extent(values: Sequence[float]) -> tuple[float, float] | None:
    vals = [v for v in values if v is not None and math.isfinite(v)]
    if not vals:
        return None
    return (min(vals), max(vals))


@dataclass(frozen=True)
class LinearScale:
    """
    Linear map from `domain` to `range`.

    Examples:
        >>> s = LinearScale((0.0, 10.0), (0.0, 100.0))
        >>> s(2.5)
        25.0
        >>> LinearScale((5.0, 5.0), (0.0, 100.0))(5.0)
        50.0
    """

    domain: tuple[float, float]
    range: tuple[float, float]

    def normalize(self, value: float) -> float:
        d0, d1 = self.domain
        if d1 == d0:
            return 0.5
        return (value - d0) / (d1 - d0)

    def __call__(self, value: float) -> float:
        r0, r1 = self.range
        return r0 + self.normalize(value) * (r1 - r0)

    def invert(self, pixel: float) -> float:
        r0, r1 = self.range
        d0, d1 = self.domain
        t = 0.5 if r1 == r0 else (pixel - r0) / (r1 - r0)
        return d0 + t * (d1 - d0)

    def _locator_ticks(self, count: int) -> list[float]:
        lo, hi = sorted(self.domain)
        return [float(t) for t in MaxNLocator(nbins=count, steps=_STEPS).tick_values(lo, hi)]

    def ticks(self, count: int = 10) -> list[float]:
        """Nice tick values inside the domain (at most about `count` of them)."""
        lo, hi = sorted(self.domain)
        if lo == hi:
            return [lo]
        eps = (hi - lo) * 1e-9
        return [t for t in self._locator_ticks(count) if lo - eps <= t <= hi + eps]

    def nice(self, count: int = 10) -> LinearScale:
        """Extend the domain outward to round tick boundaries."""
        lo, hi = sorted(self.domain)
        if lo == hi:
            return self
        ticks = self._locator_ticks(count)
        step = ticks[1] - ticks[0] if len(ticks) > 1 else 0.0
        if step <= 0:
            return self
        nice_lo = math.floor(lo / step) * step
        nice_hi = math.ceil(hi / step) * step
        if self.domain[0] > self.domain[1]:
            return LinearScale((nice_hi, nice_lo), self.range)
        return LinearScale((nice_lo, nice_hi), self.range)


@dataclass(frozen=True)
class BandScale:
    """
    Ordinal band scale (d3.scaleBand semantics with equal inner/outer padding).

    Examples:
        >>> b = BandScale(("a", "b"), (0.0, 100.0), padding=0.0)
        >>> (b("a"), b("b"), b.bandwidth)
        (0.0, 50.0, 50.0)
    """

    domain: tuple[Hashable, ...]
    range: tuple[float, float]
    padding: float = BAR_PADDING

    @property
    def step(self) -> float:
        r0, r1 = self.range
        n = len(self.domain)
        return (r1 - r0) / max(1.0, n - self.padding + self.padding * 2)

    @property
    def bandwidth(self) -> float:
        return self.step * (1 - self.padding)

    def __call__(self, key: Hashable) -> float | None:
        try:
            i = self.domain.index(key)
        except ValueError:
            return None
        r0, r1 = self.range
        n = len(self.domain)
        start = r0 + (r1 - r0 - self.step * (n - self.padding)) * 0.5
        return start + self.step * i


@dataclass(frozen=True)
class SequentialColorScale:
    """
    Sequential color scale backed by a matplotlib colormap.

    Values outside the domain clamp to the end colors; non-finite values map to
    MISSING_COLOR.
    """

    domain: tuple[float, float]
    scheme: str = COLOR_SCHEME

    def normalize(self, value: float) -> float:
        d0, d1 = self.domain
        if d1 == d0:
            return 0.5
        return min(1.0, max(0.0, (value - d0) / (d1 - d0)))

    def __call__(self, value: float | None) -> str:
        if value is None or not math.isfinite(value):
            return MISSING_COLOR
        cmap = matplotlib.colormaps[self.scheme]
        return to_hex(cmap(self.normalize(value)))

    def stops(self, intervals: int = 10) -> list[tuple[float, str]]:
        """Legend gradient stops as (offset in [0, 1], color) pairs, intervals + 1 of them."""
        d0, d1 = self.domain
        n = max(int(intervals), 1)
        return [(i / n, self(d0 + (d1 - d0) * (i / n))) for i in range(n + 1)]


@dataclass(frozen=True)
class ScaleSet:
    """
    Scales for one render.

    Attributes:
        position (LinearScale): Ranking: value -> x. Trend: time step -> x.
        color (SequentialColorScale): Value -> fill/stroke color.
        band (BandScale | None): Ranking rows (entity -> y); None for trend.
        value (LinearScale | None): Trend value -> y; None for ranking.
    """

    position: LinearScale
    color: SequentialColorScale
    band: BandScale | None = None
    value: LinearScale | None = None


def global_color_domain(indices: Indices, metric: Metric | str) -> tuple[float, float]:
    """[min, max] of a metric across every time step; (0, 1) for empty indices."""
    m = metric_from_value(metric)
    ext = _finite_extent([m.value_of(r) for r in indices.all_records()])
    return ext if ext is not None else (0.0, 1.0)


def build_scales(
    points: Sequence[ProjectedPoint],
    metric: Metric | str,
    *,
    mode: ProjectionMode | str = ProjectionMode.RANKING,
    layout: Layout | None = None,
    indices: Indices | None = None,
    color_scope: str | None = None,
    headroom: float = BAR_HEADROOM,
    padding: float = BAR_PADDING,
    scheme: str = COLOR_SCHEME,
) -> ScaleSet:
    """
    Derive the scale set for a projection.

    Args:
        points (Sequence[ProjectedPoint]): Visible points (a Projection's points).
        metric (Metric | str): Metric the points carry.
        mode (ProjectionMode | str): Ranking (bars) or trend (lines) layout.
        layout (Layout | None): Canvas and margins; defaults to Layout().
        indices (Indices | None): Needed for the all-time-steps domains (trend color,
            trend x axis, and color_scope="all").
        color_scope (str | None): "visible" or "all"; None picks "visible" for ranking
            and "all" for trend.
        headroom (float): Ranking axis headroom multiplier.
        padding (float): Band padding for ranking rows.
        scheme (str): Matplotlib colormap name.

    Returns:
        ScaleSet: Finite scales even for empty or single-valued inputs.

    Examples:
        >>> from statrace.core.schema import ProjectedPoint, Record
        >>> pts = [
        ...     ProjectedPoint(entity=e, time_step=2020, value=v,
        ...                    record=Record(entity=e, time_step=2020, deaths=int(v), rate=0.0))
        ...     for e, v in (("B", 80.0), ("A", 50.0))
        ... ]
        >>> s = build_scales(pts, "deaths")
        >>> (s.color.domain, round(s.position.domain[1], 6))
        ((50.0, 80.0), 88.0)
    """
    m = metric_from_value(metric)
    md = mode_from_value(mode)
    lay = layout or Layout()
    scope = color_scope or ("visible" if md is ProjectionMode.RANKING else "all")

    visible = _finite_extent([p.value for p in points])
    if scope == "all" and indices is not None:
        color_domain = global_color_domain(indices, m)
    else:
        color_domain = visible if visible is not None else (0.0, 1.0)
    color = SequentialColorScale(color_domain, scheme=scheme)

    if md is ProjectionMode.RANKING:
        top = visible[1] if visible is not None else 0.0
        # Zero-valued snapshots keep a unit domain so empty bars stay at zero width.
        position_domain = (0.0, top * headroom) if top > 0 else (0.0, 1.0)
        keys = tuple(dict.fromkeys(p.entity for p in points))
        return ScaleSet(
            position=LinearScale(position_domain, lay.x_range),
            color=color,
            band=BandScale(keys, lay.y_range, padding=padding),
        )

    if indices is not None and indices.time_steps:
        x_domain = (float(indices.time_steps[0]), float(indices.time_steps[-1]))
    else:
        x_domain = _finite_extent([float(p.time_step) for p in points]) or (0.0, 1.0)
    y0, y1 = lay.y_range
    value = LinearScale(visible if visible is not None else (0.0, 1.0), (y1, y0)).nice()
    return ScaleSet(
        position=LinearScale(x_domain, lay.x_range),
        color=color,
        value=value,
    )
