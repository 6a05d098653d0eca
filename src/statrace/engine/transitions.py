"""
Render/transition pipeline: keyed enter/update/exit reconciliation without a drawing surface.

Overview
- VisualAttrs: per-shape visual state (x, y, width, height, color, opacity).
- layout_bars() / layout_points(): map a projection through its scales to target attrs.
- reconcile(): partition previous vs target keys into enter, update, and exit transitions.
- TransitionRun: samples every element at an elapsed time (eased interpolation).
- TransitionPipeline: per-view owner of visual state; a render that arrives mid-flight
  re-targets from the sampled in-flight attrs, so one element never runs two transitions.

Timing
- enter/update: 800 ms, cubic-out; exit: 400 ms, cubic-in (shorter, clears promptly).
- Entering shapes start collapsed (zero width, zero opacity) at the baseline.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Literal

from matplotlib.colors import to_hex, to_rgb

from statrace.core.constants import ENTER_DURATION_MS, EXIT_DURATION_MS

from .projection import Projection
from .scales import ScaleSet

__all__ = [
    "VisualAttrs",
    "Easing",
    "EASINGS",
    "TransitionTiming",
    "Transition",
    "Reconciliation",
    "TransitionRun",
    "TransitionPipeline",
    "reconcile",
    "layout_bars",
    "layout_points",
    "point_key",
]

Kind = Literal["enter", "update", "exit"]
Easing = Callable[[float], float]


def cubic_out(t: float) -> float:
    t -= 1.0
    return t * t * t + 1.0


def cubic_in(t: float) -> float:
    return t * t * t


def linear(t: float) -> float:
    return t


EASINGS: dict[str, Easing] = {
    "cubic_out": cubic_out,
    "cubic_in": cubic_in,
    "linear": linear,
}


@dataclass(frozen=True)
class VisualAttrs:
    x: float
    y: float
    width: float
    height: float
    color: str
    opacity: float = 1.0

    def collapsed(self, baseline_x: float | None = None) -> VisualAttrs:
        """The zero state: no width, transparent, optionally pinned to a baseline x."""
        return replace(
            self,
            x=self.x if baseline_x is None else baseline_x,
            width=0.0,
            opacity=0.0,
        )


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _lerp_color(a: str, b: str, t: float) -> str:
    if a == b:
        return a
    ra, rb = to_rgb(a), to_rgb(b)
    return to_hex(tuple(_lerp(x, y, t) for x, y in zip(ra, rb, strict=True)))


def interpolate(start: VisualAttrs, end: VisualAttrs, t: float) -> VisualAttrs:
    if t <= 0.0:
        return start
    if t >= 1.0:
        return end
    return VisualAttrs(
        x=_lerp(start.x, end.x, t),
        y=_lerp(start.y, end.y, t),
        width=_lerp(start.width, end.width, t),
        height=_lerp(start.height, end.height, t),
        color=_lerp_color(start.color, end.color, t),
        opacity=_lerp(start.opacity, end.opacity, t),
    )


@dataclass(frozen=True)
class TransitionTiming:
    enter_ms: float = ENTER_DURATION_MS
    update_ms: float = ENTER_DURATION_MS
    exit_ms: float = EXIT_DURATION_MS
    enter_easing: str = "cubic_out"
    update_easing: str = "cubic_out"
    exit_easing: str = "cubic_in"

    def __post_init__(self) -> None:
        if self.exit_ms > min(self.enter_ms, self.update_ms):
            raise ValueError("exit transitions must be shorter than enter/update")
        for name in (self.enter_easing, self.update_easing, self.exit_easing):
            if name not in EASINGS:
                raise ValueError(f"unknown easing {name!r}")


@dataclass(frozen=True)
class Transition:
    key: str
    kind: Kind
    start: VisualAttrs
    end: VisualAttrs
    duration_ms: float
    easing: str

    def at(self, elapsed_ms: float) -> VisualAttrs:
        if self.duration_ms <= 0:
            return self.end
        t = min(max(elapsed_ms / self.duration_ms, 0.0), 1.0)
        return interpolate(self.start, self.end, EASINGS[self.easing](t))


@dataclass(frozen=True)
class Reconciliation:
    """Enter/update/exit partition by key membership; `order` is the target key order."""

    enter: tuple[Transition, ...] = ()
    update: tuple[Transition, ...] = ()
    exit: tuple[Transition, ...] = ()
    order: tuple[str, ...] = ()

    def settled(self) -> dict[str, VisualAttrs]:
        """Visual state once every transition completes (exited keys removed)."""
        ends = {tr.key: tr.end for tr in (*self.enter, *self.update)}
        keys = self.order or tuple(ends)
        return {k: ends[k] for k in keys if k in ends}

    @property
    def transitions(self) -> tuple[Transition, ...]:
        return (*self.enter, *self.update, *self.exit)

    @property
    def duration_ms(self) -> float:
        return max((tr.duration_ms for tr in self.transitions), default=0.0)

    def keys(self, kind: Kind) -> list[str]:
        return [tr.key for tr in getattr(self, kind)]


def reconcile(
    previous: Mapping[str, VisualAttrs],
    targets: Mapping[str, VisualAttrs],
    timing: TransitionTiming | None = None,
    *,
    baseline_x: float | None = None,
) -> Reconciliation:
    """
    Partition the previous visual state against new targets by key.

    Args:
        previous (Mapping[str, VisualAttrs]): Currently displayed attrs per key.
        targets (Mapping[str, VisualAttrs]): Target attrs per key (projection order).
        timing (TransitionTiming | None): Durations/easings; defaults to 800/800/400 ms.
        baseline_x (float | None): x the collapsed state is pinned to (bar baseline).

    Returns:
        Reconciliation: enter (new keys, from the collapsed target), update (shared keys,
        previous -> target), exit (dropped keys, previous -> collapsed previous).
    """
    tm = timing or TransitionTiming()
    enter: list[Transition] = []
    update: list[Transition] = []
    for key, end in targets.items():
        if key in previous:
            update.append(
                Transition(key, "update", previous[key], end, tm.update_ms, tm.update_easing)
            )
        else:
            enter.append(
                Transition(
                    key, "enter", end.collapsed(baseline_x), end, tm.enter_ms, tm.enter_easing
                )
            )
    exits = [
        Transition(key, "exit", attrs, attrs.collapsed(baseline_x), tm.exit_ms, tm.exit_easing)
        for key, attrs in previous.items()
        if key not in targets
    ]
    return Reconciliation(tuple(enter), tuple(update), tuple(exits), order=tuple(targets))


@dataclass(frozen=True)
class TransitionRun:
    """A reconciliation started at `started_ms`."""

    reconciliation: Reconciliation
    started_ms: float

    def sample(self, now_ms: float) -> dict[str, VisualAttrs]:
        """Displayed attrs at `now_ms`; exited keys disappear once their exit completes."""
        elapsed = now_ms - self.started_ms
        out: dict[str, VisualAttrs] = {}
        for tr in self.reconciliation.transitions:
            if tr.kind == "exit" and elapsed >= tr.duration_ms:
                continue
            out[tr.key] = tr.at(elapsed)
        return out

    def done(self, now_ms: float) -> bool:
        return now_ms - self.started_ms >= self.reconciliation.duration_ms


@dataclass
class TransitionPipeline:
    """
    Per-view visual state owner.

    Notes:
        - render() supersedes any in-flight run: the sampled in-flight attrs become the
          previous state of the new reconciliation.
        - Mutated only through render()/clear() from the owning view's control flow.
    """

    timing: TransitionTiming = field(default_factory=TransitionTiming)
    _run: TransitionRun | None = field(default=None, init=False)
    _settled: dict[str, VisualAttrs] = field(default_factory=dict, init=False)

    @property
    def settled(self) -> dict[str, VisualAttrs]:
        return dict(self._settled)

    @property
    def run(self) -> TransitionRun | None:
        return self._run

    def current(self, now_ms: float) -> dict[str, VisualAttrs]:
        if self._run is None:
            return dict(self._settled)
        return self._run.sample(now_ms)

    def render(
        self,
        targets: Mapping[str, VisualAttrs],
        now_ms: float,
        *,
        baseline_x: float | None = None,
    ) -> TransitionRun:
        previous = self.current(now_ms)
        rec = reconcile(previous, targets, self.timing, baseline_x=baseline_x)
        self._run = TransitionRun(rec, now_ms)
        self._settled = rec.settled()
        return self._run

    def clear(self) -> None:
        self._run = None
        self._settled = {}


def layout_bars(projection: Projection, scales: ScaleSet) -> dict[str, VisualAttrs]:
    """Bar rows for a ranking projection, keyed by entity."""
    if scales.band is None:
        raise ValueError("layout_bars needs a band scale (ranking scales)")
    x0 = scales.position.range[0]
    out: dict[str, VisualAttrs] = {}
    for p in projection.points:
        y = scales.band(p.entity)
        if y is None:
            continue
        out[p.entity] = VisualAttrs(
            x=x0,
            y=y,
            width=max(scales.position(p.value) - x0, 0.0),
            height=scales.band.bandwidth,
            color=scales.color(p.value),
            opacity=1.0,
        )
    return out


def point_key(entity: str, time_step: int) -> str:
    return f"{entity}|{time_step}"


def layout_points(
    projection: Projection, scales: ScaleSet, *, radius: float = 4.0
) -> dict[str, VisualAttrs]:
    """Trend markers keyed by entity and time step; width/height carry the diameter."""
    if scales.value is None:
        raise ValueError("layout_points needs a value scale (trend scales)")
    out: dict[str, VisualAttrs] = {}
    for p in projection.points:
        out[point_key(p.entity, p.time_step)] = VisualAttrs(
            x=scales.position(p.time_step),
            y=scales.value(p.value),
            width=radius * 2,
            height=radius * 2,
            color=scales.color(p.value),
        )
    return out
