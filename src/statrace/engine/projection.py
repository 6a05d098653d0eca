"""
Projection engine: the filtered, ordered view of the dataset for the current controls.

Overview
- project(): ranking snapshot (one time step) or trend history (per entity, up to a time step).
- top_n(): truncate a ranking (the dashboard bar chart keeps the top 15).
- summarize(): descriptive aggregates (sum, mean, min, max) for headline figures.
- average_trend(): one averaged value per time step across an entity selection.

Empty-filter semantics differ per mode and are kept that way:
- ranking: empty filter means all entities;
- trend: empty filter means no entities (the caller renders a "select entities" prompt).

All functions are pure; they never raise for a time step that has no data.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, replace

import polars as pl

from statrace.core.grammar import Metric, ProjectionMode, metric_from_value, mode_from_value
from statrace.core.schema import ProjectedPoint, Record
from statrace.io.dataset import Dataset, Indices, build_indices

__all__ = [
    "Projection",
    "Summary",
    "AveragePoint",
    "project",
    "top_n",
    "summarize",
    "average_trend",
]


@dataclass(frozen=True)
class Projection:
    """
    Result of project().

    Attributes:
        mode (ProjectionMode): Ordering/filter semantics used.
        time_step (int): Current time step.
        metric (Metric): Metric that produced `value`.
        points (tuple[ProjectedPoint, ...]): Ordered points (see project()).
    """

    mode: ProjectionMode
    time_step: int
    metric: Metric
    points: tuple[ProjectedPoint, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def entities(self) -> tuple[str, ...]:
        """Distinct entity keys in projection order."""
        return tuple(dict.fromkeys(p.entity for p in self.points))

    def values(self) -> list[float]:
        return [p.value for p in self.points]

    def series(self) -> dict[str, tuple[ProjectedPoint, ...]]:
        """Points grouped per entity, preserving order (trend rendering)."""
        out: dict[str, list[ProjectedPoint]] = {}
        for p in self.points:
            out.setdefault(p.entity, []).append(p)
        return {k: tuple(v) for k, v in out.items()}

    def rank_of(self, entity: str) -> int | None:
        """1-based position of an entity in a ranking, or None if absent."""
        for i, key in enumerate(self.entities):
            if key == entity:
                return i + 1
        return None


def _point(record: Record, metric: Metric) -> ProjectedPoint:
    return ProjectedPoint(
        entity=record.entity,
        time_step=record.time_step,
        value=metric.value_of(record),
        record=record,
    )


def project(
    dataset: Dataset,
    indices: Indices | None,
    time_step: int,
    metric: Metric | str,
    entity_filter: Collection[str] = (),
    mode: ProjectionMode | str = ProjectionMode.RANKING,
) -> Projection:
    """
    Project the dataset for the current controls.

    Args:
        dataset (Dataset): Loaded rows.
        indices (Indices | None): Prebuilt lookups; built from `dataset` when None.
        time_step (int): Current time step.
        metric (Metric | str): Selected metric.
        entity_filter (Collection[str]): Selected entity names (may be empty).
        mode (ProjectionMode | str): "ranking" or "trend".

    Returns:
        Projection: Ranking points sorted by value descending with entity ascending on
        ties; or trend points grouped per entity (entities ascending), each group
        ascending by time step with ``time_step <= time_step``. Empty when nothing matches.

    Examples:
        >>> from statrace.core.schema import Record
        >>> from statrace.io.dataset import Dataset
        >>> ds = Dataset([
        ...     Record(entity="A", time_step=2020, deaths=50, rate=1.0),
        ...     Record(entity="B", time_step=2020, deaths=80, rate=2.0),
        ... ])
        >>> [p.entity for p in project(ds, None, 2020, "deaths").points]
        ['B', 'A']
    """
    idx = indices if indices is not None else build_indices(dataset)
    m = metric_from_value(metric)
    md = mode_from_value(mode)
    selected = set(entity_filter)

    if md is ProjectionMode.RANKING:
        rows = idx.records_at(time_step)
        if selected:
            rows = tuple(r for r in rows if r.entity in selected)
        points = sorted((_point(r, m) for r in rows), key=lambda p: (-p.value, p.entity))
        return Projection(md, time_step, m, tuple(points))

    trend: list[ProjectedPoint] = []
    for entity in sorted(selected):
        history = sorted(
            (r for r in idx.history(entity) if r.time_step <= time_step),
            key=lambda r: r.time_step,
        )
        trend.extend(_point(r, m) for r in history)
    return Projection(md, time_step, m, tuple(trend))


def top_n(projection: Projection, n: int) -> Projection:
    """Keep the first n points of a projection (n < 1 keeps none)."""
    return replace(projection, points=projection.points[: max(n, 0)])


@dataclass(frozen=True)
class Summary:
    """
    Descriptive aggregates for one time step.

    Attributes:
        count (int): Rows aggregated.
        total (float): Sum of the metric.
        mean (float): Mean of the metric.
        minimum (float): Smallest value.
        maximum (float): Largest value.
    """

    time_step: int
    metric: Metric
    count: int
    total: float
    mean: float
    minimum: float
    maximum: float

    @property
    def headline(self) -> float:
        """Counts are summed, rates averaged."""
        return self.total if self.metric.is_count else self.mean


def _filtered_frame(dataset: Dataset, entity_filter: Collection[str]) -> pl.DataFrame:
    df = dataset.frame
    if entity_filter:
        df = df.filter(pl.col("entity").is_in(list(entity_filter)))
    return df


def summarize(
    dataset: Dataset,
    time_step: int,
    metric: Metric | str,
    entity_filter: Collection[str] = (),
) -> Summary | None:
    """
    Aggregate one time step (empty filter = all entities).

    Returns:
        Summary | None: None when no rows match.
    """
    m = metric_from_value(metric)
    df = _filtered_frame(dataset, entity_filter).filter(pl.col("time_step") == time_step)
    if df.height == 0:
        return None
    agg = df.select(
        pl.col(m.value).sum().alias("total"),
        pl.col(m.value).mean().alias("mean"),
        pl.col(m.value).min().alias("minimum"),
        pl.col(m.value).max().alias("maximum"),
    ).row(0, named=True)
    return Summary(
        time_step=time_step,
        metric=m,
        count=df.height,
        total=float(agg["total"]),
        mean=float(agg["mean"]),
        minimum=float(agg["minimum"]),
        maximum=float(agg["maximum"]),
    )


@dataclass(frozen=True)
class AveragePoint:
    """Mean of a metric across `entities` entities at one time step."""

    time_step: int
    value: float
    entities: int


def average_trend(
    dataset: Dataset,
    metric: Metric | str,
    entity_filter: Collection[str] = (),
) -> list[AveragePoint]:
    """
    Averaged series across the selected entities (empty filter = all entities).

    Time steps where no selected entity has a row are omitted.
    """
    m = metric_from_value(metric)
    df = _filtered_frame(dataset, entity_filter)
    if df.height == 0:
        return []
    agg = (
        df.group_by("time_step")
        .agg(pl.col(m.value).mean().alias("value"), pl.len().alias("entities"))
        .sort("time_step")
    )
    return [
        AveragePoint(time_step=int(t), value=float(v), entities=int(n))
        for t, v, n in agg.select(["time_step", "value", "entities"]).iter_rows()
    ]
