"""
Dataset and Indices for statrace.

Provides the immutable Dataset (ordered Records plus a Polars frame for descriptive
aggregates) and the derived, read-only Indices used by the projection engine.

Source of truth
- Row model: statrace.core.schema.Record
- Loading/parsing: statrace.io.read.load (this module performs no IO)

Import DAG discipline:
- Depends only on stdlib, polars, and statrace.core.*.
- Must not import higher layers (engine, viz, app).

Notes
- Dataset and Indices are shared by every open view; neither exposes mutators.
- Indices are a pure function of the Dataset (build_indices).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

import polars as pl

from statrace.core.schema import Record

from .errors import LoadError

__all__ = [
    "Dataset",
    "Indices",
    "build_indices",
    "time_bounds",
]

FRAME_SCHEMA: dict[str, object] = {
    "entity": pl.Utf8,
    "time_step": pl.Int64,
    "deaths": pl.Int64,
    "rate": pl.Float64,
    "url": pl.Utf8,
}


class Dataset:
    """
    Ordered, immutable sequence of Records.

    Notes:
        - Construction enforces at most one Record per (entity, time_step); a duplicate
          raises LoadError because it can only come from malformed input.
        - `frame` is built lazily on first access and cached.
    """

    def __init__(self, records: Iterable[Record], *, source: str | None = None) -> None:
        """
        Initialize a dataset from validated records.

        Args:
            records (Iterable[Record]): Rows in source order.
            source (str | None): Optional description of where the rows came from.

        Raises:
            LoadError: If two records share the same (entity, time_step).
        """
        rows = tuple(records)
        seen: set[tuple[str, int]] = set()
        for r in rows:
            if r.key in seen:
                raise LoadError(f"duplicate row for entity={r.entity!r} time_step={r.time_step}")
            seen.add(r.key)
        self._records = rows
        self._frame: pl.DataFrame | None = None
        self.source = source

    @property
    def records(self) -> tuple[Record, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __repr__(self) -> str:
        return f"Dataset(rows={len(self._records)}, source={self.source!r})"

    @property
    def frame(self) -> pl.DataFrame:
        """Polars view with columns entity, time_step, deaths, rate, url."""
        if self._frame is None:
            self._frame = pl.DataFrame(
                {
                    "entity": [r.entity for r in self._records],
                    "time_step": [r.time_step for r in self._records],
                    "deaths": [r.deaths for r in self._records],
                    "rate": [r.rate for r in self._records],
                    "url": [r.url for r in self._records],
                },
                schema=FRAME_SCHEMA,  # type: ignore[arg-type]
            )
        return self._frame


@dataclass(frozen=True)
class Indices:
    """
    Read-only lookup structures derived from a Dataset.

    Attributes:
        by_entity (Mapping[str, tuple[Record, ...]]): All rows per entity, ascending by time step.
        by_time_step (Mapping[int, tuple[Record, ...]]): All rows per time step, in source order.
        entities (tuple[str, ...]): Sorted distinct entity names.
        time_steps (tuple[int, ...]): Sorted distinct time steps.
    """

    by_entity: Mapping[str, tuple[Record, ...]] = field(default_factory=dict)
    by_time_step: Mapping[int, tuple[Record, ...]] = field(default_factory=dict)
    entities: tuple[str, ...] = ()
    time_steps: tuple[int, ...] = ()

    def records_at(self, time_step: int) -> tuple[Record, ...]:
        return self.by_time_step.get(time_step, ())

    def history(self, entity: str) -> tuple[Record, ...]:
        return self.by_entity.get(entity, ())

    def all_records(self) -> Sequence[Record]:
        """Rows across all time steps (ascending time step), used for global color domains."""
        return [r for t in self.time_steps for r in self.by_time_step[t]]


def build_indices(dataset: Dataset) -> Indices:
    """
    Build Indices as a pure function of the Dataset.

    Args:
        dataset (Dataset): Loaded dataset.

    Returns:
        Indices: Frozen mappings (read-only proxies) and sorted catalogs.
    """
    by_entity: dict[str, list[Record]] = {}
    by_time: dict[int, list[Record]] = {}
    for r in dataset.records:
        by_entity.setdefault(r.entity, []).append(r)
        by_time.setdefault(r.time_step, []).append(r)

    return Indices(
        by_entity=MappingProxyType(
            {k: tuple(sorted(v, key=lambda r: r.time_step)) for k, v in by_entity.items()}
        ),
        by_time_step=MappingProxyType({k: tuple(v) for k, v in by_time.items()}),
        entities=tuple(sorted(by_entity)),
        time_steps=tuple(sorted(by_time)),
    )


def time_bounds(indices: Indices) -> tuple[int, int]:
    """
    Return (min, max) time step.

    Raises:
        LoadError: If the indices are empty (no rows were loaded).
    """
    if not indices.time_steps:
        raise LoadError("dataset has no time steps")
    return (indices.time_steps[0], indices.time_steps[-1])
