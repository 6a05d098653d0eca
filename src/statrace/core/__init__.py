"""
Core package aggregator for statrace contracts (vocabulary, row models, constants, errors).

## Contracts (single source of truth)
- Grammar — Metric, ProjectionMode, ViewKind enums and parsing helpers.
- Schemas — frozen Record and ProjectedPoint models with validators.
- Constants — fixed CSV headers, transition timings, layout defaults, geography URLs.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO.
- Enum `.value` strings are lower_snake and are used verbatim as widget values.

## Downstream usage
- statrace.io — validates CSV rows into Record instances.
- statrace.engine — projects Records into ProjectedPoint sequences.
- statrace.viz / app — label axes and legends via Metric.label.
"""

from __future__ import annotations

from .errors import SchemaError
from .grammar import Metric, ProjectionMode, ViewKind, metric_from_value, mode_from_value
from .schema import ProjectedPoint, Record

__all__ = [
    "Metric",
    "ProjectionMode",
    "ViewKind",
    "metric_from_value",
    "mode_from_value",
    "Record",
    "ProjectedPoint",
    "SchemaError",
]
