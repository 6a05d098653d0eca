"""
Pydantic v2 models for dataset rows and projected points.

Responsibilities
- Define the immutable Record loaded from the input table.
- Define ProjectedPoint, the unit produced by the projection engine.
- Normalize entity names and optional URLs; reject non-finite metrics.

Style
- Zero-IO (stdlib + pydantic only).
- Google-style docstrings with Attributes, Raises, and Examples sections.

References
- errors: src/statrace/core/errors.py (SchemaError)
- tests: tests/core/*
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import SchemaError

__all__ = [
    "Record",
    "ProjectedPoint",
]


class Record(BaseModel):
    """
    One row of the input table: an entity's metrics at one time step.

    Attributes:
        entity (str): Entity name (a US state); stripped, non-empty.
        time_step (int): Discrete period key (a year).
        deaths (int): Count metric (>= 0).
        rate (float): Age-adjusted rate metric (finite, >= 0).
        url (str | None): Optional reference URL; blank strings become None.

    Notes:
        Records are frozen; at most one Record exists per (entity, time_step) in a
        Dataset (enforced by statrace.io.read).

    Raises:
        pydantic.ValidationError: If a field is missing, non-numeric, or out of range.

    Examples:
        >>> from statrace.core.schema import Record
        >>> r = Record(entity=" Ohio ", time_step=2020, deaths=5215, rate=47.2)
        >>> (r.entity, r.url)
        ('Ohio', None)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity: str
    time_step: int
    deaths: int = Field(ge=0)
    rate: float = Field(ge=0.0)
    url: str | None = None

    @property
    def key(self) -> tuple[str, int]:
        return (self.entity, self.time_step)

    @field_validator("entity", mode="before")
    @classmethod
    def _normalize_entity(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise SchemaError("entity must be a non-empty string")
        return v.strip()

    @field_validator("rate", mode="after")
    @classmethod
    def _check_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise SchemaError("rate must be finite")
        return v

    @field_validator("url", mode="before")
    @classmethod
    def _blank_url_to_none(cls, v: Any) -> Any:
        if v is None:
            return None
        s = str(v).strip()
        return s or None


class ProjectedPoint(BaseModel):
    """
    A record selected by a projection together with its metric value.

    Attributes:
        entity (str): Stable key used for transitions.
        time_step (int): Time step of the underlying record.
        value (float): Selected metric value.
        record (Record): Raw fields for tooltips (deaths and rate together).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity: str
    time_step: int
    value: float
    record: Record
