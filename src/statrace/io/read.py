"""
Read utilities for the statrace input table.

Overview
- load(): Fetch the CSV (path or http(s) URL), validate it, and return a Dataset.
- parse_frame(): Validate an all-string Polars frame into typed Records.

Source of truth
- Column names come from statrace.core.constants (Year, State, Deaths, Age Adjusted Rate, URL).
- Row validation is delegated to statrace.core.schema.Record.

Failure semantics
- Every failure (unreachable source, missing column, non-numeric metric, duplicate
  entity/time step) raises LoadError chained to the underlying exception.
- No retry: a failed load is terminal for that attempt and surfaces to the caller.

Import DAG discipline
- Depends on stdlib, polars, requests, and statrace.core/statrace.io helpers; does not import
  higher layers (engine/viz/app).
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path

import polars as pl
import requests
from pydantic import ValidationError

from statrace.core.constants import (
    CSV_DEATHS,
    CSV_RATE,
    CSV_STATE,
    CSV_URL,
    CSV_YEAR,
    REQUIRED_COLUMNS,
)
from statrace.core.schema import Record

from .dataset import Dataset
from .errors import LoadError

logger = logging.getLogger(__name__)

_NUMERIC: dict[str, object] = {
    CSV_YEAR: pl.Int64,
    CSV_DEATHS: pl.Int64,
    CSV_RATE: pl.Float64,
}


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _read_raw(source: str | os.PathLike[str], *, timeout_s: float) -> pl.DataFrame:
    src = str(source)
    try:
        if _is_url(src):
            resp = requests.get(src, timeout=timeout_s)
            resp.raise_for_status()
            payload: io.BytesIO | Path = io.BytesIO(resp.content)
        else:
            payload = Path(src)
            if not payload.exists():
                raise FileNotFoundError(f"data file not found: {payload}")
        # All columns as strings; numeric validation happens in parse_frame.
        return pl.read_csv(payload, infer_schema_length=0)
    except (OSError, requests.RequestException, pl.exceptions.PolarsError) as exc:
        raise LoadError(f"failed to read {src}: {exc}") from exc


def parse_frame(raw: pl.DataFrame) -> list[Record]:
    """
    Validate an all-string frame into Records.

    Args:
        raw (pl.DataFrame): Frame with the fixed CSV headers (extra columns are ignored).

    Returns:
        list[Record]: Rows in source order.

    Raises:
        LoadError: If a required column is missing, a numeric field does not parse,
            or a row fails Record validation.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
    if missing:
        raise LoadError(f"missing required columns: {missing!r}")

    df = raw.with_columns([pl.col(c).cast(pl.Utf8).str.strip_chars() for c in REQUIRED_COLUMNS])
    for col, dtype in _NUMERIC.items():
        parsed = df.get_column(col).cast(dtype, strict=False)  # type: ignore[arg-type]
        bad = df.with_row_index("_row").filter(parsed.is_null())
        if bad.height:
            first = bad.row(0, named=True)
            raise LoadError(
                f"non-numeric {col!r} at row {int(first['_row']) + 1}: {first[col]!r}"
            )
        df = df.with_columns(parsed.alias(col))

    has_url = CSV_URL in df.columns
    records: list[Record] = []
    for i, row in enumerate(df.iter_rows(named=True)):
        try:
            records.append(
                Record(
                    entity=row[CSV_STATE],
                    time_step=row[CSV_YEAR],
                    deaths=row[CSV_DEATHS],
                    rate=row[CSV_RATE],
                    url=row[CSV_URL] if has_url else None,
                )
            )
        except ValidationError as exc:
            raise LoadError(f"invalid row {i + 1}: {exc}") from exc
    return records


def load(source: str | os.PathLike[str], *, timeout_s: float = 10.0) -> Dataset:
    """
    Load the input table into a Dataset.

    Args:
        source (str | os.PathLike[str]): Local path or http(s) URL of the CSV.
        timeout_s (float): Request timeout for URL sources.

    Returns:
        Dataset: Immutable rows; build lookups with statrace.io.dataset.build_indices.

    Raises:
        LoadError: On any fetch or parse failure, or when the table has no rows.
    """
    raw = _read_raw(source, timeout_s=timeout_s)
    if raw.height == 0:
        raise LoadError(f"no rows in {source}")
    records = parse_frame(raw)
    ds = Dataset(records, source=str(source))
    logger.info("loaded %d rows from %s", len(ds), source)
    return ds
