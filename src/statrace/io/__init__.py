"""
statrace.io — Loading and configuration layer.

## Responsibilities
- Load the input CSV into an immutable Dataset (Polars-backed) and derive read-only Indices.
- Fetch the geography reference with a single fallback source.
- Carry runtime configuration (VizSettings) with env > TOML > defaults precedence.

## Public API
- VizSettings — Runtime configuration.
- Dataset, Indices — Loaded rows and lookups (shared read-only by every view).
- load, build_indices, time_bounds — Loader entry points.
- fetch_topology, feature_centroids — Geography helpers for map views.
- LoadError, GeoLoadError, ConfigError — IO-layer failures.

## Import DAG discipline
- Depends only on stdlib, polars, requests, matplotlib (colormap names), pydantic (via core),
  and statrace.core.*.
- MUST NOT import higher layers: engine, viz, or app.

## Examples
```python
from statrace.io import VizSettings, build_indices, load

settings = VizSettings.load()  # doctest: +SKIP
ds = load(settings.data_path)  # doctest: +SKIP
idx = build_indices(ds)  # doctest: +SKIP
idx.time_steps  # (2014, ..., 2023)  # doctest: +SKIP
```
"""

from __future__ import annotations

from .config import VizSettings
from .dataset import Dataset, Indices, build_indices, time_bounds
from .errors import ConfigError, GeoLoadError, IoError, LoadError
from .geo import abbreviation, feature_centroids, feature_names, fetch_topology
from .read import load

__all__ = [
    "VizSettings",
    "Dataset",
    "Indices",
    "build_indices",
    "time_bounds",
    "load",
    "fetch_topology",
    "feature_names",
    "feature_centroids",
    "abbreviation",
    "IoError",
    "LoadError",
    "GeoLoadError",
    "ConfigError",
]
