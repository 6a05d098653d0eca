from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import streamlit as st

from statrace.io import (
    Dataset,
    GeoLoadError,
    Indices,
    build_indices,
    feature_centroids,
    fetch_topology,
    load,
)

logger = logging.getLogger(__name__)

__all__ = [
    "CacheConfig",
    "GeoBundle",
    "load_dataset",
    "load_indices",
    "load_geo",
]

# ---------- Cache configuration (factory of cached callables) ----------


@dataclass(frozen=True)
class CacheConfig:
    """Hashable cache configuration for Streamlit @st.cache_data.

    Note: Streamlit's decorator parameters (ttl, persist) are fixed at decoration
    time. We build and memoize decorated callables per (name, ttl, persist) so the
    app can switch these at runtime while still benefiting from caching.
    """

    ttl: int | None = None
    persist: bool = False


# Registry of decorated functions by (loader_name, CacheConfig)
_CACHE_REGISTRY: dict[tuple[str, CacheConfig], Callable[..., Any]] = {}


def _get_cached(loader_name: str, cfg: CacheConfig, fn: Callable[..., Any]) -> Callable[..., Any]:
    key = (loader_name, cfg)
    if key in _CACHE_REGISTRY:
        return _CACHE_REGISTRY[key]
    if cfg.persist:
        wrapped = st.cache_data(persist="disk", ttl=cfg.ttl)(fn)
    else:
        wrapped = st.cache_data(ttl=cfg.ttl)(fn)
    _CACHE_REGISTRY[key] = wrapped
    return wrapped


@dataclass(frozen=True)
class GeoBundle:
    """Topology plus derived label anchors; `error` is set when both sources failed."""

    topology: dict[str, Any] | None
    centroids: dict[str, tuple[float, float]]
    error: str | None = None

    @property
    def available(self) -> bool:
        return self.topology is not None


# ---------- Loaders (internal implementations) ----------


def _load_dataset_impl(source: str, timeout_s: float) -> Dataset:
    return load(source, timeout_s=timeout_s)


def _load_geo_impl(primary: str, fallback: str, timeout_s: float) -> GeoBundle:
    # A failed fetch is cached as an unavailable bundle so reruns do not refetch.
    try:
        topo = fetch_topology(primary, fallback, timeout_s=timeout_s)
    except GeoLoadError as exc:
        logger.error("geography unavailable: %s", exc)
        return GeoBundle(topology=None, centroids={}, error=str(exc))
    return GeoBundle(topology=topo, centroids=feature_centroids(topo))


# ---------- Public loader APIs (dispatch to cached implementations) ----------


def load_dataset(
    source: str, *, timeout_s: float = 10.0, cfg: CacheConfig = CacheConfig()
) -> Dataset:
    """Load and validate the CSV (raises statrace.io.LoadError)."""
    fn = _get_cached("load_dataset", cfg, _load_dataset_impl)
    return fn(source, timeout_s)  # type: ignore[no-any-return]


def load_indices(dataset: Dataset) -> Indices:
    """Indices are cheap to rebuild and hold read-only mappings; not cached across sessions."""
    return build_indices(dataset)


def load_geo(
    primary: str,
    fallback: str,
    *,
    timeout_s: float = 10.0,
    cfg: CacheConfig = CacheConfig(),
) -> GeoBundle:
    """Fetch the topology once per cache lifetime; never raises for network failures."""
    fn = _get_cached("load_geo", cfg, _load_geo_impl)
    return fn(primary, fallback, timeout_s)  # type: ignore[no-any-return]
