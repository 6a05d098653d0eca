"""
Geography reference for map views.

Overview
- fetch_topology(): GET the us-atlas states topology from the primary URL, then once from
  the fallback URL; GeoLoadError when both fail.
- feature_names() / feature_centroids(): derive label data from the topology (decoded
  arcs with the quantization transform applied).
- abbreviation(): postal code for a state label.

Notes
- Only boundary paths and centroids are consumed; drawing is delegated to Vega-Lite's
  topojson support in statrace.viz.
- A failed geography load never raises out of map rendering code paths in the app; the
  view shows a "map unavailable" placeholder instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import requests

from statrace.core.constants import GEO_FALLBACK_URL, GEO_OBJECT, GEO_PRIMARY_URL

from .errors import GeoLoadError

logger = logging.getLogger(__name__)

__all__ = [
    "STATE_ABBREVIATIONS",
    "abbreviation",
    "fetch_topology",
    "feature_names",
    "feature_centroids",
]

STATE_ABBREVIATIONS: dict[str, str] = {
    "Alabama": "AL", "Alaska": "AK", "Arizona": "AZ", "Arkansas": "AR",
    "California": "CA", "Colorado": "CO", "Connecticut": "CT", "Delaware": "DE",
    "District of Columbia": "DC", "Florida": "FL", "Georgia": "GA", "Hawaii": "HI",
    "Idaho": "ID", "Illinois": "IL", "Indiana": "IN", "Iowa": "IA",
    "Kansas": "KS", "Kentucky": "KY", "Louisiana": "LA", "Maine": "ME",
    "Maryland": "MD", "Massachusetts": "MA", "Michigan": "MI", "Minnesota": "MN",
    "Mississippi": "MS", "Missouri": "MO", "Montana": "MT", "Nebraska": "NE",
    "Nevada": "NV", "New Hampshire": "NH", "New Jersey": "NJ", "New Mexico": "NM",
    "New York": "NY", "North Carolina": "NC", "North Dakota": "ND", "Ohio": "OH",
    "Oklahoma": "OK", "Oregon": "OR", "Pennsylvania": "PA", "Rhode Island": "RI",
    "South Carolina": "SC", "South Dakota": "SD", "Tennessee": "TN", "Texas": "TX",
    "Utah": "UT", "Vermont": "VT", "Virginia": "VA", "Washington": "WA",
    "West Virginia": "WV", "Wisconsin": "WI", "Wyoming": "WY",
}  # fmt: skip

Point = tuple[float, float]


def abbreviation(name: str) -> str:
    """Return the postal code for a state name, else its first two letters upper-cased."""
    return STATE_ABBREVIATIONS.get(name, name[:2].upper())


def _get_json(url: str, timeout_s: float) -> dict[str, Any]:
    resp = requests.get(url, timeout=timeout_s)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict) or GEO_OBJECT not in data.get("objects", {}):
        raise ValueError(f"topology at {url} has no {GEO_OBJECT!r} object")
    return data


def fetch_topology(
    primary_url: str = GEO_PRIMARY_URL,
    fallback_url: str = GEO_FALLBACK_URL,
    *,
    timeout_s: float = 10.0,
) -> dict[str, Any]:
    """
    Fetch the states topology, trying one fallback source on failure.

    Args:
        primary_url (str): Source tried first.
        fallback_url (str): Source tried once if the primary fails.
        timeout_s (float): Per-request timeout.

    Returns:
        dict[str, Any]: Parsed TopoJSON topology with an ``objects.states`` collection.

    Raises:
        GeoLoadError: If both sources fail (network error, bad status, or bad payload).
    """
    try:
        return _get_json(primary_url, timeout_s)
    except (requests.RequestException, ValueError) as exc:
        logger.warning("primary geography source failed (%s); trying fallback", exc)
    try:
        return _get_json(fallback_url, timeout_s)
    except (requests.RequestException, ValueError) as exc:
        raise GeoLoadError(f"geography unavailable from {primary_url} and {fallback_url}") from exc


def _geometries(topology: Mapping[str, Any]) -> list[dict[str, Any]]:
    obj = topology.get("objects", {}).get(GEO_OBJECT, {})
    return list(obj.get("geometries", []))


def feature_names(topology: Mapping[str, Any]) -> list[str]:
    """Names (``properties.name``) of every feature in the states collection."""
    return [g.get("properties", {}).get("name", "") for g in _geometries(topology)]


def _decode_arcs(topology: Mapping[str, Any]) -> list[list[Point]]:
    transform = topology.get("transform")
    arcs: list[list[Point]] = []
    for arc in topology.get("arcs", []):
        if transform:
            sx, sy = transform["scale"]
            tx, ty = transform["translate"]
            x = y = 0
            pts: list[Point] = []
            for dx, dy, *_ in arc:
                x += dx
                y += dy
                pts.append((x * sx + tx, y * sy + ty))
            arcs.append(pts)
        else:
            arcs.append([(float(p[0]), float(p[1])) for p in arc])
    return arcs


def _ring(indexes: Sequence[int], arcs: list[list[Point]]) -> list[Point]:
    out: list[Point] = []
    for i in indexes:
        pts = arcs[i] if i >= 0 else list(reversed(arcs[~i]))
        # consecutive arcs share their joining point
        out.extend(pts if not out else pts[1:])
    return out


def _ring_centroid(ring: list[Point]) -> tuple[float, Point]:
    area2 = cx = cy = 0.0
    for (x0, y0), (x1, y1) in zip(ring, ring[1:] + ring[:1], strict=True):
        cross = x0 * y1 - x1 * y0
        area2 += cross
        cx += (x0 + x1) * cross
        cy += (y0 + y1) * cross
    if area2 == 0.0:
        n = len(ring) or 1
        return 0.0, (sum(p[0] for p in ring) / n, sum(p[1] for p in ring) / n)
    return abs(area2) / 2.0, (cx / (3.0 * area2), cy / (3.0 * area2))


def feature_centroids(topology: Mapping[str, Any]) -> dict[str, Point]:
    """
    Label anchor (longitude, latitude) per feature name.

    The anchor is the area centroid of the feature's largest outer ring, so island
    states are labelled on their main landmass.

    Returns:
        dict[str, tuple[float, float]]: name -> (lon, lat); features without arcs are skipped.
    """
    arcs = _decode_arcs(topology)
    out: dict[str, Point] = {}
    for geom in _geometries(topology):
        name = geom.get("properties", {}).get("name")
        kind = geom.get("type")
        if not name or kind not in ("Polygon", "MultiPolygon"):
            continue
        polygons = [geom["arcs"]] if kind == "Polygon" else geom["arcs"]
        best: tuple[float, Point] | None = None
        for polygon in polygons:
            if not polygon:
                continue
            area, centroid = _ring_centroid(_ring(polygon[0], arcs))
            if best is None or area > best[0]:
                best = (area, centroid)
        if best is not None:
            out[name] = best[1]
    return out
