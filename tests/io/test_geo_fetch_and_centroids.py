from __future__ import annotations

from typing import Any

import pytest
import requests

from statrace.io import geo as geo_mod
from statrace.io.errors import GeoLoadError
from statrace.io.geo import abbreviation, feature_centroids, feature_names, fetch_topology


def _topology() -> dict[str, Any]:
    # Two quantized, delta-encoded square rings:
    #   arc 0: (0,0)->(10,0)->(10,10)->(0,10)->(0,0)   "Ohio" (one polygon)
    #   arc 1: (20,0)->(22,0)->(22,2)->(20,2)->(20,0)  small island of "Hawaii"
    #   arc 2: (30,0)->(36,0)->(36,6)->(30,6)->(30,0)  main landmass of "Hawaii"
    return {
        "type": "Topology",
        "transform": {"scale": [1.0, 1.0], "translate": [0.0, 0.0]},
        "arcs": [
            [[0, 0], [10, 0], [0, 10], [-10, 0], [0, -10]],
            [[20, 0], [2, 0], [0, 2], [-2, 0], [0, -2]],
            [[30, 0], [6, 0], [0, 6], [-6, 0], [0, -6]],
        ],
        "objects": {
            "states": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "arcs": [[0]], "properties": {"name": "Ohio"}},
                    {
                        "type": "MultiPolygon",
                        "arcs": [[[1]], [[2]]],
                        "properties": {"name": "Hawaii"},
                    },
                ],
            }
        },
    }


class _Resp:
    def __init__(self, payload: Any, status: int = 200) -> None:
        self._payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self) -> Any:
        return self._payload


def test_primary_success_does_not_touch_fallback(monkeypatch) -> None:
    calls: list[str] = []

    def fake_get(url: str, timeout: float) -> _Resp:
        calls.append(url)
        return _Resp(_topology())

    monkeypatch.setattr(geo_mod.requests, "get", fake_get)

    topo = fetch_topology("https://primary", "https://fallback", timeout_s=1.0)

    assert calls == ["https://primary"]
    assert feature_names(topo) == ["Ohio", "Hawaii"]


def test_primary_failure_uses_fallback_once(monkeypatch, caplog) -> None:
    calls: list[str] = []

    def fake_get(url: str, timeout: float) -> _Resp:
        calls.append(url)
        if url == "https://primary":
            raise requests.ConnectionError("down")
        return _Resp(_topology())

    monkeypatch.setattr(geo_mod.requests, "get", fake_get)

    with caplog.at_level("WARNING", logger="statrace.io.geo"):
        topo = fetch_topology("https://primary", "https://fallback", timeout_s=1.0)

    assert calls == ["https://primary", "https://fallback"]
    assert "states" in topo["objects"]
    assert any("fallback" in rec.getMessage() for rec in caplog.records)


def test_both_sources_failing_raises_geo_load_error(monkeypatch) -> None:
    calls: list[str] = []

    def fake_get(url: str, timeout: float) -> _Resp:
        calls.append(url)
        return _Resp({}, status=503)

    monkeypatch.setattr(geo_mod.requests, "get", fake_get)

    with pytest.raises(GeoLoadError):
        fetch_topology("https://primary", "https://fallback", timeout_s=1.0)
    # exactly one fallback attempt, no retries beyond it
    assert calls == ["https://primary", "https://fallback"]


def test_payload_without_states_object_counts_as_failure(monkeypatch) -> None:
    monkeypatch.setattr(geo_mod.requests, "get", lambda url, timeout: _Resp({"objects": {}}))

    with pytest.raises(GeoLoadError):
        fetch_topology("https://primary", "https://fallback")


def test_centroids_use_largest_ring() -> None:
    centroids = feature_centroids(_topology())

    assert centroids["Ohio"] == pytest.approx((5.0, 5.0))
    # Hawaii is labelled on its larger polygon (30..36, 0..6)
    assert centroids["Hawaii"] == pytest.approx((33.0, 3.0))


def test_centroids_honor_quantization_transform() -> None:
    topo = _topology()
    topo["transform"] = {"scale": [0.5, 2.0], "translate": [-100.0, 30.0]}

    lon, lat = feature_centroids(topo)["Ohio"]

    assert (lon, lat) == pytest.approx((-97.5, 40.0))


def test_abbreviation_table_and_fallback() -> None:
    assert abbreviation("New York") == "NY"
    assert abbreviation("District of Columbia") == "DC"
    assert abbreviation("Guam") == "GU"
