from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from statrace.core.schema import ProjectedPoint, Record


def test_record_normalizes_entity_and_blank_url() -> None:
    r = Record(entity="  Ohio ", time_step=2020, deaths=5215, rate=47.2, url="  ")
    assert r.entity == "Ohio"
    assert r.url is None
    assert r.key == ("Ohio", 2020)


def test_record_is_frozen() -> None:
    r = Record(entity="Ohio", time_step=2020, deaths=1, rate=1.0)
    with pytest.raises(ValidationError):
        r.deaths = 2  # type: ignore[misc]


@pytest.mark.parametrize(
    "fields",
    [
        {"entity": "", "time_step": 2020, "deaths": 1, "rate": 1.0},
        {"entity": "Ohio", "time_step": 2020, "deaths": -1, "rate": 1.0},
        {"entity": "Ohio", "time_step": 2020, "deaths": 1, "rate": -0.5},
        {"entity": "Ohio", "time_step": 2020, "deaths": 1, "rate": math.nan},
        {"entity": "Ohio", "time_step": 2020, "deaths": 1, "rate": math.inf},
    ],
)
def test_record_rejects_invalid_fields(fields: dict) -> None:
    with pytest.raises(ValidationError):
        Record(**fields)


def test_record_forbids_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        Record(entity="Ohio", time_step=2020, deaths=1, rate=1.0, population=10)  # type: ignore[call-arg]


def test_projected_point_carries_record() -> None:
    r = Record(entity="Utah", time_step=2019, deaths=600, rate=22.4)
    p = ProjectedPoint(entity=r.entity, time_step=r.time_step, value=22.4, record=r)
    assert p.record.deaths == 600
