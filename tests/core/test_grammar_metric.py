from __future__ import annotations

import pytest

from statrace.core.grammar import (
    Metric,
    ProjectionMode,
    ViewKind,
    metric_from_value,
    mode_from_value,
)
from statrace.core.schema import Record


def test_enum_values_are_lower_snake() -> None:
    for enum_cls in (Metric, ProjectionMode, ViewKind):
        for member in enum_cls:
            assert member.value == member.value.lower()
            assert " " not in member.value


def test_metric_parsing_is_case_and_whitespace_insensitive() -> None:
    assert metric_from_value(" Deaths ") is Metric.DEATHS
    assert metric_from_value(Metric.RATE) is Metric.RATE
    assert mode_from_value("TREND") is ProjectionMode.TREND


def test_unknown_metric_or_mode_raises() -> None:
    with pytest.raises(ValueError):
        metric_from_value("population")
    with pytest.raises(ValueError):
        mode_from_value("scatter")


def test_metric_value_of_and_labels() -> None:
    r = Record(entity="Ohio", time_step=2020, deaths=5215, rate=47.2)
    assert Metric.DEATHS.value_of(r) == 5215.0
    assert Metric.RATE.value_of(r) == 47.2
    assert Metric.DEATHS.is_count and not Metric.RATE.is_count
    assert Metric.DEATHS.label == "Total Deaths"
    assert Metric.RATE.label == "Age Adjusted Rate"
