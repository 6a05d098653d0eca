from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from statrace.core.schema import Record
from statrace.io.dataset import Dataset, Indices, build_indices

YEARS = list(range(2014, 2024))
STATES = {
    # name: (deaths in 2014, yearly increment, rate in 2014)
    "Ohio": (2700, 300, 24.6),
    "Texas": (2600, 150, 9.7),
    "Utah": (600, 10, 22.4),
}

HEADER = "Year,State,Deaths,Age Adjusted Rate,URL\n"


def make_records() -> list[Record]:
    out: list[Record] = []
    for year in YEARS:
        for name, (base, step, rate) in STATES.items():
            k = year - YEARS[0]
            out.append(
                Record(
                    entity=name,
                    time_step=year,
                    deaths=base + step * k,
                    rate=round(rate + 0.5 * k, 2),
                )
            )
    return out


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[..., Path]:
    """Write a CSV with the standard header followed by `body`; returns its path."""

    def _write(body: str, name: str = "data.csv", *, header: str = HEADER) -> Path:
        p = tmp_path / name
        p.write_text(header + body, encoding="utf-8")
        return p

    return _write


@pytest.fixture
def dataset() -> Dataset:
    return Dataset(make_records(), source="fixture")


@pytest.fixture
def indices(dataset: Dataset) -> Indices:
    return build_indices(dataset)


@pytest.fixture
def ab_dataset() -> Dataset:
    return Dataset(
        [
            Record(entity="A", time_step=2020, deaths=50, rate=5.0),
            Record(entity="B", time_step=2020, deaths=80, rate=8.0),
        ]
    )
