from __future__ import annotations

import math

import pytest

from statrace.core.grammar import Metric, ProjectionMode, ViewKind
from statrace.core.schema import Record
from statrace.engine.animation import ManualScheduler
from statrace.engine.views import (
    SELECT_ENTITIES_PROMPT,
    RaceView,
    ViewConfig,
    ViewGroup,
    ViewState,
    time_step_from_scroll,
)
from statrace.io.config import VizSettings
from statrace.io.dataset import Dataset, build_indices


def _view(dataset, indices, kind: ViewKind, **kwargs) -> RaceView:
    return RaceView(dataset, indices, ViewConfig.for_kind(kind), **kwargs)


def test_bar_race_starts_playing_with_every_entity(dataset, indices) -> None:
    view = _view(dataset, indices, ViewKind.BAR_RACE)

    frame = view.last_frame

    assert view.clock.is_playing
    assert view.state.entity_filter == frozenset(indices.entities)
    assert frame is not None and frame.time_step == 2014
    assert frame.projection.entities == ("Ohio", "Texas", "Utah")
    assert frame.summary is not None and frame.summary.total == 2700 + 2600 + 600
    assert set(view.current_marks()) == {"Ohio", "Texas", "Utah"}


def test_tick_refreshes_the_view(dataset, indices) -> None:
    sched = ManualScheduler()
    view = _view(dataset, indices, ViewKind.BAR_RACE, scheduler=sched)

    sched.advance(800)

    assert view.last_frame is not None
    assert view.last_frame.time_step == 2015
    assert view.last_frame.projection.points[0].value == 3000.0


def test_line_race_starts_with_select_prompt(dataset, indices) -> None:
    view = _view(dataset, indices, ViewKind.LINE_RACE)

    frame = view.last_frame

    assert frame is not None
    assert frame.placeholder == SELECT_ENTITIES_PROMPT
    assert frame.scales is None
    assert view.current_marks() == {}


def test_line_race_selection_draws_history(dataset, indices) -> None:
    sched = ManualScheduler()
    view = _view(dataset, indices, ViewKind.LINE_RACE, scheduler=sched)
    sched.advance(800 * 2)

    frame = view.set_filter(["Utah"])

    assert frame.placeholder is None
    assert [p.time_step for p in frame.projection.points] == [2014, 2015, 2016]
    assert set(view.current_marks()) == {"Utah|2014", "Utah|2015", "Utah|2016"}


def test_set_metric_reprojects(dataset, indices) -> None:
    view = _view(dataset, indices, ViewKind.BAR_RACE)

    frame = view.set_metric("rate")

    assert frame.projection.metric is Metric.RATE
    assert frame.projection.entities == ("Ohio", "Utah", "Texas")
    assert frame.summary is not None
    assert frame.summary.headline == pytest.approx((24.6 + 9.7 + 22.4) / 3)


def test_filter_changes_enter_and_exit_bars(dataset, indices) -> None:
    view = _view(dataset, indices, ViewKind.BAR_RACE)

    frame = view.set_filter(["Ohio"])

    assert frame.run is not None
    assert sorted(frame.run.reconciliation.keys("exit")) == ["Texas", "Utah"]
    assert frame.run.reconciliation.keys("update") == ["Ohio"]


def test_clear_all_ranking_means_all_entities(dataset, indices) -> None:
    view = _view(dataset, indices, ViewKind.BAR_RACE)

    frame = view.clear_all()

    assert view.state.entity_filter == frozenset()
    assert len(frame.projection.entities) == 3


def test_toggle_entity_and_comparison(dataset, indices) -> None:
    view = _view(dataset, indices, ViewKind.DASHBOARD, autostart=False)
    assert view.state.entity_filter == frozenset()

    view.toggle_entity("Utah")
    view.toggle_entity("Ohio")
    view.toggle_entity("Utah")
    view.set_comparison(True)

    assert view.state == ViewState(Metric.DEATHS, frozenset({"Ohio"}), True)


def test_missing_time_step_keeps_marks() -> None:
    gappy = Dataset(
        [
            Record(entity="A", time_step=2014, deaths=1, rate=1.0),
            Record(entity="A", time_step=2016, deaths=3, rate=1.0),
        ]
    )
    view = RaceView(gappy, build_indices(gappy), ViewConfig.for_kind(ViewKind.BAR_RACE))
    view.controller.pause()

    view.controller.set_time_step(2015)

    assert view.last_frame is not None
    assert view.last_frame.placeholder == "No data for 2015"
    assert set(view.current_marks()) == {"A"}


def test_map_views_project_without_marks(dataset, indices) -> None:
    view = _view(dataset, indices, ViewKind.SCROLL_MAP, autostart=False)

    frame = view.last_frame

    assert frame is not None and frame.scales is not None
    assert frame.run is None
    # colors stay comparable across years
    assert frame.scales.color.domain == (600.0, 5400.0)


def test_bar_height_grows_with_rows(dataset, indices) -> None:
    config = ViewConfig.for_kind(ViewKind.BAR_RACE)

    assert config.layout_for(3).height == 400.0
    assert config.layout_for(30).height == 30 * 24 + 60


def test_line_race_height_tracks_width() -> None:
    config = ViewConfig.for_kind(ViewKind.LINE_RACE, width=1200)

    assert config.mode is ProjectionMode.TREND
    assert config.height == pytest.approx(720.0)


def test_settings_flow_into_clock_and_timing(dataset, indices) -> None:
    settings = VizSettings(interval_ms=300, enter_duration_ms=500, exit_duration_ms=250)

    view = _view(dataset, indices, ViewKind.BAR_RACE, settings=settings)

    assert view.clock.interval_ms == 300
    assert view.pipeline.timing.enter_ms == 500
    assert view.pipeline.timing.exit_ms == 250


def test_views_do_not_share_state(dataset, indices) -> None:
    sched = ManualScheduler()
    a = _view(dataset, indices, ViewKind.BAR_RACE, scheduler=sched)
    b = _view(dataset, indices, ViewKind.BAR_RACE, scheduler=sched)

    a.controller.pause()
    a.set_metric("rate")
    sched.advance(800)

    assert a.clock.current_time_step == 2014
    assert b.clock.current_time_step == 2015
    assert b.state.metric is Metric.DEATHS


def test_dispose_stops_ticks(dataset, indices) -> None:
    sched = ManualScheduler()
    view = _view(dataset, indices, ViewKind.BAR_RACE, scheduler=sched)

    view.dispose()
    sched.advance(5000)

    assert view.clock.current_time_step == 2014
    assert view.current_marks() == {}


def test_view_group_keeps_one_view_ticking(dataset, indices) -> None:
    # Arrange
    sched = ManualScheduler()
    bar = _view(dataset, indices, ViewKind.BAR_RACE, scheduler=sched)
    line = _view(dataset, indices, ViewKind.LINE_RACE, scheduler=sched)
    group = ViewGroup({"bar": bar, "line": line}, active="bar")

    # Act
    sched.advance(800)
    group.activate("line")
    sched.advance(800)

    # Assert
    assert group.active == "line"
    assert group.active_view is line
    assert bar.clock.current_time_step == 2015
    assert line.clock.current_time_step == 2015
    assert not bar.controller.has_pending_tick
    assert line.controller.has_pending_tick


def test_view_group_rejects_unknown_and_empty(dataset, indices) -> None:
    with pytest.raises(ValueError):
        ViewGroup({})
    group = ViewGroup({"bar": _view(dataset, indices, ViewKind.BAR_RACE)})
    with pytest.raises(KeyError):
        group.activate("pie")


@pytest.mark.parametrize(
    ("fraction", "expected"),
    [(0.0, 2014), (0.05, 2014), (0.06, 2015), (0.5, 2019), (1.0, 2023), (-3.0, 2014), (7.0, 2023)],
)
def test_time_step_from_scroll(fraction: float, expected: int) -> None:
    assert time_step_from_scroll(fraction, list(range(2014, 2024))) == expected


def test_time_step_from_scroll_edge_cases() -> None:
    assert time_step_from_scroll(math.nan, [2014, 2023]) == 2014
    with pytest.raises(ValueError):
        time_step_from_scroll(0.5, [])


def test_dashboard_filter_only_narrows_bars(dataset, indices) -> None:
    view = _view(dataset, indices, ViewKind.DASHBOARD, autostart=False)

    view.toggle_entity("Utah")
    frame = view.set_comparison(True)

    assert frame.projection.entities == ("Utah",)
    assert frame.map_projection is not None
    assert frame.map_projection.entities == ("Ohio", "Texas", "Utah")
    assert frame.map_color is not None and frame.map_color.domain == (600.0, 2700.0)


def test_race_views_carry_no_map_fill(dataset, indices) -> None:
    frame = _view(dataset, indices, ViewKind.BAR_RACE).last_frame

    assert frame is not None
    assert frame.map_projection is None and frame.map_color is None


def test_trend_selection_without_history_reports_no_data() -> None:
    late = Dataset(
        [
            Record(entity="A", time_step=2014, deaths=1, rate=1.0),
            Record(entity="B", time_step=2016, deaths=3, rate=1.0),
        ]
    )
    view = RaceView(late, build_indices(late), ViewConfig.for_kind(ViewKind.LINE_RACE))
    view.controller.pause()

    frame = view.set_filter(["B"])

    assert frame.placeholder == "No data up to 2014"
    assert frame.scales is None
    assert view.clear_all().placeholder == SELECT_ENTITIES_PROMPT
