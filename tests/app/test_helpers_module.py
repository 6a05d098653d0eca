from __future__ import annotations

from app.ui.helpers import (
    MAX_CATCHUP_MS,
    WallClockPump,
    activate_page,
    any_playing,
    entity_options,
    headline_for,
    is_animating,
    speed_label,
)
from statrace.core import ProjectionMode, ViewKind
from statrace.engine import ManualScheduler, RaceView, ViewConfig


def _view(dataset, indices, kind: ViewKind, sched: ManualScheduler) -> RaceView:
    return RaceView(dataset, indices, ViewConfig.for_kind(kind), scheduler=sched)


def test_pump_advances_by_wall_time() -> None:
    sched = ManualScheduler()
    pump = WallClockPump()

    assert pump.pump(sched, 100.0) == 0.0
    assert pump.pump(sched, 100.5) == 500.0
    assert sched.now_ms == 500.0


def test_pump_caps_catch_up_and_ignores_backwards_time() -> None:
    sched = ManualScheduler()
    pump = WallClockPump(last_s=0.0)

    assert pump.pump(sched, 60.0) == MAX_CATCHUP_MS
    assert pump.pump(sched, 59.0) == 0.0
    assert sched.now_ms == MAX_CATCHUP_MS


def test_pump_fires_view_ticks(dataset, indices) -> None:
    sched = ManualScheduler()
    view = _view(dataset, indices, ViewKind.BAR_RACE, sched)
    pump = WallClockPump(last_s=0.0)

    pump.pump(sched, 0.8)

    assert view.clock.current_time_step == 2015


def test_headline_for_modes(dataset, indices) -> None:
    sched = ManualScheduler()
    bars = _view(dataset, indices, ViewKind.BAR_RACE, sched)

    assert headline_for(bars.last_frame, ProjectionMode.RANKING) == "Total: 5,900"
    assert headline_for(bars.last_frame, ProjectionMode.TREND) == "Average: 1967"
    assert headline_for(None, ProjectionMode.RANKING) == ""


def test_entity_options_and_speed_label(indices) -> None:
    assert entity_options(indices) == ["Ohio", "Texas", "Utah"]
    assert speed_label(250) == "0.25 s per year"


def test_activate_page_only_ticks_visible_views(dataset, indices) -> None:
    # Arrange
    sched = ManualScheduler()
    bar = _view(dataset, indices, ViewKind.BAR_RACE, sched)
    line = _view(dataset, indices, ViewKind.LINE_RACE, sched)
    pages = {"Bar race": [bar], "Line race": [line]}

    # Act
    activate_page(pages, "Line race")
    sched.advance(800)

    # Assert
    assert bar.clock.current_time_step == 2014
    assert line.clock.current_time_step == 2015
    assert any_playing([bar, line])
    assert not any_playing([bar])


def test_activate_page_twice_keeps_the_pending_tick(dataset, indices) -> None:
    sched = ManualScheduler()
    bar = _view(dataset, indices, ViewKind.BAR_RACE, sched)
    pages = {"Bar race": [bar]}

    sched.advance(500)
    activate_page(pages, "Bar race")
    sched.advance(300)

    assert bar.clock.current_time_step == 2015


def test_is_animating_until_transitions_settle(dataset, indices) -> None:
    sched = ManualScheduler()
    view = _view(dataset, indices, ViewKind.BAR_RACE, sched)
    view.controller.pause()

    view.set_metric("rate")

    assert is_animating([view], sched.now_ms)
    assert not is_animating([view], sched.now_ms + 800)
