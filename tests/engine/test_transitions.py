from __future__ import annotations

import pytest

from statrace.engine.projection import project
from statrace.engine.scales import build_scales
from statrace.engine.transitions import (
    TransitionPipeline,
    TransitionTiming,
    VisualAttrs,
    layout_bars,
    layout_points,
    point_key,
    reconcile,
)


def _bar(x: float = 220.0, width: float = 100.0, color: str = "#ff0000") -> VisualAttrs:
    return VisualAttrs(x=x, y=10.0, width=width, height=20.0, color=color)


def test_reconcile_partitions_by_key() -> None:
    previous = {"A": _bar(), "B": _bar()}
    targets = {"B": _bar(width=50.0), "C": _bar(width=70.0)}

    rec = reconcile(previous, targets)

    assert rec.keys("enter") == ["C"]
    assert rec.keys("update") == ["B"]
    assert rec.keys("exit") == ["A"]
    assert list(rec.settled()) == ["B", "C"]


def test_reconcile_same_data_is_update_only() -> None:
    state = {"A": _bar(), "B": _bar(width=30.0)}

    rec = reconcile(state, state)

    assert rec.enter == () and rec.exit == ()
    assert all(tr.start == tr.end for tr in rec.update)
    assert rec.settled() == state


def test_enter_starts_collapsed_at_baseline() -> None:
    rec = reconcile({}, {"A": _bar(x=300.0)}, baseline_x=220.0)

    (tr,) = rec.enter
    assert tr.start.width == 0.0
    assert tr.start.opacity == 0.0
    assert tr.start.x == 220.0
    assert tr.at(0.0) == tr.start
    assert tr.at(800.0) == tr.end


def test_default_timing_and_easing() -> None:
    rec = reconcile({"gone": _bar()}, {"new": _bar()})

    assert rec.enter[0].duration_ms == 800
    assert rec.exit[0].duration_ms == 400
    assert rec.enter[0].easing == "cubic_out"
    assert rec.exit[0].easing == "cubic_in"
    # cubic-out is past halfway at the midpoint
    mid = rec.enter[0].at(400.0)
    assert mid.width > 50.0


def test_timing_rejects_exit_longer_than_enter() -> None:
    with pytest.raises(ValueError):
        TransitionTiming(enter_ms=300, update_ms=300, exit_ms=400)
    with pytest.raises(ValueError):
        TransitionTiming(enter_easing="bounce")


def test_color_interpolates_in_rgb() -> None:
    rec = reconcile({"A": _bar(color="#000000")}, {"A": _bar(color="#ffffff")},
                    TransitionTiming(update_easing="linear"))

    assert rec.update[0].at(400.0).color == "#808080"


def test_exit_removed_after_its_duration() -> None:
    pipe = TransitionPipeline()
    pipe.render({"A": _bar(), "B": _bar()}, now_ms=0.0)
    pipe.render({"A": _bar()}, now_ms=1000.0)

    assert set(pipe.current(1200.0)) == {"A", "B"}
    assert set(pipe.current(1400.0)) == {"A"}
    assert pipe.settled.keys() == {"A"}


def test_run_done_after_longest_transition() -> None:
    pipe = TransitionPipeline()

    run = pipe.render({"A": _bar()}, now_ms=100.0)

    assert not run.done(899.0)
    assert run.done(900.0)


def test_render_mid_flight_retargets_from_sampled_state() -> None:
    # Arrange: bar grows 0 -> 100 over 800 ms
    pipe = TransitionPipeline(TransitionTiming(enter_easing="linear", update_easing="linear"))
    pipe.render({"A": _bar(width=100.0)}, now_ms=0.0)
    halfway = pipe.current(400.0)["A"]

    # Act: a new target arrives mid-flight
    run = pipe.render({"A": _bar(width=20.0)}, now_ms=400.0)

    # Assert: one update transition for A, starting where the old one was
    assert run.reconciliation.keys("update") == ["A"]
    assert run.reconciliation.enter == ()
    assert run.reconciliation.update[0].start == halfway
    assert halfway.width == pytest.approx(50.0)
    assert pipe.current(1200.0)["A"].width == pytest.approx(20.0)


def test_reappearing_key_during_exit_updates_instead_of_entering() -> None:
    pipe = TransitionPipeline()
    pipe.render({"A": _bar()}, now_ms=0.0)
    pipe.render({}, now_ms=1000.0)

    run = pipe.render({"A": _bar()}, now_ms=1100.0)

    assert run.reconciliation.keys("update") == ["A"]


def test_clear_resets_visual_state() -> None:
    pipe = TransitionPipeline()
    pipe.render({"A": _bar()}, now_ms=0.0)

    pipe.clear()

    assert pipe.current(0.0) == {}
    assert pipe.run is None


def test_layout_bars_follow_ranking(ab_dataset) -> None:
    proj = project(ab_dataset, None, 2020, "deaths")
    scales = build_scales(proj.points, "deaths")

    bars = layout_bars(proj, scales)

    assert list(bars) == ["B", "A"]
    assert bars["B"].y < bars["A"].y
    assert bars["B"].width > bars["A"].width
    assert bars["A"].x == scales.position.range[0]
    assert bars["B"].color == scales.color(80.0)


def test_layout_points_keyed_by_entity_and_step(dataset, indices) -> None:
    proj = project(dataset, indices, 2015, "deaths", {"Ohio"}, "trend")
    scales = build_scales(proj.points, "deaths", mode="trend", indices=indices)

    points = layout_points(proj, scales)

    assert list(points) == [point_key("Ohio", 2014), point_key("Ohio", 2015)]
    assert points["Ohio|2015"].x > points["Ohio|2014"].x


def test_layout_functions_need_matching_scales(ab_dataset) -> None:
    proj = project(ab_dataset, None, 2020, "deaths")
    ranking = build_scales(proj.points, "deaths")
    trend = build_scales(proj.points, "deaths", mode="trend")

    with pytest.raises(ValueError):
        layout_points(proj, ranking)
    with pytest.raises(ValueError):
        layout_bars(proj, trend)
