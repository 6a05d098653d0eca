from __future__ import annotations

import asyncio

import pytest

from statrace.engine.animation import (
    AnimationClock,
    AnimationController,
    AsyncioScheduler,
    ManualScheduler,
    advance,
    seek,
)


def _controller(
    interval_ms: int = 800, *, autostart: bool = True
) -> tuple[AnimationController, ManualScheduler, list[int]]:
    sched = ManualScheduler()
    ctl = AnimationController(
        AnimationClock.initial(2014, 2023, interval_ms), sched, autostart=autostart
    )
    seen: list[int] = []
    ctl.subscribe(lambda clock: seen.append(clock.current_time_step))
    return ctl, sched, seen


def test_initial_clock_is_playing_at_first_step() -> None:
    clock = AnimationClock.initial(2014, 2023)

    assert clock.is_playing
    assert clock.current_time_step == 2014
    assert (clock.position, clock.length) == (1, 10)


def test_initial_clock_rejects_bad_inputs() -> None:
    with pytest.raises(ValueError):
        AnimationClock.initial(2023, 2014)
    with pytest.raises(ValueError):
        AnimationClock.initial(2014, 2023, 0)


def test_advance_wraps_to_first_step() -> None:
    clock = AnimationClock.initial(2014, 2023)

    # nine ticks reach the last step, the tenth wraps
    for _ in range(9):
        clock = advance(clock)
    assert clock.current_time_step == 2023
    assert advance(clock).current_time_step == 2014


def test_single_step_bounds_wrap_onto_themselves() -> None:
    clock = AnimationClock.initial(2020, 2020)

    assert advance(clock).current_time_step == 2020


def test_playing_controller_ticks_on_interval() -> None:
    ctl, sched, seen = _controller(800)

    sched.advance(799)
    assert seen == []
    sched.advance(1)
    assert seen == [2015]
    sched.advance(800 * 9)
    assert seen[-1] == 2014
    assert len(seen) == 10


def test_pause_cancels_pending_tick() -> None:
    ctl, sched, seen = _controller(800)
    sched.advance(500)

    ctl.pause()
    sched.advance(10_000)

    assert seen == []
    assert not ctl.has_pending_tick
    assert ctl.clock.state == "paused"


def test_resume_starts_a_full_interval() -> None:
    ctl, sched, seen = _controller(800, autostart=False)
    ctl.pause()

    ctl.resume()
    sched.advance(799)
    assert seen == []
    sched.advance(1)
    assert seen == [2015]


def test_toggle_flips_play_state() -> None:
    ctl, _, _ = _controller()

    ctl.toggle()
    assert not ctl.clock.is_playing
    ctl.toggle()
    assert ctl.clock.is_playing
    assert ctl.has_pending_tick


def test_set_speed_restarts_timer_with_new_interval() -> None:
    # Arrange: 700 ms into an 800 ms interval
    ctl, sched, seen = _controller(800)
    sched.advance(700)

    # Act
    ctl.set_speed(300)

    # Assert: the old tick (due at 800) never fires; the next one is 300 ms out
    sched.advance(299)
    assert seen == []
    sched.advance(1)
    assert seen == [2015]
    assert ctl.clock.interval_ms == 300


def test_set_speed_while_paused_does_not_schedule() -> None:
    ctl, sched, seen = _controller(800)
    ctl.pause()

    ctl.set_speed(200)
    sched.advance(1000)

    assert seen == []
    assert ctl.clock.interval_ms == 200


def test_set_speed_rejects_non_positive_interval() -> None:
    ctl, _, _ = _controller()

    with pytest.raises(ValueError):
        ctl.set_speed(0)


def test_set_time_step_clamps_and_notifies() -> None:
    ctl, _, seen = _controller()
    ctl.pause()

    ctl.set_time_step(2019)
    ctl.set_time_step(3000)
    ctl.set_time_step(1900)

    assert seen == [2019, 2023, 2014]
    assert not ctl.clock.is_playing


def test_seek_keeps_play_state() -> None:
    clock = AnimationClock.initial(2014, 2023)

    assert seek(clock, 2018).is_playing


def test_activate_is_idempotent_for_a_pending_view() -> None:
    ctl, sched, seen = _controller(800)
    sched.advance(600)

    # repeated activation (e.g. on every UI rerun) must not push the tick back
    ctl.activate()
    ctl.activate()
    sched.advance(200)

    assert seen == [2015]


def test_deactivate_cancels_and_activate_restarts() -> None:
    ctl, sched, seen = _controller(800)

    ctl.deactivate()
    sched.advance(5000)
    assert seen == []
    assert ctl.clock.is_playing
    assert not ctl.active

    ctl.activate()
    sched.advance(800)
    assert seen == [2015]


def test_dispose_drops_listeners_and_timer() -> None:
    ctl, sched, seen = _controller(800)

    ctl.dispose()
    sched.advance(5000)
    ctl.set_time_step(2020)

    assert seen == []
    assert sched.pending == 0


def test_unsubscribe_stops_notifications() -> None:
    ctl, sched, seen = _controller(100)
    other: list[int] = []
    unsubscribe = ctl.subscribe(lambda clock: other.append(clock.current_time_step))

    sched.advance(100)
    unsubscribe()
    sched.advance(100)

    assert other == [2015]
    assert seen == [2015, 2016]


def test_controllers_share_a_scheduler_independently() -> None:
    sched = ManualScheduler()
    fast = AnimationController(AnimationClock.initial(2014, 2023, 100), sched)
    slow = AnimationController(AnimationClock.initial(2014, 2023, 1000), sched)

    sched.advance(1000)

    # ten ticks wrap once
    assert fast.clock.current_time_step == 2014
    assert slow.clock.current_time_step == 2015


def test_asyncio_scheduler_notifies_listener() -> None:
    async def _run() -> list[int]:
        ctl = AnimationController(
            AnimationClock.initial(2014, 2023, 10), AsyncioScheduler()
        )
        seen: list[int] = []
        ctl.subscribe(lambda clock: seen.append(clock.current_time_step))
        await asyncio.sleep(0.05)
        ctl.dispose()
        return seen

    seen = asyncio.run(_run())

    assert seen
    assert seen[0] == 2015
