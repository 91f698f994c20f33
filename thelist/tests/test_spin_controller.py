"""Tests for the spin session controller."""

import asyncio

import pytest

from thelist.core import (
    LOAD_FAILURE_MESSAGE,
    ActorFilters,
    Candidate,
    InvalidTargetError,
    NotAuthenticatedError,
    SpinController,
    SpinState,
    Timeline,
    WheelSettings,
    build_ticks,
    empty_pool_message,
    pick_index,
    resolve_redirect,
)

SETTINGS = WheelSettings()


def make_loader(lists, calls=None):
    async def load(list_type):
        if calls is not None:
            calls.append(list_type)
        value = lists.get(list_type, {})
        if isinstance(value, Exception):
            raise value
        return value

    return load


def make_controller(timers, display, lists, fixed_random, authenticated=True, **kwargs):
    return SpinController(
        display=display,
        loader=make_loader(lists),
        is_authenticated=lambda: authenticated,
        timers=timers,
        settings=SETTINGS,
        rng=fixed_random(0.0),
        **kwargs,
    )


@pytest.mark.anyio
async def test_single_list_spin_settles_on_result(timers, display, fixed_random):
    lists = {"movies": {"m1": {"title": "Alien"}, "m2": {"title": "Heat", "status": "Completed"}}}
    controller = make_controller(timers, display, lists, fixed_random)

    outcome = await controller.spin("movies")

    assert outcome.status == "animating"
    assert outcome.pool_size == 1
    assert controller.state == SpinState.ANIMATING
    assert display.calls[0] == ("spinning", None)

    timers.run_all()

    assert [c.id for c in display.of("result")] == ["m1"]
    assert controller.state == SpinState.SETTLED
    assert controller.session is None


def test_scenario_pick_later_part_redirects_to_earlier(timers, display, fixed_random):
    a = Candidate("A", "movies", {"title": "A", "seriesName": "S", "seriesOrder": 1})
    b = Candidate("B", "movies", {"title": "B", "seriesName": "S", "seriesOrder": 2})
    pool = [a, b]
    raw = {"A": a.record, "B": b.record}

    chosen = pool[pick_index(len(pool), fixed_random(0.75))]
    assert chosen == b

    resolved = resolve_redirect(chosen, raw)
    ticks = build_ticks(pool, chosen, resolved, SETTINGS, fixed_random(0.0))
    Timeline(timers, display, settings=SETTINGS).start(ticks)
    timers.run_all()

    assert display.of("result") == [a]
    assert display.of("current")[-1] == a


@pytest.mark.anyio
async def test_controller_redirects_when_filter_hides_earlier_part(timers, display, fixed_random):
    filters = ActorFilters()
    filters.set("movies", "reeves")
    lists = {
        "movies": {
            "A": {"title": "Part One", "seriesName": "S", "seriesOrder": 1},
            "B": {"title": "Part Two", "seriesName": "S", "seriesOrder": 2, "actors": ["Keanu Reeves"]},
        }
    }
    controller = make_controller(timers, display, lists, fixed_random, actor_filter=filters)

    outcome = await controller.spin("movies")
    timers.run_all()

    assert outcome.chosen.id == "B"
    assert outcome.resolved.id == "A"
    assert outcome.ticks[-1].candidate.id == "A"
    assert [c.id for c in display.of("result")] == ["A"]


@pytest.mark.anyio
async def test_scenario_empty_single_list(timers, display, fixed_random):
    controller = make_controller(timers, display, {"movies": {}}, fixed_random)

    outcome = await controller.spin("movies")

    assert outcome.status == "empty"
    assert display.of("message") == [empty_pool_message("movies")]
    assert display.of("message")[0].startswith("No eligible items in Movies")
    assert timers.scheduled == 0
    assert controller.session is None


@pytest.mark.anyio
async def test_empty_all_lists_uses_distinct_wording(timers, display, fixed_random):
    controller = make_controller(timers, display, {}, fixed_random)

    outcome = await controller.spin("all")

    assert outcome.status == "empty"
    message = display.of("message")[0]
    assert message == empty_pool_message("all")
    assert message != empty_pool_message("movies")
    assert message != LOAD_FAILURE_MESSAGE


@pytest.mark.anyio
async def test_scenario_all_mode_single_eligible_item(timers, display, fixed_random):
    lists = {"tvShows": {}, "books": {"x": {"title": "X"}}}
    controller = make_controller(timers, display, lists, fixed_random)

    outcome = await controller.spin("all")

    assert outcome.pool_size == 1
    assert outcome.resolved.id == "x"
    assert outcome.resolved.cross_list
    ticks = outcome.ticks
    assert len(ticks) == SETTINGS.min_ticks + 1
    assert ticks[0].delay_ms == 0
    assert ticks[-1].index == len(ticks) - 1
    assert ticks[-1].delay_ms == SETTINGS.spin_duration_ms

    timers.run_all()
    assert [c.id for c in display.of("result")] == ["x"]


@pytest.mark.anyio
async def test_all_mode_loads_every_list(timers, display, fixed_random):
    calls = []
    controller = SpinController(
        display=display,
        loader=make_loader({"anime": {"a": {"title": "Akira"}}}, calls),
        is_authenticated=lambda: True,
        timers=timers,
        rng=fixed_random(0.0),
    )

    await controller.spin("all")

    assert sorted(calls) == ["anime", "books", "movies", "tvShows"]


@pytest.mark.anyio
async def test_scenario_second_spin_cancels_first(timers, display, fixed_random):
    lists = {
        "movies": {"m1": {"title": "Alien"}, "m2": {"title": "Brazil"}},
        "books": {"b1": {"title": "Dune"}},
    }
    controller = make_controller(timers, display, lists, fixed_random)

    first = await controller.spin("movies")
    timers.advance(3000)
    shown_before = len(display.of("current"))
    assert 0 < shown_before < len(first.ticks)

    second = await controller.spin("books")
    timers.run_all()

    later = display.of("current")[shown_before:]
    assert later == [t.candidate for t in second.ticks]
    assert [c.id for c in display.of("result")] == ["b1"]


@pytest.mark.anyio
async def test_close_cancels_pending_timers(timers, display, fixed_random):
    controller = make_controller(timers, display, {"movies": {"m1": {"title": "Alien"}}}, fixed_random)

    await controller.spin("movies")
    controller.close()
    calls = len(display.calls)

    assert timers.pending == 0
    timers.advance(SETTINGS.spin_duration_ms * 2)

    assert len(display.calls) == calls
    assert display.calls[-1] == ("clear", None)
    assert controller.state == SpinState.IDLE


@pytest.mark.anyio
async def test_not_authenticated_changes_nothing(timers, display, fixed_random):
    controller = make_controller(timers, display, {}, fixed_random, authenticated=False)

    with pytest.raises(NotAuthenticatedError) as exc_info:
        await controller.spin("movies")

    assert "/start" in exc_info.value.user_message
    assert display.calls == []
    assert controller.state == SpinState.IDLE


@pytest.mark.anyio
async def test_invalid_target_keeps_running_spin(timers, display, fixed_random):
    controller = make_controller(timers, display, {"movies": {"m1": {"title": "Alien"}}}, fixed_random)
    await controller.spin("movies")
    session = controller.session

    with pytest.raises(InvalidTargetError):
        await controller.spin("podcasts")

    assert controller.session is session
    timers.run_all()
    assert [c.id for c in display.of("result")] == ["m1"]


@pytest.mark.anyio
async def test_load_failure_shows_generic_message(timers, display, fixed_random):
    lists = {"movies": {"m1": {"title": "Alien"}}, "books": RuntimeError("store offline")}
    controller = make_controller(timers, display, lists, fixed_random)

    outcome = await controller.spin("all")

    assert outcome.status == "load_failed"
    assert display.of("message") == [LOAD_FAILURE_MESSAGE]
    assert controller.state == SpinState.CANCELLED
    assert timers.scheduled == 0

    # A later spin is not blocked
    retry = await controller.spin("movies")
    assert retry.status == "animating"


@pytest.mark.anyio
async def test_superseded_load_is_ignored(timers, display, fixed_random):
    gate = asyncio.Event()

    async def slow_then_fast(list_type):
        if list_type == "movies":
            await gate.wait()
            return {"m1": {"title": "Slow"}}
        return {"b1": {"title": "Fast"}}

    controller = SpinController(
        display=display,
        loader=slow_then_fast,
        is_authenticated=lambda: True,
        timers=timers,
        rng=fixed_random(0.0),
    )

    slow = asyncio.create_task(controller.spin("movies"))
    await asyncio.sleep(0)
    fast = await controller.spin("books")
    gate.set()
    slow_outcome = await slow

    assert slow_outcome.status == "cancelled"
    assert fast.status == "animating"

    timers.run_all()
    assert [c.id for c in display.of("result")] == ["b1"]
    assert all(c.id == "b1" for c in display.of("current"))
