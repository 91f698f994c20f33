"""Tests for the tick timeline and audio cue scheduling."""

import pytest

from thelist.core import Candidate, Timeline, WheelSettings, build_ticks
from thelist.core.timeline import audio_cue_delay, audio_cue_index, ease_out_cubic, tick_delays

SETTINGS = WheelSettings()


def _pool(size):
    return [Candidate(str(i), "movies", {"title": f"Title {i:02d}"}) for i in range(size)]


def test_ease_out_cubic_endpoints():
    assert ease_out_cubic(0) == 0
    assert ease_out_cubic(1) == 1
    assert ease_out_cubic(0.5) == pytest.approx(0.875)


def test_tick_delays_degenerate():
    assert tick_delays(1, 20000) == [0]
    assert tick_delays(0, 20000) == []


@pytest.mark.parametrize("size", [1, 2, 5, 6, 40])
def test_ticks_non_decreasing_and_end_on_resolved(size, fixed_random):
    pool = _pool(size)
    chosen = pool[-1]
    resolved = Candidate("redirected", "movies", {"title": "Earlier part"})

    ticks = build_ticks(pool, chosen, resolved, SETTINGS, fixed_random(0.3))

    delays = [t.delay_ms for t in ticks]
    assert delays == sorted(delays)
    assert len(ticks) == max(SETTINGS.min_ticks, size * 5) + 1
    assert ticks[0].delay_ms == 0
    assert ticks[-1].delay_ms == SETTINGS.spin_duration_ms
    assert ticks[-1].final and ticks[-1].candidate == resolved
    assert [t.index for t in ticks] == list(range(len(ticks)))
    assert not any(t.final for t in ticks[:-1])


def test_filler_walk_is_circular_from_seeded_offset(fixed_random):
    pool = _pool(3)

    ticks = build_ticks(pool, pool[1], pool[1], WheelSettings(min_ticks=6), fixed_random(0.4))

    # start = (1 + floor(0.4 * 3)) % 3 = 2
    assert [t.candidate.id for t in ticks[:-1]] == ["2", "0", "1"] * 5


def test_build_ticks_rejects_empty_pool():
    with pytest.raises(ValueError):
        build_ticks([], None, None, SETTINGS)


def test_audio_cue_delay():
    ticks = build_ticks(_pool(1), _pool(1)[0], _pool(1)[0], SETTINGS)
    # 29 ticks: floor(29 * 0.12) = 3
    assert audio_cue_index(len(ticks), SETTINGS) == 3
    assert audio_cue_delay(ticks, SETTINGS) == max(0, ticks[3].delay_ms - 150)


def test_audio_cue_index_clamped():
    assert audio_cue_index(1, SETTINGS) is None
    assert audio_cue_index(2, SETTINGS) == 1
    assert audio_cue_index(10, WheelSettings(audio_trigger_fraction=1.0)) == 9


def test_timeline_fires_in_order_and_settles(timers, display):
    pool = _pool(2)
    ticks = build_ticks(pool, pool[0], pool[0], WheelSettings(min_ticks=4, spin_duration_ms=1000))
    settled = []

    timeline = Timeline(timers, display, settings=WheelSettings(min_ticks=4, spin_duration_ms=1000))
    timeline.start(ticks, settled.append)

    assert timers.pending == len(ticks)  # no audio cue configured
    timers.run_all()

    assert display.of("current") == [t.candidate for t in ticks]
    assert display.of("result") == [pool[0]]
    assert settled == [pool[0]]
    assert not timeline.running


def test_timeline_cancel_silences_everything(timers, display):
    cues = []
    pool = _pool(3)
    ticks = build_ticks(pool, pool[0], pool[0], SETTINGS)
    timeline = Timeline(timers, display, audio_cue=lambda: cues.append(1), settings=SETTINGS)

    timeline.start(ticks)
    timers.advance(1)
    shown = len(display.calls)
    assert shown == 1  # only the delay-0 tick

    timeline.cancel()
    assert timers.pending == 0
    assert timeline.pending_count == 0

    timers.advance(SETTINGS.spin_duration_ms * 2)
    assert len(display.calls) == shown
    assert cues == []


def test_stale_callbacks_ignored_even_if_not_cancelled(display):
    """A timer that could not be cancelled must still be a no-op."""

    class LeakyTimers:
        def __init__(self):
            self.callbacks = []

        def call_later(self, delay_ms, callback):
            self.callbacks.append(callback)

            class Handle:
                def cancel(self):
                    pass

            return Handle()

    leaky = LeakyTimers()
    pool = _pool(1)
    ticks = build_ticks(pool, pool[0], pool[0], SETTINGS)
    timeline = Timeline(leaky, display, settings=SETTINGS)

    timeline.start(ticks)
    timeline.cancel()
    for callback in leaky.callbacks:
        callback()

    assert display.calls == []


def test_audio_cue_fires_once_and_failures_are_swallowed(timers, display):
    calls = []

    def cue():
        calls.append(timers.now)
        raise RuntimeError("no speaker")

    pool = _pool(1)
    ticks = build_ticks(pool, pool[0], pool[0], SETTINGS)
    timeline = Timeline(timers, display, audio_cue=cue, settings=SETTINGS)
    timeline.start(ticks)

    assert timers.pending == len(ticks) + 1
    timers.run_all()

    assert calls == [audio_cue_delay(ticks, SETTINGS)]
    assert display.of("result") == [pool[0]]


def test_restart_replaces_previous_schedule(timers, display):
    first = _pool(2)
    second = [Candidate("n", "books", {"title": "New"})]
    timeline = Timeline(timers, display, settings=SETTINGS)

    timeline.start(build_ticks(first, first[0], first[0], SETTINGS))
    timers.advance(2000)
    timeline.start(build_ticks(second, second[0], second[0], SETTINGS))
    before = len(display.calls)
    timers.run_all()

    later = [value for _, value in display.calls[before:]]
    assert all(c.id == "n" for c in later)
    assert display.of("result") == [second[0]]
