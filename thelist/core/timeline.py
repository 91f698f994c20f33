"""Eased tick timeline for the wheel animation and its audio cue."""

import asyncio
import math
import random
from functools import partial
from typing import Callable

from thelist.core.contracts import (
    AudioCue,
    Candidate,
    SpinDisplay,
    Tick,
    TimerHandle,
    Timers,
    WheelSettings,
)
from thelist.logging import get_logger

logger = get_logger(__name__)


def ease_out_cubic(progress: float) -> float:
    """Cubic ease-out: fast start, decelerating finish."""
    return 1 - (1 - progress) ** 3


def tick_delays(tick_count: int, total_ms: int) -> list[int]:
    """Delays (ms from start) for tick_count ticks spread over total_ms.

    Args:
        tick_count: Number of ticks including the final one
        total_ms: Delay of the last tick

    Returns:
        Non-decreasing delays; all zero when there is a single tick
    """
    last = tick_count - 1
    if last <= 0:
        return [0] * max(tick_count, 0)
    return [round(ease_out_cubic(i / last) * total_ms) for i in range(tick_count)]


def build_ticks(
    pool: list[Candidate],
    chosen: Candidate,
    resolved: Candidate,
    settings: WheelSettings,
    rng: random.Random | None = None,
) -> list[Tick]:
    """Build the filler walk plus the final tick.

    The filler walk goes round the pool from an offset seeded by the chosen
    candidate's position. The final tick always shows the resolved
    candidate, which may differ from the chosen one after a redirect.

    Args:
        pool: Candidate pool (non-empty)
        chosen: Candidate picked before redirect resolution
        resolved: Candidate to land on
        settings: Wheel timing settings
        rng: Optional random source

    Returns:
        Ticks ordered by index with non-decreasing delays
    """
    if not pool:
        raise ValueError("Cannot build a timeline for an empty pool")

    rnd = rng or random
    size = len(pool)
    iterations = max(settings.min_ticks, size * 5)

    try:
        chosen_index = pool.index(chosen)
    except ValueError:
        chosen_index = 0
    start = (chosen_index + math.floor(rnd.random() * size)) % size

    sequence = [pool[(start + i) % size] for i in range(iterations)]
    sequence.append(resolved)

    delays = tick_delays(len(sequence), settings.spin_duration_ms)
    last = len(sequence) - 1
    return [
        Tick(index=i, candidate=candidate, delay_ms=delays[i], final=(i == last))
        for i, candidate in enumerate(sequence)
    ]


def audio_cue_index(tick_count: int, settings: WheelSettings) -> int | None:
    """Tick index whose delay anchors the acceleration sound."""
    if tick_count < 2:
        return None
    index = math.floor(tick_count * settings.audio_trigger_fraction)
    return max(1, min(index, tick_count - 1))


def audio_cue_delay(ticks: list[Tick], settings: WheelSettings) -> int | None:
    """Delay of the acceleration sound: anchor tick minus lead-in, floored at 0."""
    index = audio_cue_index(len(ticks), settings)
    if index is None:
        return None
    return max(0, ticks[index].delay_ms - settings.audio_lead_in_ms)


class LoopTimers:
    """Timers backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(delay_ms, 0) / 1000, callback)


class Timeline:
    """Schedules tick and audio timers for one spin at a time.

    Starting a new timeline or cancelling bumps the generation, so a
    callback from an older schedule never touches the display even if its
    timer could not be cancelled.
    """

    def __init__(
        self,
        timers: Timers,
        display: SpinDisplay,
        audio_cue: AudioCue | None = None,
        settings: WheelSettings | None = None,
    ) -> None:
        self.timers = timers
        self.display = display
        self.audio_cue = audio_cue
        self.settings = settings or WheelSettings()
        self._generation = 0
        self._handles: list[TimerHandle] = []
        self._audio_handle: TimerHandle | None = None
        self._last_index = -1
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pending_count(self) -> int:
        """Number of timers still held (ticks plus audio)."""
        return len(self._handles) + (1 if self._audio_handle is not None else 0)

    def start(
        self,
        ticks: list[Tick],
        on_settled: Callable[[Candidate], None] | None = None,
    ) -> None:
        """Schedule every tick and the audio cue, replacing any previous run."""
        self.cancel()
        if not ticks:
            return

        generation = self._generation
        self._last_index = -1
        self._running = True

        for tick in ticks:
            handle = self.timers.call_later(
                tick.delay_ms, partial(self._fire, generation, tick, on_settled)
            )
            self._handles.append(handle)

        cue_delay = audio_cue_delay(ticks, self.settings)
        if cue_delay is not None and self.audio_cue is not None:
            self._audio_handle = self.timers.call_later(
                cue_delay, partial(self._play_cue, generation)
            )

    def cancel(self) -> None:
        """Cancel every pending tick and the audio timer."""
        self._generation += 1
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
        if self._audio_handle is not None:
            self._audio_handle.cancel()
            self._audio_handle = None
        self._running = False

    def _fire(
        self,
        generation: int,
        tick: Tick,
        on_settled: Callable[[Candidate], None] | None,
    ) -> None:
        if generation != self._generation:
            return
        # Equal delays may fire out of order; never step backwards.
        if tick.index <= self._last_index:
            return
        self._last_index = tick.index

        self.display.show_current(tick.candidate)
        if not tick.final:
            return

        self._handles.clear()
        self._running = False
        self.display.show_result(tick.candidate)
        if on_settled is not None:
            on_settled(tick.candidate)

    def _play_cue(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._audio_handle = None
        if self.audio_cue is None:
            return
        try:
            self.audio_cue()
        except Exception as e:
            logger.debug(f"Acceleration cue failed: {e}")
