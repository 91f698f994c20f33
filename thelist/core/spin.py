"""Spin session controller: load, build pool, pick, resolve, animate."""

import asyncio
import random
from dataclasses import dataclass, field
from functools import partial
from typing import Callable

from thelist.core.contracts import (
    ALL_LISTS,
    ActorFilter,
    AudioCue,
    Candidate,
    InvalidTargetError,
    LIST_LABELS,
    NotAuthenticatedError,
    PRIMARY_LIST_TYPES,
    SnapshotLoader,
    SpinDisplay,
    SpinOutcome,
    SpinState,
    Timers,
    WheelSettings,
    is_list_type,
)
from thelist.core.pool import build_all_pool, build_list_pool
from thelist.core.redirect import pick_index, resolve_redirect
from thelist.core.timeline import LoopTimers, Timeline, build_ticks
from thelist.logging import get_logger

logger = get_logger(__name__)

LOAD_FAILURE_MESSAGE = "Unable to load items."


def empty_pool_message(target: str) -> str:
    """Empty-state text, worded differently for single-list and all-list spins."""
    if target == ALL_LISTS:
        return "No eligible items in any of your lists. Add something or reset a status first!"
    label = LIST_LABELS.get(target, target)
    return f"No eligible items in {label}. Add something or reset a status first!"


def normalize_target(target: str | None) -> str:
    """Validate a spin target and return it.

    Raises:
        InvalidTargetError: If target is neither a list type nor "all"
    """
    value = (target or "").strip()
    if value == ALL_LISTS or is_list_type(value):
        return value
    raise InvalidTargetError()


@dataclass
class SpinSession:
    """Mutable state of one in-flight spin."""

    generation: int
    target: str
    display: SpinDisplay
    timeline: Timeline
    state: SpinState = SpinState.LOADING
    list_types: tuple[str, ...] = field(default_factory=tuple)


class SpinController:
    """Runs one spin at a time against a display it owns.

    Args:
        display: Spinner/result surface
        loader: Cache-or-store snapshot loader for one list type
        is_authenticated: Session presence check
        timers: Timer scheduler (defaults to the running event loop)
        audio_cue: Fire-and-forget acceleration sound
        actor_filter: Optional per-list actor filter
        settings: Wheel timing settings
        rng: Random source (injectable for tests)
    """

    def __init__(
        self,
        display: SpinDisplay,
        loader: SnapshotLoader,
        is_authenticated: Callable[[], bool],
        timers: Timers | None = None,
        audio_cue: AudioCue | None = None,
        actor_filter: ActorFilter | None = None,
        settings: WheelSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.display = display
        self.loader = loader
        self.is_authenticated = is_authenticated
        self.timers = timers or LoopTimers()
        self.audio_cue = audio_cue
        self.actor_filter = actor_filter
        self.settings = settings or WheelSettings()
        self.rng = rng or random.Random()
        self.state = SpinState.IDLE
        self._generation = 0
        self._session: SpinSession | None = None

    @property
    def session(self) -> SpinSession | None:
        return self._session

    async def spin(self, target: str) -> SpinOutcome:
        """Run a spin for one list type or "all".

        Rejections leave the current session untouched. Any accepted request
        cancels the previous session before loading.

        Args:
            target: List type or "all"

        Returns:
            SpinOutcome describing how the load phase ended

        Raises:
            NotAuthenticatedError: No signed-in user
            InvalidTargetError: Unknown list type
        """
        if not self.is_authenticated():
            raise NotAuthenticatedError()
        target = normalize_target(target)

        self.cancel()
        session = self._begin(target)
        self.display.show_spinning()

        try:
            results = await asyncio.gather(*(self.loader(t) for t in session.list_types))
        except Exception as e:
            if not self._owns(session):
                return SpinOutcome(status="cancelled", target=target)
            logger.exception(f"Wheel load failed for {target}: {e}")
            self._end(session)
            self.display.show_message(LOAD_FAILURE_MESSAGE)
            return SpinOutcome(status="load_failed", target=target)

        if not self._owns(session):
            logger.debug(f"Ignoring load for superseded spin {session.generation}")
            return SpinOutcome(status="cancelled", target=target)

        snapshots = {
            list_type: dict(snapshot or {})
            for list_type, snapshot in zip(session.list_types, results)
        }

        if target == ALL_LISTS:
            pool = build_all_pool(snapshots, self.actor_filter)
        else:
            pool = build_list_pool(target, snapshots[target], self.actor_filter)

        if not pool:
            logger.info(f"Wheel spin for {target}: no eligible items")
            self._end(session)
            self.display.show_message(empty_pool_message(target))
            return SpinOutcome(status="empty", target=target)

        chosen = pool[pick_index(len(pool), self.rng)]
        resolved = resolve_redirect(chosen, snapshots[chosen.list_type])
        if resolved.id != chosen.id:
            logger.info(
                f"Wheel redirected {chosen.title!r} to earlier entry {resolved.title!r}"
            )

        ticks = build_ticks(pool, chosen, resolved, self.settings, self.rng)

        session.state = SpinState.ANIMATING
        self.state = SpinState.ANIMATING
        session.timeline.start(ticks, partial(self._settle, session))

        logger.info(
            f"Wheel spin for {target}: pool={len(pool)} ticks={len(ticks)} "
            f"pick={resolved.list_type}/{resolved.id}"
        )
        return SpinOutcome(
            status="animating",
            target=target,
            chosen=chosen,
            resolved=resolved,
            ticks=ticks,
            pool_size=len(pool),
        )

    def cancel(self) -> None:
        """Cancel the active session, clearing all of its timers."""
        session = self._session
        if session is None:
            return
        self._generation += 1
        session.timeline.cancel()
        session.state = SpinState.CANCELLED
        self._session = None
        self.state = SpinState.CANCELLED
        logger.debug(f"Cancelled spin {session.generation} ({session.target})")

    def close(self) -> None:
        """Tear down: cancel any spin and release the display."""
        self.cancel()
        self.display.clear()
        self.state = SpinState.IDLE

    def _begin(self, target: str) -> SpinSession:
        self._generation += 1
        list_types = PRIMARY_LIST_TYPES if target == ALL_LISTS else (target,)
        session = SpinSession(
            generation=self._generation,
            target=target,
            display=self.display,
            timeline=Timeline(self.timers, self.display, self.audio_cue, self.settings),
            list_types=list_types,
        )
        self._session = session
        self.state = SpinState.LOADING
        return session

    def _owns(self, session: SpinSession) -> bool:
        return self._session is session and session.generation == self._generation

    def _end(self, session: SpinSession) -> None:
        session.state = SpinState.CANCELLED
        self._session = None
        self.state = SpinState.CANCELLED

    def _settle(self, session: SpinSession, candidate: Candidate) -> None:
        if not self._owns(session):
            return
        session.state = SpinState.SETTLED
        self._session = None
        self.state = SpinState.SETTLED
        logger.info(f"Wheel settled on {candidate.list_type}/{candidate.id}")
