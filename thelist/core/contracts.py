"""Domain contracts and type definitions for the decision wheel."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

Record = dict[str, Any]
ListSnapshot = dict[str, Record]

ALL_LISTS = "all"


class ListType(str, Enum):
    """User list types."""

    MOVIES = "movies"
    TV_SHOWS = "tvShows"
    ANIME = "anime"
    BOOKS = "books"


PRIMARY_LIST_TYPES: tuple[str, ...] = tuple(t.value for t in ListType)

SERIES_LIST_TYPES: frozenset[str] = frozenset(
    {ListType.MOVIES.value, ListType.TV_SHOWS.value, ListType.ANIME.value}
)

LIST_LABELS: dict[str, str] = {
    ListType.MOVIES.value: "Movies",
    ListType.TV_SHOWS.value: "TV Shows",
    ListType.ANIME.value: "Anime",
    ListType.BOOKS.value: "Books",
}


class Status(str, Enum):
    """Status values offered when adding or editing a record."""

    PLANNED = "Planned"
    IN_PROGRESS = "Watching/Reading"
    COMPLETED = "Completed"
    DROPPED = "Dropped"


class SpinState(str, Enum):
    """Lifecycle of a wheel spin."""

    IDLE = "idle"
    LOADING = "loading"
    ANIMATING = "animating"
    SETTLED = "settled"
    CANCELLED = "cancelled"


def is_list_type(value: str | None) -> bool:
    """Return True if value names one of the primary lists."""
    return value in PRIMARY_LIST_TYPES


def is_series_bearing(list_type: str) -> bool:
    """Return True for list types whose records can form sequels."""
    return list_type in SERIES_LIST_TYPES


@dataclass(frozen=True)
class Candidate:
    """A record that may be recommended in the current spin."""

    id: str
    list_type: str
    record: Record
    cross_list: bool = False

    @property
    def title(self) -> str:
        title = self.record.get("title")
        return str(title) if title else "(no title)"


@dataclass(frozen=True)
class Tick:
    """One animation step: what to display and when (ms from spin start)."""

    index: int
    candidate: Candidate
    delay_ms: int
    final: bool = False


@dataclass(frozen=True)
class WheelSettings:
    """Timing constants for the wheel animation."""

    spin_duration_ms: int = 20000
    min_ticks: int = 28
    audio_lead_in_ms: int = 150
    audio_trigger_fraction: float = 0.12

    @classmethod
    def from_config(cls, config: Any) -> "WheelSettings":
        """Build settings from the application Config."""
        return cls(
            spin_duration_ms=config.wheel_spin_duration_ms,
            min_ticks=config.wheel_min_ticks,
            audio_lead_in_ms=config.wheel_audio_lead_in_ms,
            audio_trigger_fraction=config.wheel_audio_trigger_fraction,
        )


@dataclass
class SpinOutcome:
    """Result of a spin request once its load phase has finished."""

    status: str  # "animating", "empty", "load_failed", "cancelled"
    target: str
    chosen: Candidate | None = None
    resolved: Candidate | None = None
    ticks: list[Tick] = field(default_factory=list)
    pool_size: int = 0


class SpinError(Exception):
    """Base class for spin request rejections."""

    user_message = "Unable to spin right now."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        if message:
            self.user_message = message


class NotAuthenticatedError(SpinError):
    """Raised when a spin is requested without a signed-in user."""

    user_message = "Please /start the bot before spinning the wheel."


class InvalidTargetError(SpinError):
    """Raised when a spin targets an unknown list type."""

    user_message = "Unknown list. Choose Movies, TV Shows, Anime, Books or All."


class TimerHandle(Protocol):
    """Cancellable handle returned by a Timers implementation."""

    def cancel(self) -> None:
        ...


class Timers(Protocol):
    """Schedules callbacks relative to now, in milliseconds."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        ...


class SpinDisplay(Protocol):
    """Spinner/result surface owned by the active spin session."""

    def show_spinning(self) -> None:
        """Reveal the spinner and clear any previous result."""
        ...

    def show_current(self, candidate: Candidate) -> None:
        """Replace the 'current pick' text."""
        ...

    def show_result(self, candidate: Candidate) -> None:
        """Render the final result card and stop the spinner."""
        ...

    def show_message(self, text: str) -> None:
        """Stop the spinner and show a plain message (empty state, errors)."""
        ...

    def clear(self) -> None:
        """Stop the spinner and drop any pending output."""
        ...


class ActorFilter(Protocol):
    """Per-list actor filter consulted before eligibility."""

    def is_active(self, list_type: str) -> bool:
        ...

    def value(self, list_type: str) -> str:
        ...

    def matches(self, list_type: str, record: Record, value: str) -> bool:
        ...


SnapshotLoader = Callable[[str], Awaitable[ListSnapshot]]
AudioCue = Callable[[], object]
