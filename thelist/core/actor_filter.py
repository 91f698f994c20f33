"""Per-list actor filter used by list views and the wheel pool."""

from thelist.core.contracts import ListType, Record

ACTOR_FILTER_LIST_TYPES = frozenset({ListType.MOVIES.value, ListType.TV_SHOWS.value})


def supports_actor_filter(list_type: str) -> bool:
    """Return True if records of this list carry a cast."""
    return list_type in ACTOR_FILTER_LIST_TYPES


def record_actors(record: Record) -> list[str]:
    """Return the record's actors as a list of names."""
    actors = record.get("actors")
    if not actors:
        return []
    if isinstance(actors, str):
        return [a.strip() for a in actors.split(",") if a.strip()]
    return [str(a) for a in actors if a]


def matches_actor_filter(list_type: str, record: Record, value: str) -> bool:
    """Case-insensitive substring match of value against the record's cast."""
    if not supports_actor_filter(list_type):
        return True
    needle = (value or "").strip().lower()
    if not needle:
        return True
    return any(needle in actor.lower() for actor in record_actors(record))


class ActorFilters:
    """Actor filter values keyed by list type."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def set(self, list_type: str, value: str | None) -> None:
        """Set or clear (empty value) the filter for a list."""
        cleaned = (value or "").strip()
        if cleaned and supports_actor_filter(list_type):
            self._values[list_type] = cleaned
        else:
            self._values.pop(list_type, None)

    def is_active(self, list_type: str) -> bool:
        return supports_actor_filter(list_type) and bool(self._values.get(list_type))

    def value(self, list_type: str) -> str:
        return self._values.get(list_type, "")

    def matches(self, list_type: str, record: Record, value: str) -> bool:
        return matches_actor_filter(list_type, record, value)

    def clear(self) -> None:
        self._values.clear()
