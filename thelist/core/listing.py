"""List display helpers: sorting, actor filtering and library search."""

import re
from typing import Any, Mapping

from thelist.core.actor_filter import ActorFilters, record_actors, supports_actor_filter
from thelist.core.contracts import PRIMARY_LIST_TYPES, ListSnapshot, Record
from thelist.core.series import Entry, parse_series_order

SORT_MODES = ("title", "yearAsc", "yearDesc", "director", "series")

MISSING_YEAR = 9999

_LEADING_ARTICLE = re.compile(r"^(the|a|an)\s+", re.IGNORECASE)


def title_sort_key(title: str | None) -> str:
    """Lower-cased title with a leading English article removed."""
    text = (title or "").strip().lower()
    return _LEADING_ARTICLE.sub("", text)


def parse_year(value: Any) -> int:
    """Leading integer of a year value, or MISSING_YEAR."""
    match = re.match(r"\s*(\d+)", str(value)) if value else None
    return int(match.group(1)) if match else MISSING_YEAR


def _creator(record: Record) -> str:
    return str(record.get("director") or record.get("author") or "").lower()


def sort_list_entries(entries: list[Entry], mode: str = "title") -> list[Entry]:
    """Sort list entries for display.

    Args:
        entries: (record id, record) pairs
        mode: One of SORT_MODES; unknown modes sort by title

    Returns:
        New sorted list
    """

    def key(entry: Entry) -> tuple:
        record = entry[1] or {}
        title = title_sort_key(record.get("title"))
        if mode == "yearAsc":
            return (parse_year(record.get("year")), title)
        if mode == "yearDesc":
            return (-parse_year(record.get("year")), title)
        if mode == "director":
            creator = _creator(record)
            # Records without a director/author go last
            return (creator == "", creator, title)
        if mode == "series":
            series = str(record.get("seriesName") or "").lower()
            return (series == "", series, parse_series_order(record.get("seriesOrder")), title)
        return (title,)

    return sorted(entries, key=key)


def apply_actor_filter(
    list_type: str,
    entries: list[Entry],
    filters: ActorFilters | None,
) -> tuple[list[Entry], str]:
    """Restrict entries by the list's actor filter.

    Returns:
        Tuple of (filtered entries, active filter value or "")
    """
    if filters is None or not supports_actor_filter(list_type) or not filters.is_active(list_type):
        return list(entries), ""
    value = filters.value(list_type)
    return [e for e in entries if filters.matches(list_type, e[1], value)], value


def matches_search(record: Record | None, query: str) -> bool:
    """Case-insensitive substring search over the descriptive fields."""
    needle = (query or "").strip().lower()
    if not needle:
        return True
    if not record:
        return False

    genres = record.get("animeGenres")
    if isinstance(genres, (list, tuple)):
        genres = " ".join(str(g) for g in genres)

    fields = [
        record.get("title"),
        record.get("notes"),
        record.get("plot"),
        record.get("seriesName"),
        record.get("director"),
        record.get("author"),
        " ".join(record_actors(record)),
        genres,
    ]
    return any(field and needle in str(field).lower() for field in fields)


def search_library(
    snapshots: Mapping[str, ListSnapshot],
    query: str,
) -> list[tuple[str, str, Record]]:
    """Search every list and return (list type, record id, record) matches.

    Results are ordered by title, then year, then list order.
    """
    matches = []
    for list_type in PRIMARY_LIST_TYPES:
        for record_id, record in (snapshots.get(list_type) or {}).items():
            if matches_search(record, query):
                matches.append((list_type, record_id, record))

    matches.sort(
        key=lambda m: (
            title_sort_key(m[2].get("title")),
            parse_year(m[2].get("year")),
            PRIMARY_LIST_TYPES.index(m[0]),
        )
    )
    return matches
