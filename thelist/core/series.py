"""Series grouping: collapse sequels to their earliest unwatched entry."""

import math
from typing import Any, Iterable

from thelist.core.contracts import Record
from thelist.core.eligibility import is_eligible, is_watched

Entry = tuple[str, Record]


def parse_series_order(value: Any) -> float:
    """Parse a series order value, returning +inf when it is not a number.

    Args:
        value: Raw seriesOrder value (int, float or numeric string)

    Returns:
        Parsed order, or math.inf for missing/unparseable input
    """
    if value is None or isinstance(value, bool):
        return math.inf
    try:
        order = float(str(value).strip())
    except (TypeError, ValueError):
        return math.inf
    if math.isnan(order):
        return math.inf
    return order


def series_key(record: Record) -> str:
    """Case-insensitive series name, or empty string for standalone records."""
    name = record.get("seriesName")
    if not name:
        return ""
    return str(name).strip().lower()


def series_sort_key(entry: Entry) -> tuple[float, str]:
    _, record = entry
    return (parse_series_order(record.get("seriesOrder")), str(record.get("title") or "").lower())


def earliest_unwatched(entries: Iterable[Entry]) -> Entry | None:
    """Return the first unwatched entry of a series, in series order.

    Drop state is ignored here: only watched-ness matters.
    """
    for entry in sorted(entries, key=series_sort_key):
        if not is_watched(entry[1]):
            return entry
    return None


def group_by_series(entries: Iterable[Entry]) -> tuple[list[Entry], dict[str, list[Entry]]]:
    """Split entries into standalone records and series groups.

    Returns:
        Tuple of (standalone entries, series key -> member entries)
    """
    standalone: list[Entry] = []
    groups: dict[str, list[Entry]] = {}
    for entry in entries:
        key = series_key(entry[1])
        if key:
            groups.setdefault(key, []).append(entry)
        else:
            standalone.append(entry)
    return standalone, groups


def reduce_series(entries: Iterable[Entry]) -> list[Entry]:
    """Collapse every series to its single earliest unwatched member.

    Standalone records pass through when eligible. A series whose members
    are all watched contributes nothing.

    Args:
        entries: (record id, record) pairs from one list

    Returns:
        Reduced entries; at most one per case-insensitive series name
    """
    standalone, groups = group_by_series(entries)

    reduced = [entry for entry in standalone if is_eligible(entry[1])]
    for members in groups.values():
        representative = earliest_unwatched(members)
        if representative is not None:
            reduced.append(representative)

    return reduced
