"""Candidate pool construction for single-list and cross-list spins."""

from typing import Mapping

from thelist.core.contracts import (
    ActorFilter,
    Candidate,
    ListSnapshot,
    PRIMARY_LIST_TYPES,
    is_series_bearing,
)
from thelist.core.eligibility import is_eligible
from thelist.core.series import Entry, reduce_series


def filtered_entries(
    list_type: str,
    snapshot: ListSnapshot,
    actor_filter: ActorFilter | None = None,
) -> list[Entry]:
    """Snapshot entries restricted by the active actor filter, if any."""
    entries = [(record_id, record) for record_id, record in (snapshot or {}).items() if record]
    if actor_filter is None or not actor_filter.is_active(list_type):
        return entries

    value = actor_filter.value(list_type)
    return [
        (record_id, record)
        for record_id, record in entries
        if actor_filter.matches(list_type, record, value)
    ]


def candidate_sort_key(candidate: Candidate) -> tuple[str, str]:
    return (str(candidate.record.get("title") or "").lower(), candidate.id)


def build_list_pool(
    list_type: str,
    snapshot: ListSnapshot,
    actor_filter: ActorFilter | None = None,
    cross_list: bool = False,
) -> list[Candidate]:
    """Build the spin candidates for one list.

    Actor filter first, then series reduction (series-bearing lists only),
    then eligibility. Sorted by case-insensitive title.

    Args:
        list_type: List the snapshot belongs to
        snapshot: Raw record-id -> record mapping
        actor_filter: Optional actor filter collaborator
        cross_list: Tag candidates as coming from a cross-list spin

    Returns:
        Sorted list of candidates (possibly empty)
    """
    entries = filtered_entries(list_type, snapshot, actor_filter)

    if is_series_bearing(list_type):
        entries = reduce_series(entries)

    pool = [
        Candidate(id=record_id, list_type=list_type, record=record, cross_list=cross_list)
        for record_id, record in entries
        if is_eligible(record)
    ]
    pool.sort(key=candidate_sort_key)
    return pool


def build_all_pool(
    snapshots: Mapping[str, ListSnapshot],
    actor_filter: ActorFilter | None = None,
) -> list[Candidate]:
    """Concatenate independently built per-list pools.

    Lists are visited in primary order; an empty list contributes nothing.
    """
    pool: list[Candidate] = []
    for list_type in PRIMARY_LIST_TYPES:
        if list_type not in snapshots:
            continue
        pool.extend(
            build_list_pool(list_type, snapshots[list_type], actor_filter, cross_list=True)
        )
    return pool
