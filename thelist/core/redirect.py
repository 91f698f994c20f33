"""Pick-time redirect to the earliest unwatched entry of a series."""

import math
import random

from thelist.core.contracts import Candidate, ListSnapshot, is_series_bearing
from thelist.core.eligibility import is_watched
from thelist.core.series import earliest_unwatched, parse_series_order, series_key


def pick_index(pool_size: int, rng: random.Random | None = None) -> int:
    """Uniform random index into a pool of the given size."""
    if pool_size <= 0:
        raise ValueError("Cannot pick from an empty pool")
    rnd = rng or random
    return min(math.floor(rnd.random() * pool_size), pool_size - 1)


def resolve_redirect(chosen: Candidate, raw_snapshot: ListSnapshot) -> Candidate:
    """Swap the chosen candidate for an earlier unwatched series sibling.

    Siblings come from the raw, unfiltered snapshot of the candidate's list,
    so an active actor filter does not hide them. Resolving an already
    earliest-unwatched candidate returns it unchanged.

    Args:
        chosen: Candidate picked from the pool
        raw_snapshot: Unreduced snapshot of chosen.list_type

    Returns:
        The candidate to recommend
    """
    if not is_series_bearing(chosen.list_type):
        return chosen

    key = series_key(chosen.record)
    if not key:
        return chosen

    siblings = [
        (record_id, record)
        for record_id, record in (raw_snapshot or {}).items()
        if record and series_key(record) == key
    ]
    earliest = earliest_unwatched(siblings)
    if earliest is None:
        return chosen

    earliest_id, earliest_record = earliest
    if earliest_id == chosen.id:
        return chosen

    chosen_order = parse_series_order(chosen.record.get("seriesOrder"))
    earliest_order = parse_series_order(earliest_record.get("seriesOrder"))

    if chosen_order > earliest_order or is_watched(chosen.record):
        return Candidate(
            id=earliest_id,
            list_type=chosen.list_type,
            record=earliest_record,
            cross_list=chosen.cross_list,
        )
    return chosen
