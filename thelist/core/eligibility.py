"""Spin eligibility and watched-state predicates."""

from thelist.core.contracts import Record

INELIGIBLE_PREFIXES = ("drop", "complete", "watched")
WATCHED_PREFIXES = ("complete", "watched")


def normalize_status(record: Record) -> str:
    """Return the record status trimmed and lower-cased."""
    status = record.get("status")
    if status is None:
        return ""
    return str(status).strip().lower()


def is_eligible(record: Record) -> bool:
    """Check whether a record may be offered by the wheel.

    An explicit boolean ``watched`` always wins. Otherwise dropped,
    completed and watched statuses are excluded; an empty status is eligible.

    Args:
        record: Record mapping

    Returns:
        True if the record is a valid spin candidate
    """
    watched = record.get("watched")
    if isinstance(watched, bool):
        return not watched
    return not normalize_status(record).startswith(INELIGIBLE_PREFIXES)


def is_watched(record: Record) -> bool:
    """Check whether a record counts as already seen/read.

    Unlike is_eligible, a dropped record is not watched.
    """
    watched = record.get("watched")
    if isinstance(watched, bool):
        return watched
    return normalize_status(record).startswith(WATCHED_PREFIXES)
