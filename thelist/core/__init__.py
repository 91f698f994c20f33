"""Core module containing the decision wheel and list domain types."""

from thelist.core.actor_filter import ActorFilters, matches_actor_filter, supports_actor_filter
from thelist.core.contracts import (
    ALL_LISTS,
    LIST_LABELS,
    PRIMARY_LIST_TYPES,
    Candidate,
    InvalidTargetError,
    ListType,
    NotAuthenticatedError,
    SpinDisplay,
    SpinError,
    SpinOutcome,
    SpinState,
    Status,
    Tick,
    WheelSettings,
    is_list_type,
    is_series_bearing,
)
from thelist.core.eligibility import is_eligible, is_watched
from thelist.core.listing import (
    SORT_MODES,
    apply_actor_filter,
    matches_search,
    search_library,
    sort_list_entries,
    title_sort_key,
)
from thelist.core.pool import build_all_pool, build_list_pool
from thelist.core.redirect import pick_index, resolve_redirect
from thelist.core.series import parse_series_order, reduce_series
from thelist.core.spin import LOAD_FAILURE_MESSAGE, SpinController, empty_pool_message
from thelist.core.timeline import (
    LoopTimers,
    Timeline,
    audio_cue_delay,
    build_ticks,
    ease_out_cubic,
)

__all__ = [
    # Contracts/Types
    "ALL_LISTS",
    "LIST_LABELS",
    "PRIMARY_LIST_TYPES",
    "Candidate",
    "InvalidTargetError",
    "ListType",
    "NotAuthenticatedError",
    "SpinDisplay",
    "SpinError",
    "SpinOutcome",
    "SpinState",
    "Status",
    "Tick",
    "WheelSettings",
    "is_list_type",
    "is_series_bearing",
    # Eligibility / series
    "is_eligible",
    "is_watched",
    "parse_series_order",
    "reduce_series",
    # Pool / pick
    "build_all_pool",
    "build_list_pool",
    "pick_index",
    "resolve_redirect",
    # Timeline / session
    "LoopTimers",
    "Timeline",
    "audio_cue_delay",
    "build_ticks",
    "ease_out_cubic",
    "SpinController",
    "LOAD_FAILURE_MESSAGE",
    "empty_pool_message",
    # Listing
    "ActorFilters",
    "SORT_MODES",
    "apply_actor_filter",
    "matches_actor_filter",
    "matches_search",
    "search_library",
    "sort_list_entries",
    "supports_actor_filter",
    "title_sort_key",
]
