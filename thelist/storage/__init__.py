"""Storage module for database operations."""

from thelist.storage.db import Base, close_engine, ensure_schema, get_engine, get_session_factory
from thelist.storage.json_utils import load_payload, safe_json_dumps
from thelist.storage.models import Event, MediaRecord, User
from thelist.storage.repo_events import EventsRepo
from thelist.storage.repo_records import RecordsRepo
from thelist.storage.repo_users import UsersRepo
from thelist.storage.snapshots import SnapshotCache, get_snapshot_cache, make_snapshot_loader

__all__ = [
    # Database
    "Base",
    "get_engine",
    "get_session_factory",
    "ensure_schema",
    "close_engine",
    # JSON utilities
    "safe_json_dumps",
    "load_payload",
    # Models
    "User",
    "MediaRecord",
    "Event",
    # Repositories
    "UsersRepo",
    "RecordsRepo",
    "EventsRepo",
    # Snapshots
    "SnapshotCache",
    "get_snapshot_cache",
    "make_snapshot_loader",
]
