"""In-memory per-user session state and open wheel panels."""

import time
from dataclasses import dataclass, field

from thelist.core import ActorFilters, SpinController
from thelist.logging import get_logger

logger = get_logger(__name__)


@dataclass
class UserSession:
    """User session data with last-activity timestamp."""

    user_id: str
    created_at: float = field(default_factory=time.time)
    registered: bool = False
    actor_filters: ActorFilters = field(default_factory=ActorFilters)
    sort_modes: dict[str, str] = field(default_factory=dict)
    last_listing_type: str | None = None
    last_listing_ids: list[str] = field(default_factory=list)


class SessionStore:
    """In-memory session store with TTL cleanup."""

    def __init__(self, ttl_seconds: int = 3600) -> None:
        """Initialize session store.

        Args:
            ttl_seconds: Idle time before a session is dropped (default 1 hour)
        """
        self._sessions: dict[str, UserSession] = {}
        self._ttl = ttl_seconds

    def get(self, user_id: str) -> UserSession | None:
        """Get session for user, returns None if expired or missing."""
        session = self._sessions.get(user_id)
        if session and (time.time() - session.created_at) > self._ttl:
            del self._sessions[user_id]
            return None
        return session

    def get_or_create(self, user_id: str) -> UserSession:
        """Get existing session or create a new one, refreshing its TTL."""
        session = self.get(user_id)
        if session is None:
            session = UserSession(user_id=user_id)
            self._sessions[user_id] = session
        session.created_at = time.time()
        return session

    def is_registered(self, user_id: str) -> bool:
        session = self.get(user_id)
        return bool(session and session.registered)

    def mark_registered(self, user_id: str) -> UserSession:
        session = self.get_or_create(user_id)
        session.registered = True
        return session

    def set_listing(self, user_id: str, list_type: str, record_ids: list[str]) -> None:
        """Remember the numbering of the last list shown."""
        session = self.get_or_create(user_id)
        session.last_listing_type = list_type
        session.last_listing_ids = list(record_ids)

    def clear(self, user_id: str) -> None:
        """Clear session for user."""
        self._sessions.pop(user_id, None)

    def prune_expired(self) -> int:
        """Remove expired sessions. Returns how many were removed."""
        now = time.time()
        expired = [
            uid for uid, s in self._sessions.items()
            if (now - s.created_at) > self._ttl
        ]
        for uid in expired:
            del self._sessions[uid]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


@dataclass
class WheelPanel:
    """One open wheel message and the controller driving it."""

    chat_id: int
    message_id: int
    owner_id: str
    controller: SpinController


class WheelPanels:
    """Open wheel panels, at most one per chat."""

    def __init__(self) -> None:
        self._panels: dict[int, WheelPanel] = {}

    def get(self, chat_id: int) -> WheelPanel | None:
        return self._panels.get(chat_id)

    def open(self, panel: WheelPanel) -> None:
        """Register a panel, closing the one it replaces."""
        previous = self._panels.get(panel.chat_id)
        if previous is not None and previous is not panel:
            previous.controller.close()
            logger.debug(f"Replaced wheel panel {previous.message_id} in {panel.chat_id}")
        self._panels[panel.chat_id] = panel

    def close(self, chat_id: int) -> WheelPanel | None:
        """Close and forget the chat's panel. Returns it, if there was one."""
        panel = self._panels.pop(chat_id, None)
        if panel is not None:
            panel.controller.close()
        return panel

    def prune_idle(self) -> int:
        """Forget panels that are not spinning and have no frame left to deliver."""
        idle = [
            chat_id for chat_id, panel in self._panels.items()
            if panel.controller.session is None
            and not getattr(panel.controller.display, "busy", False)
        ]
        for chat_id in idle:
            self._panels.pop(chat_id).controller.close()
        return len(idle)

    def __len__(self) -> int:
        return len(self._panels)


# Global stores
user_sessions = SessionStore(ttl_seconds=3600)
wheel_panels = WheelPanels()
