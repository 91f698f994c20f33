"""Repository for event logging operations."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thelist.storage.json_utils import safe_json_dumps
from thelist.storage.models import Event


class EventsRepo:
    """Repository for event logging operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def log_event(
        self,
        event_name: str,
        user_id: str | None = None,
        list_type: str | None = None,
        record_id: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Event:
        """Log an event.

        Args:
            event_name: Event name/type (bot_start, spin_requested, record_added...)
            user_id: Optional user ID
            list_type: Optional list the event concerns
            record_id: Optional record the event concerns
            payload: Optional payload dictionary

        Returns:
            Created Event instance
        """
        event = Event(
            event_name=event_name,
            user_id=user_id,
            list_type=list_type,
            record_id=record_id,
            payload_json=safe_json_dumps(payload or {}),
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(event)
        await self.session.commit()
        await self.session.refresh(event)
        return event

    async def list_events(
        self,
        event_name: str | None = None,
        user_id: str | None = None,
        limit: int = 200,
    ) -> list[Event]:
        """List recent events, newest first, with optional filters."""
        stmt = select(Event)

        if event_name:
            stmt = stmt.where(Event.event_name == event_name)

        if user_id:
            stmt = stmt.where(Event.user_id == user_id)

        stmt = stmt.order_by(Event.created_at.desc(), Event.id.desc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
