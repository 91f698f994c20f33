"""Repository for list record operations."""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from thelist.logging import get_logger
from thelist.storage.json_utils import load_payload, safe_json_dumps
from thelist.storage.models import MediaRecord

logger = get_logger(__name__)


class RecordsRepo:
    """Repository for a user's list records.

    Records are stored as JSON documents; reads return plain dicts keyed
    by record id, the shape the wheel and list views consume.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_snapshot(self, user_id: str, list_type: str) -> dict[str, dict[str, Any]]:
        """Read one list as a record-id -> record mapping.

        Args:
            user_id: Owner user ID
            list_type: movies, tvShows, anime or books

        Returns:
            Mapping ordered by title (empty if the list has no records)
        """
        stmt = (
            select(MediaRecord)
            .where(MediaRecord.user_id == user_id, MediaRecord.list_type == list_type)
            .order_by(MediaRecord.title)
        )
        result = await self.session.execute(stmt)
        return {row.record_id: load_payload(row.payload_json) for row in result.scalars().all()}

    async def get_record(
        self, user_id: str, list_type: str, record_id: str
    ) -> dict[str, Any] | None:
        """Get a single record, or None if it does not belong to this list."""
        row = await self._get_row(user_id, list_type, record_id)
        return load_payload(row.payload_json) if row else None

    async def add_record(self, user_id: str, list_type: str, record: dict[str, Any]) -> str:
        """Create a record and return its generated id.

        Args:
            user_id: Owner user ID
            list_type: Target list
            record: Record document; must contain a title

        Returns:
            New record id
        """
        now = datetime.now(timezone.utc)
        record_id = uuid.uuid4().hex
        payload = dict(record)
        payload.setdefault("createdAt", int(now.timestamp() * 1000))

        row = MediaRecord(
            record_id=record_id,
            user_id=user_id,
            list_type=list_type,
            title=str(payload.get("title") or ""),
            payload_json=safe_json_dumps(payload),
            created_at=now,
            updated_at=now,
        )
        self.session.add(row)
        await self.session.commit()

        logger.info(f"Added record {record_id} to {user_id}/{list_type}")
        return record_id

    async def update_record(
        self,
        user_id: str,
        list_type: str,
        record_id: str,
        changes: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Merge changes into an existing record.

        Keys whose new value is None are removed from the record.

        Returns:
            Updated record, or None if not found
        """
        row = await self._get_row(user_id, list_type, record_id)
        if row is None:
            return None

        payload = load_payload(row.payload_json)
        for key, value in changes.items():
            if value is None:
                payload.pop(key, None)
            else:
                payload[key] = value

        row.payload_json = safe_json_dumps(payload)
        row.title = str(payload.get("title") or "")
        row.updated_at = datetime.now(timezone.utc)
        await self.session.commit()
        return payload

    async def delete_record(self, user_id: str, list_type: str, record_id: str) -> bool:
        """Delete a record. Returns True if a row was removed."""
        stmt = delete(MediaRecord).where(
            MediaRecord.user_id == user_id,
            MediaRecord.list_type == list_type,
            MediaRecord.record_id == record_id,
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    async def count_records(
        self,
        user_id: str | None = None,
        list_type: str | None = None,
    ) -> int:
        """Count records, optionally per user and/or list."""
        stmt = select(func.count()).select_from(MediaRecord)
        if user_id:
            stmt = stmt.where(MediaRecord.user_id == user_id)
        if list_type:
            stmt = stmt.where(MediaRecord.list_type == list_type)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def _get_row(self, user_id: str, list_type: str, record_id: str) -> MediaRecord | None:
        stmt = select(MediaRecord).where(
            MediaRecord.user_id == user_id,
            MediaRecord.list_type == list_type,
            MediaRecord.record_id == record_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
