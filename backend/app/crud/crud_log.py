from typing import Any, Dict, List

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.log_entry import LogEntry


class CRUDLog:
    """Insert-only access to the audit trail."""

    async def create(self, db: AsyncSession, obj_in: Dict[str, Any]) -> LogEntry:
        db_obj = LogEntry(**obj_in)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def get_recent(self, db: AsyncSession, owner_id: str, limit: int = 50) -> List[LogEntry]:
        query = (
            select(LogEntry)
            .where(LogEntry.owner_id == owner_id)
            .order_by(desc(LogEntry.timestamp))
            .limit(limit)
        )
        result = await db.execute(query)
        return list(result.scalars().all())


log_crud = CRUDLog()
