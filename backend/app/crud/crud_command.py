from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.command import Command


class CRUDCommand:
    async def create(self, db: AsyncSession, obj_in: Dict[str, Any]) -> Command:
        db_obj = Command(**obj_in)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def get(self, db: AsyncSession, id: str) -> Optional[Command]:
        result = await db.execute(select(Command).where(Command.id == id))
        return result.scalar_one_or_none()

    async def get_by_ref_id(self, db: AsyncSession, ref_id: str) -> Optional[Command]:
        result = await db.execute(select(Command).where(Command.ref_id == ref_id))
        return result.scalar_one_or_none()

    async def get_many(self, db: AsyncSession, ids: Iterable[str]) -> List[Command]:
        ids = list(ids)
        if not ids:
            return []
        result = await db.execute(select(Command).where(Command.id.in_(ids)))
        return list(result.scalars().all())

    async def get_by_device(self, db: AsyncSession, device_id: str) -> List[Command]:
        query = (
            select(Command)
            .where(Command.device_id == device_id)
            .order_by(Command.created_at)
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def update(self, db: AsyncSession, db_obj: Command, obj_in: Dict[str, Any]) -> Command:
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def remove(self, db: AsyncSession, db_obj: Command) -> None:
        await db.delete(db_obj)
        await db.commit()


command_crud = CRUDCommand()
