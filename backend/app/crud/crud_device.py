from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.command import Command
from app.models.device import Device


class CRUDDevice:
    async def create(self, db: AsyncSession, obj_in: Dict[str, Any]) -> Device:
        db_obj = Device(**obj_in)
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def get(self, db: AsyncSession, id: str) -> Optional[Device]:
        result = await db.execute(select(Device).where(Device.id == id))
        return result.scalar_one_or_none()

    async def get_by_ref_id(self, db: AsyncSession, ref_id: str) -> Optional[Device]:
        result = await db.execute(select(Device).where(Device.ref_id == ref_id))
        return result.scalar_one_or_none()

    async def get_many(self, db: AsyncSession, ids: Iterable[str]) -> List[Device]:
        ids = list(ids)
        if not ids:
            return []
        result = await db.execute(select(Device).where(Device.id.in_(ids)))
        return list(result.scalars().all())

    async def get_multi_by_owner(self, db: AsyncSession, owner_id: str) -> List[Device]:
        query = (
            select(Device)
            .where(Device.owner_id == owner_id)
            .order_by(desc(Device.created_at))
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def update(self, db: AsyncSession, db_obj: Device, obj_in: Dict[str, Any]) -> Device:
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

    async def remove(self, db: AsyncSession, db_obj: Device) -> None:
        # Commands go with their device; log entries stay.
        await db.execute(delete(Command).where(Command.device_id == db_obj.id))
        await db.delete(db_obj)
        await db.commit()


device_crud = CRUDDevice()
