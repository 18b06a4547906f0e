from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import command_crud, device_crud, log_crud
from app.schemas.log import CommandSummary, DeviceSummary, LogOut


async def list_recent_logs(db: AsyncSession, owner_id: str, limit: int = settings.recent_logs_limit) -> list[LogOut]:
    """Newest audit entries for ``owner_id`` with their device/command resolved.

    References are looked up in one batch per table. A reference whose record
    has been deleted resolves to ``None``; the entry itself is always kept.
    ``limit`` is clamped to ``1..RECENT_LOGS_MAX``.
    """
    limit = max(1, min(limit, settings.recent_logs_max))
    entries = await log_crud.get_recent(db, owner_id, limit=limit)

    device_ids = {entry.device_id for entry in entries if entry.device_id}
    command_ids = {entry.command_id for entry in entries if entry.command_id}

    devices = {
        device.id: DeviceSummary(name=device.name, ref_id=device.ref_id)
        for device in await device_crud.get_many(db, device_ids)
    }
    commands = {
        command.id: CommandSummary(label=command.label, ref_id=command.ref_id)
        for command in await command_crud.get_many(db, command_ids)
    }

    return [
        LogOut(
            id=entry.id,
            timestamp=entry.timestamp,
            success=entry.success,
            error_message=entry.error_message,
            command_id=entry.command_id,
            device_id=entry.device_id,
            command=commands.get(entry.command_id) if entry.command_id else None,
            device=devices.get(entry.device_id) if entry.device_id else None,
        )
        for entry in entries
    ]
