import logging
from typing import Awaitable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, RecordValidationError
from app.crud import command_crud, device_crud
from app.models.command import Command
from app.models.device import Device
from app.schemas.command import CommandCreate, CommandUpdate
from app.schemas.device import DeviceCreate, DeviceUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _guard_unique(db: AsyncSession, operation: Awaitable[T], ref_id: str) -> T:
    # The unique index still catches a duplicate that slipped past the pre-check.
    try:
        return await operation
    except IntegrityError as exc:
        await db.rollback()
        raise RecordValidationError(f"ref_id '{ref_id}' is already in use") from exc


async def find_device(db: AsyncSession, device_id: str) -> Device:
    device = await device_crud.get(db, device_id)
    if device is None:
        raise NotFoundError("Device not found")
    return device


async def find_command(db: AsyncSession, command_id: str) -> Command:
    command = await command_crud.get(db, command_id)
    if command is None:
        raise NotFoundError("Command not found")
    return command


async def list_devices(db: AsyncSession, owner_id: str) -> list[Device]:
    return await device_crud.get_multi_by_owner(db, owner_id)


async def get_device(db: AsyncSession, owner_id: str, device_id: str) -> Device:
    device = await find_device(db, device_id)
    if device.owner_id != owner_id:
        raise NotFoundError("Device not found")
    return device


async def create_device(db: AsyncSession, owner_id: str, payload: DeviceCreate) -> Device:
    if await device_crud.get_by_ref_id(db, payload.ref_id) is not None:
        raise RecordValidationError(f"ref_id '{payload.ref_id}' is already in use")

    obj_in = payload.model_dump()
    obj_in["owner_id"] = owner_id
    device = await _guard_unique(db, device_crud.create(db, obj_in), payload.ref_id)
    logger.info("Registered device %s on pin %s for %s", device.ref_id, device.pin, owner_id)
    return device


async def update_device(db: AsyncSession, owner_id: str, device_id: str, payload: DeviceUpdate) -> Device:
    device = await get_device(db, owner_id, device_id)
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)

    ref_id = updates.get("ref_id")
    if ref_id and ref_id != device.ref_id and await device_crud.get_by_ref_id(db, ref_id) is not None:
        raise RecordValidationError(f"ref_id '{ref_id}' is already in use")
    if not updates:
        return device

    return await _guard_unique(db, device_crud.update(db, device, updates), ref_id or device.ref_id)


async def delete_device(db: AsyncSession, owner_id: str, device_id: str) -> None:
    device = await get_device(db, owner_id, device_id)
    ref_id = device.ref_id
    await device_crud.remove(db, device)
    logger.info("Deleted device %s and its commands", ref_id)


async def list_commands(db: AsyncSession, owner_id: str, device_id: str) -> list[Command]:
    device = await get_device(db, owner_id, device_id)
    return await command_crud.get_by_device(db, device.id)


async def get_command(db: AsyncSession, owner_id: str, device_id: str, command_id: str) -> Command:
    device = await get_device(db, owner_id, device_id)
    command = await find_command(db, command_id)
    if command.device_id != device.id:
        raise NotFoundError("Command not found")
    return command


async def create_command(db: AsyncSession, owner_id: str, device_id: str, payload: CommandCreate) -> Command:
    device = await get_device(db, owner_id, device_id)
    if await command_crud.get_by_ref_id(db, payload.ref_id) is not None:
        raise RecordValidationError(f"ref_id '{payload.ref_id}' is already in use")

    obj_in = payload.model_dump()
    obj_in["device_id"] = device.id
    command = await _guard_unique(db, command_crud.create(db, obj_in), payload.ref_id)
    logger.info("Added command %s (%s) to device %s", command.ref_id, command.action, device.ref_id)
    return command


async def update_command(
    db: AsyncSession, owner_id: str, device_id: str, command_id: str, payload: CommandUpdate
) -> Command:
    command = await get_command(db, owner_id, device_id, command_id)
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)

    ref_id = updates.get("ref_id")
    if ref_id and ref_id != command.ref_id and await command_crud.get_by_ref_id(db, ref_id) is not None:
        raise RecordValidationError(f"ref_id '{ref_id}' is already in use")
    if not updates:
        return command

    return await _guard_unique(db, command_crud.update(db, command, updates), ref_id or command.ref_id)


async def delete_command(db: AsyncSession, owner_id: str, device_id: str, command_id: str) -> None:
    command = await get_command(db, owner_id, device_id, command_id)
    await command_crud.remove(db, command)
