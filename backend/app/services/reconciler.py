import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError
from app.crud import device_crud
from app.models.command import Command
from app.models.device import Device

logger = logging.getLogger(__name__)

ACTIVE_ACTIONS = frozenset({"HIGH", "ON"})


def status_for_action(action: str | None) -> bool:
    return (action or "").strip().upper() in ACTIVE_ACTIONS


class DeviceStateReconciler:
    """Persists the device status implied by a command the gateway accepted.

    Only call this after a successful dispatch. Store failures surface as
    PersistenceError and are not retried.
    """

    def __init__(self, crud=device_crud) -> None:
        self.crud = crud

    async def reconcile(self, db: AsyncSession, device: Device, command: Command) -> Device:
        device_id = device.id
        status = status_for_action(command.action)
        try:
            updated = await self.crud.update(db, device, {"status": status})
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Failed to persist status=%s for device %s: %s", status, device_id, exc)
            raise PersistenceError(f"Failed to update device status: {exc}") from exc

        logger.debug("Device %s status set to %s", device_id, status)
        return updated
