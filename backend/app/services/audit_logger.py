import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError
from app.crud import log_crud
from app.models._defaults import utcnow
from app.models.log_entry import LogEntry
from app.services.gateway_client import GENERIC_FAILURE_MESSAGE

logger = logging.getLogger(__name__)


class AuditLogger:
    def __init__(self, crud=log_crud) -> None:
        self.crud = crud

    async def record(
        self,
        db: AsyncSession,
        owner_id: str,
        command_id: str | None,
        device_id: str | None,
        success: bool,
        error_message: str = "",
    ) -> LogEntry:
        """Append one entry to the audit trail. Entries are never updated."""
        entry = {
            "owner_id": owner_id,
            "command_id": command_id,
            "device_id": device_id,
            "success": success,
            "error_message": "" if success else (error_message or GENERIC_FAILURE_MESSAGE),
            "timestamp": utcnow(),
        }
        try:
            return await self.crud.create(db, entry)
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Failed to write audit entry for command %s: %s", command_id, exc)
            raise PersistenceError(f"Failed to write audit log: {exc}") from exc
