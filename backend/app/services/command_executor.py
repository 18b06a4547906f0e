import asyncio
import logging
from dataclasses import dataclass

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.actor import Actor
from app.core.errors import CommandMismatchError, DispatchError, OwnershipError, PersistenceError
from app.models.command import Command
from app.models.device import Device
from app.services.audit_logger import AuditLogger
from app.services.device_locks import DeviceLockRegistry
from app.services.gateway_client import GENERIC_FAILURE_MESSAGE, GatewayClient
from app.services.reconciler import DeviceStateReconciler

logger = logging.getLogger(__name__)


@dataclass
class ExecutionOutcome:
    success: bool
    error_message: str = ""
    persistence_error: str | None = None
    log_id: str | None = None


class CommandExecutor:
    """Runs one command against one device and records the attempt.

    Order per call: gateway dispatch, then (on success only) status
    reconciliation, then exactly one audit write. Dispatch happens at most
    once; store failures after it are reported in
    ``ExecutionOutcome.persistence_error`` and never trigger a re-dispatch.
    Cancelling the caller does not abort a started attempt: it still runs to
    its audit write before the cancellation propagates.
    """

    def __init__(
        self,
        gateway: GatewayClient,
        reconciler: DeviceStateReconciler | None = None,
        audit_logger: AuditLogger | None = None,
        locks: DeviceLockRegistry | None = None,
    ) -> None:
        self.gateway = gateway
        self.reconciler = reconciler or DeviceStateReconciler()
        self.audit_logger = audit_logger or AuditLogger()
        self.locks = locks

    async def execute(self, db: AsyncSession, device: Device, command: Command, actor: Actor) -> ExecutionOutcome:
        if device.owner_id != actor.id:
            raise OwnershipError(f"Device {device.id} is not owned by {actor.id}")
        if command.device_id != device.id:
            raise CommandMismatchError(f"Command {command.id} does not belong to device {device.id}")

        if self.locks is None:
            return await self._run(db, device, command)
        async with self.locks.hold(device.id):
            return await self._run(db, device, command)

    async def _run(self, db: AsyncSession, device: Device, command: Command) -> ExecutionOutcome:
        device_ref = device.ref_id
        attempt = asyncio.ensure_future(self._attempt(db, device, command))
        try:
            return await asyncio.shield(attempt)
        except asyncio.CancelledError:
            # The gateway may already have acted: let the attempt reach its audit write.
            logger.warning("Execution on %s cancelled; finishing the in-flight attempt", device_ref)
            while not attempt.done():
                try:
                    await asyncio.wait({attempt})
                except asyncio.CancelledError:
                    continue
            if not attempt.cancelled() and attempt.exception() is not None:
                logger.error("Cancelled execution on %s ended with: %s", device_ref, attempt.exception())
            raise

    async def _attempt(self, db: AsyncSession, device: Device, command: Command) -> ExecutionOutcome:
        # Read everything up front: a rollback further down expires the ORM objects.
        owner_id, device_id, device_ref = device.owner_id, device.id, device.ref_id
        command_id, command_ref = command.id, command.ref_id

        try:
            await run_in_threadpool(self.gateway.execute_command, command_id, command_ref)
        except DispatchError as exc:
            logger.warning("Dispatch of %s to %s failed: %s", command_ref, device_ref, exc.message)
            return await self._finish(db, owner_id, command_id, device_id, False, exc.message)
        except Exception as exc:
            logger.exception("Unexpected error dispatching %s to %s", command_ref, device_ref)
            return await self._finish(db, owner_id, command_id, device_id, False, str(exc))

        logger.info("Command %s executed on %s", command_ref, device_ref)

        reconcile_error = None
        try:
            await self.reconciler.reconcile(db, device, command)
        except PersistenceError as exc:
            reconcile_error = str(exc)

        return await self._finish(db, owner_id, command_id, device_id, True, "", reconcile_error)

    async def _finish(
        self,
        db: AsyncSession,
        owner_id: str,
        command_id: str,
        device_id: str,
        success: bool,
        error_message: str,
        persistence_error: str | None = None,
    ) -> ExecutionOutcome:
        if not success:
            error_message = error_message or GENERIC_FAILURE_MESSAGE
        errors = [persistence_error] if persistence_error else []
        log_id = None

        try:
            entry = await self.audit_logger.record(db, owner_id, command_id, device_id, success, error_message)
            log_id = entry.id
        except PersistenceError as exc:
            errors.append(str(exc))

        return ExecutionOutcome(
            success=success,
            error_message="" if success else error_message,
            persistence_error="; ".join(errors) or None,
            log_id=log_id,
        )
