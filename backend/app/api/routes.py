from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_actor, get_command_executor
from app.core.actor import Actor
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import (
    CommandMismatchError,
    DeviceControlError,
    NotFoundError,
    OwnershipError,
    RecordValidationError,
)
from app.schemas import (
    CommandCreate,
    CommandOut,
    CommandUpdate,
    DeviceCreate,
    DeviceOut,
    DeviceUpdate,
    ExecutionResult,
    LogListResponse,
)
from app.services import catalog, device_locks, list_recent_logs
from app.services.command_executor import CommandExecutor

router = APIRouter()

_STATUS_BY_ERROR = {
    NotFoundError: 404,
    CommandMismatchError: 404,
    OwnershipError: 403,
    RecordValidationError: 409,
}


def _http_error(exc: DeviceControlError) -> HTTPException:
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR.items() if isinstance(exc, error_type)),
        500,
    )
    return HTTPException(status_code=status_code, detail=str(exc))


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/devices", response_model=list[DeviceOut])
async def list_devices(actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)) -> list[DeviceOut]:
    devices = await catalog.list_devices(db, actor.id)
    return [DeviceOut.model_validate(device) for device in devices]


@router.post("/devices", response_model=DeviceOut, status_code=201)
async def create_device(
    payload: DeviceCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DeviceOut:
    try:
        device = await catalog.create_device(db, actor.id, payload)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc
    return DeviceOut.model_validate(device)


@router.get("/devices/{device_id}", response_model=DeviceOut)
async def get_device(
    device_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DeviceOut:
    try:
        device = await catalog.get_device(db, actor.id, device_id)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc
    return DeviceOut.model_validate(device)


@router.patch("/devices/{device_id}", response_model=DeviceOut)
async def update_device(
    device_id: str,
    payload: DeviceUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> DeviceOut:
    try:
        device = await catalog.update_device(db, actor.id, device_id, payload)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc
    return DeviceOut.model_validate(device)


@router.delete("/devices/{device_id}", status_code=204)
async def delete_device(
    device_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        await catalog.delete_device(db, actor.id, device_id)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc
    if device_locks is not None:
        device_locks.discard(device_id)
    return Response(status_code=204)


@router.get("/devices/{device_id}/commands", response_model=list[CommandOut])
async def list_commands(
    device_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> list[CommandOut]:
    try:
        commands = await catalog.list_commands(db, actor.id, device_id)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc
    return [CommandOut.model_validate(command) for command in commands]


@router.post("/devices/{device_id}/commands", response_model=CommandOut, status_code=201)
async def create_command(
    device_id: str,
    payload: CommandCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> CommandOut:
    try:
        command = await catalog.create_command(db, actor.id, device_id, payload)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc
    return CommandOut.model_validate(command)


@router.patch("/devices/{device_id}/commands/{command_id}", response_model=CommandOut)
async def update_command(
    device_id: str,
    command_id: str,
    payload: CommandUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> CommandOut:
    try:
        command = await catalog.update_command(db, actor.id, device_id, command_id, payload)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc
    return CommandOut.model_validate(command)


@router.delete("/devices/{device_id}/commands/{command_id}", status_code=204)
async def delete_command(
    device_id: str,
    command_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        await catalog.delete_command(db, actor.id, device_id, command_id)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc
    return Response(status_code=204)


@router.post("/devices/{device_id}/commands/{command_id}/execute", response_model=ExecutionResult)
async def execute_command(
    device_id: str,
    command_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
    executor: CommandExecutor = Depends(get_command_executor),
) -> ExecutionResult:
    # Ownership and device/command pairing are checked by the executor itself.
    try:
        device = await catalog.find_device(db, device_id)
        command = await catalog.find_command(db, command_id)
        outcome = await executor.execute(db, device, command, actor)
    except DeviceControlError as exc:
        raise _http_error(exc) from exc

    return ExecutionResult(
        success=outcome.success,
        error_message=outcome.error_message,
        persistence_error=outcome.persistence_error,
        log_id=outcome.log_id,
    )


@router.get("/logs", response_model=LogListResponse)
async def get_recent_logs(
    limit: int = Query(default=settings.recent_logs_limit, ge=1, le=settings.recent_logs_max),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> LogListResponse:
    items = await list_recent_logs(db, actor.id, limit=limit)
    return LogListResponse(items=items, count=len(items))
