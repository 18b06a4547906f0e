from fastapi import HTTPException, Request

from app.core.actor import Actor
from app.core.config import settings
from app.services import command_executor
from app.services.command_executor import CommandExecutor


def get_actor(request: Request) -> Actor:
    # Authentication happens upstream; the proxy forwards the user id.
    user_id = (request.headers.get(settings.actor_header) or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail=f"Missing {settings.actor_header} header")
    return Actor(id=user_id)


def get_command_executor() -> CommandExecutor:
    return command_executor
