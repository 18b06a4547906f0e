from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from app.schemas.device import RefId


def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


CommandAction = Annotated[Literal["HIGH", "LOW", "ANALOG", "PWM"], BeforeValidator(_upper)]


class CommandCreate(BaseModel):
    ref_id: RefId
    label: str = Field(..., min_length=1)
    action: CommandAction = "HIGH"
    value: int = Field(default=0, ge=0, le=255)


class CommandUpdate(BaseModel):
    ref_id: RefId | None = None
    label: str | None = Field(default=None, min_length=1)
    action: CommandAction | None = None
    value: int | None = Field(default=None, ge=0, le=255)


class CommandOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    device_id: str
    ref_id: str
    label: str
    action: str
    value: int
    created_at: datetime
