from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

DeviceType = Literal["output", "sensor", "servo", "pwm"]


def normalize_ref_id(value: str) -> str:
    normalized = value.strip().upper()
    if not normalized:
        raise ValueError("ref_id must not be empty")
    if len(normalized) > 64:
        raise ValueError("ref_id must be at most 64 characters")
    return normalized


RefId = Annotated[str, AfterValidator(normalize_ref_id)]


class DeviceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    pin: int = Field(..., ge=0, le=255)
    type: DeviceType = "output"
    ref_id: RefId
    description: str = ""


class DeviceUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    pin: int | None = Field(default=None, ge=0, le=255)
    type: DeviceType | None = None
    ref_id: RefId | None = None
    description: str | None = None


class DeviceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    pin: int
    type: str
    ref_id: str
    status: bool
    description: str
    created_at: datetime
    updated_at: datetime
