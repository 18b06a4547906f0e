from datetime import datetime

from pydantic import BaseModel, ConfigDict


class DeviceSummary(BaseModel):
    name: str
    ref_id: str


class CommandSummary(BaseModel):
    label: str
    ref_id: str


class LogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    timestamp: datetime
    success: bool
    error_message: str
    command_id: str | None
    device_id: str | None
    command: CommandSummary | None = None
    device: DeviceSummary | None = None


class LogListResponse(BaseModel):
    items: list[LogOut]
    count: int
