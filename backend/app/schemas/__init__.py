from app.schemas.command import CommandCreate, CommandOut, CommandUpdate
from app.schemas.device import DeviceCreate, DeviceOut, DeviceUpdate
from app.schemas.execution import ExecutionResult
from app.schemas.log import CommandSummary, DeviceSummary, LogListResponse, LogOut

__all__ = [
    "CommandCreate",
    "CommandOut",
    "CommandSummary",
    "CommandUpdate",
    "DeviceCreate",
    "DeviceOut",
    "DeviceSummary",
    "DeviceUpdate",
    "ExecutionResult",
    "LogListResponse",
    "LogOut",
]
