from app.models.device import Device
from app.models.command import Command
from app.models.log_entry import LogEntry

__all__ = ["Device", "Command", "LogEntry"]
