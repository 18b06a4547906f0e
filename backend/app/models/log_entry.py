from sqlalchemy import Boolean, Column, DateTime, String, Text

from app.core.database import Base
from app.models._defaults import new_id, utcnow


class LogEntry(Base):
    __tablename__ = "logs"

    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String, nullable=False, index=True)
    # No foreign keys: entries outlive the devices and commands they mention.
    command_id = Column(String(36), nullable=True)
    device_id = Column(String(36), nullable=True)
    success = Column(Boolean, default=False, nullable=False)
    error_message = Column(Text, default="", nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<LogEntry(command={self.command_id}, success={self.success})>"
