from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from app.core.database import Base
from app.models._defaults import new_id, utcnow


class Command(Base):
    __tablename__ = "commands"

    id = Column(String(36), primary_key=True, default=new_id)
    device_id = Column(String(36), ForeignKey("devices.id", ondelete="CASCADE"), nullable=False, index=True)
    ref_id = Column(String(64), nullable=False, unique=True, index=True)
    label = Column(String, nullable=False)
    action = Column(String, default="HIGH", nullable=False)  # HIGH, LOW, ANALOG, PWM
    value = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<Command(ref_id={self.ref_id}, action={self.action}, value={self.value})>"
