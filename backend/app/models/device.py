from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from app.core.database import Base
from app.models._defaults import new_id, utcnow


class Device(Base):
    __tablename__ = "devices"

    id = Column(String(36), primary_key=True, default=new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    pin = Column(Integer, nullable=False)
    type = Column(String, default="output", nullable=False)  # output, sensor, servo, pwm
    ref_id = Column(String(64), nullable=False, unique=True, index=True)
    status = Column(Boolean, default=False, nullable=False)
    description = Column(Text, default="", nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Device(ref_id={self.ref_id}, pin={self.pin}, status={self.status})>"
