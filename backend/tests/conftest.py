from __future__ import annotations

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.actor import Actor
from app.core.database import Base
from app.core.errors import DispatchError
from app.models import Command, Device  # noqa: F401  (registers tables)

OWNER = Actor(id="user-1")
STRANGER = Actor(id="user-2")


class FakeGateway:
    """Stands in for GatewayClient; records every dispatch."""

    def __init__(self, error: DispatchError | Exception | None = None):
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def execute_command(self, command_id: str, ref_id: str) -> dict:
        self.calls.append((command_id, ref_id))
        if self.error is not None:
            raise self.error
        return {}


def memory_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def run_db():
    """Run ``scenario(db)`` inside a fresh event loop against an empty database."""

    def runner(scenario):
        async def main():
            engine = memory_engine()
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
            try:
                async with session_factory() as db:
                    return await scenario(db)
            finally:
                await engine.dispose()

        return asyncio.run(main())

    return runner


async def make_device(db: AsyncSession, owner: Actor = OWNER, **overrides) -> Device:
    fields = {
        "owner_id": owner.id,
        "name": "Living room LED",
        "pin": 13,
        "type": "output",
        "ref_id": "DEV_LED_01",
        "status": False,
    }
    fields.update(overrides)
    device = Device(**fields)
    db.add(device)
    await db.commit()
    await db.refresh(device)
    return device


async def make_command(db: AsyncSession, device: Device, **overrides) -> Command:
    fields = {
        "device_id": device.id,
        "ref_id": "CMD_ON_01",
        "label": "Turn on",
        "action": "HIGH",
        "value": 0,
    }
    fields.update(overrides)
    command = Command(**fields)
    db.add(command)
    await db.commit()
    await db.refresh(command)
    return command
