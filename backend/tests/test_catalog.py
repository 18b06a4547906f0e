from __future__ import annotations

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from app.core.errors import NotFoundError, RecordValidationError
from app.models import Command, Device
from app.schemas import CommandCreate, CommandUpdate, DeviceCreate, DeviceUpdate
from app.services import catalog

from conftest import OWNER, STRANGER


def _device(**overrides) -> DeviceCreate:
    fields = {"name": "Living room LED", "pin": 13, "type": "output", "ref_id": "dev_led_01"}
    fields.update(overrides)
    return DeviceCreate(**fields)


def test_ref_ids_are_normalized():
    assert _device(ref_id="  dev_led_01 ").ref_id == "DEV_LED_01"
    assert CommandCreate(ref_id="cmd_on_01", label="On", action="high").action == "HIGH"


@pytest.mark.parametrize("pin", [-1, 256])
def test_pin_out_of_range_is_rejected(pin):
    with pytest.raises(ValidationError):
        _device(pin=pin)


def test_unknown_type_and_action_are_rejected():
    with pytest.raises(ValidationError):
        _device(type="relay")
    with pytest.raises(ValidationError):
        CommandCreate(ref_id="CMD_X", label="X", action="TOGGLE")
    with pytest.raises(ValidationError):
        CommandCreate(ref_id="CMD_X", label="X", action="PWM", value=300)
    with pytest.raises(ValidationError):
        _device(ref_id="   ")


def test_status_is_not_writable_through_catalog_payloads():
    assert "status" not in DeviceCreate.model_fields
    assert "status" not in DeviceUpdate.model_fields


def test_duplicate_device_ref_id_is_rejected_before_insert(run_db):
    async def scenario(db):
        await catalog.create_device(db, OWNER.id, _device())
        with pytest.raises(RecordValidationError):
            await catalog.create_device(db, STRANGER.id, _device(name="Another"))
        count = await db.execute(select(func.count(Device.id)))
        return count.scalar_one()

    assert run_db(scenario) == 1


def test_list_devices_is_owner_scoped_and_newest_first(run_db):
    async def scenario(db):
        await catalog.create_device(db, OWNER.id, _device(ref_id="DEV_A"))
        await catalog.create_device(db, OWNER.id, _device(ref_id="DEV_B"))
        await catalog.create_device(db, STRANGER.id, _device(ref_id="DEV_C"))
        return [device.ref_id for device in await catalog.list_devices(db, OWNER.id)]

    assert run_db(scenario) == ["DEV_B", "DEV_A"]


def test_other_owners_device_is_not_found(run_db):
    async def scenario(db):
        device = await catalog.create_device(db, OWNER.id, _device())
        with pytest.raises(NotFoundError):
            await catalog.get_device(db, STRANGER.id, device.id)
        with pytest.raises(NotFoundError):
            await catalog.delete_device(db, STRANGER.id, device.id)

    run_db(scenario)


def test_update_device_metadata_keeps_status(run_db):
    async def scenario(db):
        device = await catalog.create_device(db, OWNER.id, _device())
        updated = await catalog.update_device(
            db, OWNER.id, device.id, DeviceUpdate(name="Desk LED", ref_id="dev_desk_01")
        )
        return updated.name, updated.ref_id, updated.status

    assert run_db(scenario) == ("Desk LED", "DEV_DESK_01", False)


def test_commands_listed_oldest_first_and_scoped_to_device(run_db):
    async def scenario(db):
        led = await catalog.create_device(db, OWNER.id, _device(ref_id="DEV_LED"))
        fan = await catalog.create_device(db, OWNER.id, _device(ref_id="DEV_FAN", pin=5))
        await catalog.create_command(db, OWNER.id, led.id, CommandCreate(ref_id="CMD_ON", label="On"))
        await catalog.create_command(db, OWNER.id, led.id, CommandCreate(ref_id="CMD_OFF", label="Off", action="LOW"))
        fan_cmd = await catalog.create_command(db, OWNER.id, fan.id, CommandCreate(ref_id="CMD_FAN", label="Fan"))
        with pytest.raises(NotFoundError):
            await catalog.get_command(db, OWNER.id, led.id, fan_cmd.id)
        return [command.ref_id for command in await catalog.list_commands(db, OWNER.id, led.id)]

    assert run_db(scenario) == ["CMD_ON", "CMD_OFF"]


def test_duplicate_command_ref_id_and_update(run_db):
    async def scenario(db):
        device = await catalog.create_device(db, OWNER.id, _device())
        on = await catalog.create_command(db, OWNER.id, device.id, CommandCreate(ref_id="CMD_ON", label="On"))
        off = await catalog.create_command(db, OWNER.id, device.id, CommandCreate(ref_id="CMD_OFF", label="Off"))
        with pytest.raises(RecordValidationError):
            await catalog.create_command(db, OWNER.id, device.id, CommandCreate(ref_id="cmd_on", label="Dup"))
        with pytest.raises(RecordValidationError):
            await catalog.update_command(db, OWNER.id, device.id, off.id, CommandUpdate(ref_id="CMD_ON"))
        updated = await catalog.update_command(
            db, OWNER.id, device.id, on.id, CommandUpdate(action="PWM", value=200)
        )
        return updated.action, updated.value

    assert run_db(scenario) == ("PWM", 200)


def test_delete_device_removes_its_commands(run_db):
    async def scenario(db):
        device = await catalog.create_device(db, OWNER.id, _device())
        await catalog.create_command(db, OWNER.id, device.id, CommandCreate(ref_id="CMD_ON", label="On"))
        await catalog.delete_device(db, OWNER.id, device.id)
        count = await db.execute(select(func.count(Command.id)))
        return count.scalar_one(), await catalog.list_devices(db, OWNER.id)

    assert run_db(scenario) == (0, [])
