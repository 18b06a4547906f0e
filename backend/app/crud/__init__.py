from app.crud.crud_device import device_crud
from app.crud.crud_command import command_crud
from app.crud.crud_log import log_crud

__all__ = ["device_crud", "command_crud", "log_crud"]
