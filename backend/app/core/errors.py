class DeviceControlError(Exception):
    """Base class for failures raised by the device-control services."""


class DispatchError(DeviceControlError):
    """The gateway did not execute the command.

    Covers transport errors, non-2xx responses and 2xx responses that carry
    an ``error`` field. ``message`` is what ends up in the audit trail.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PersistenceError(DeviceControlError):
    """A store write (status update or audit insert) failed."""


class RecordValidationError(DeviceControlError):
    """A device or command payload was rejected before touching the store."""


class NotFoundError(DeviceControlError):
    pass


class OwnershipError(DeviceControlError):
    pass


class CommandMismatchError(DeviceControlError):
    pass
