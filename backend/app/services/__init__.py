from app.core.config import settings
from app.services.audit_logger import AuditLogger
from app.services.command_executor import CommandExecutor, ExecutionOutcome
from app.services.device_locks import DeviceLockRegistry
from app.services.gateway_client import GatewayClient, gateway_client
from app.services.log_enrichment import list_recent_logs
from app.services.reconciler import DeviceStateReconciler, status_for_action

device_locks = DeviceLockRegistry() if settings.serialize_device_execution else None

command_executor = CommandExecutor(gateway_client, locks=device_locks)

__all__ = [
    "AuditLogger",
    "CommandExecutor",
    "DeviceLockRegistry",
    "DeviceStateReconciler",
    "ExecutionOutcome",
    "GatewayClient",
    "command_executor",
    "device_locks",
    "gateway_client",
    "list_recent_logs",
    "status_for_action",
]
