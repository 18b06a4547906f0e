from pydantic import BaseModel


class ExecutionResult(BaseModel):
    success: bool
    error_message: str = ""
    persistence_error: str | None = None
    log_id: str | None = None
