import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "true").lower() == "true"
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))
    cors_origins_raw: str = os.getenv("CORS_ORIGINS", "http://localhost:8501")
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./device_control.db")
    gateway_base_url: str = os.getenv("GATEWAY_BASE_URL", "http://localhost:54321/functions/v1")
    gateway_execute_path: str = os.getenv("GATEWAY_EXECUTE_PATH", "/execute-command")
    gateway_token: str = os.getenv("GATEWAY_TOKEN", "")
    gateway_timeout: int = int(os.getenv("GATEWAY_TIMEOUT", "10"))
    serialize_device_execution: bool = os.getenv("SERIALIZE_DEVICE_EXECUTION", "true").lower() == "true"
    actor_header: str = os.getenv("ACTOR_HEADER", "X-User-Id")
    recent_logs_limit: int = int(os.getenv("RECENT_LOGS_LIMIT", "50"))
    recent_logs_max: int = int(os.getenv("RECENT_LOGS_MAX", "500"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_dir: str = os.getenv("LOG_DIR", "logs")

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in self.cors_origins_raw.split(",") if item.strip()]


settings = Settings()
