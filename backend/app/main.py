from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router
from app.core import init_db, settings
from app.models import Command, Device, LogEntry  # noqa: F401
from app.utils.logger import setup_logging

logger = setup_logging()

app = FastAPI(
    title="Device Control API",
    version="0.1.0",
    description="Register microcontroller devices and commands, execute commands through the gateway, review the audit trail.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.on_event("startup")
async def on_startup() -> None:
    await init_db()
    logger.info("Database ready, gateway at %s", settings.gateway_base_url)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Device control backend is running", "docs": "/docs"}
