import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.probe import router as api_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.dependencies import get_probe_runner

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    runner = get_probe_runner()
    logger.info(
        f"{settings.service_name} ready (env={settings.environment}, "
        f"expected_status={runner.expectations.expected_status}, "
        f"sla={runner.expectations.sla_threshold_ms:g}ms, "
        f"timeout={settings.request_timeout_s or 'none'})"
    )
    yield


app = FastAPI(
    title=settings.service_name,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/v1")


@app.get("/health")
async def health():
    return {"status": "ok"}
