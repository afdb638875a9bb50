"""VaaS hook FastAPI application.

Creates the hook service, wires routes, configures logging, and exposes health
and Prometheus metrics endpoints.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI

from vaas_hook.api.routes import router
from vaas_hook.core.config import settings
from vaas_hook.core.logging import init_sentry, setup_logging
from vaas_hook.metrics.prometheus import metrics_router
from vaas_hook.services.hook import Hook
from vaas_hook.services.poller import StatusPoller
from vaas_hook.services.vaas_client import VaasClient

log = logging.getLogger("vaas.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan.

    Initializes logging, Sentry and the app-scoped VaaS client (HTTP pool) and Hook,
    and ensures they live for the duration of the app.
    """
    setup_logging()
    init_sentry()
    log.info("VaaS hook %s starting", settings.release)
    async with httpx.AsyncClient(timeout=settings.request_timeout_s) as client:
        vaas = VaasClient.from_settings(client)
        app.state.hook = Hook(vaas, StatusPoller.from_settings(vaas))
        yield

app = FastAPI(title="VaaS hook", version="0.1.0", lifespan=lifespan)
app.include_router(router)
app.include_router(metrics_router)

@app.get("/readyz")
async def readyz():
    """Readiness probe endpoint returning a minimal OK payload."""
    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve the hook with uvicorn."""
    uvicorn.run(
        app,
        host=os.getenv("HOOK_HOST", "127.0.0.1"),
        port=int(os.getenv("HOOK_PORT", "8081")),
        log_level=os.getenv("LOG_LEVEL", "INFO").lower(),
    )
