"""API routes for the VaaS hook.

Accepts lifecycle events from the executor and hands them to the hook, and
exposes the currently registered backend for inspection.
"""
from __future__ import annotations

from logging import getLogger
from fastapi import APIRouter, HTTPException, Request
from vaas_hook.models.schemas import LifecycleEvent
from vaas_hook.services.hook import DeregistrationError, Hook, RegistrationError
from vaas_hook.services.vaas_client import VaasClientError
from vaas_hook.core.runenv import RuntimeEnvironmentError

log = getLogger("vaas.api")
router = APIRouter()


def _get_hook(request: Request) -> Hook:
    """Return the application-scoped Hook created during lifespan."""
    hook: Hook | None = getattr(request.app.state, "hook", None)
    if hook is None:
        raise HTTPException(status_code=503, detail="Hook not initialized")
    return hook


@router.post("/events")
async def handle_event(event: LifecycleEvent, request: Request):
    """
    Dispatch a lifecycle event:
      - AfterTaskHealthyEvent registers the task's backend
      - BeforeTerminateEvent removes it
      - anything else is ignored
    A failing hook action answers 502 so the caller can retry.
    """
    hook = _get_hook(request)
    log.info("event %s for task %s", event.type, event.task_info.task_id)
    try:
        await hook.handle_event(event)
    except (RegistrationError, DeregistrationError, VaasClientError, RuntimeEnvironmentError) as e:
        log.error("hook failed on %s: %s", event.type, e)
        raise HTTPException(status_code=502, detail=str(e)) from e
    return {"status": "ok", "backend_id": hook.backend_id}


@router.get("/backend")
async def current_backend(request: Request):
    """Backend id currently registered by this hook, if any."""
    return {"backend_id": _get_hook(request).backend_id}


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "OK"}
