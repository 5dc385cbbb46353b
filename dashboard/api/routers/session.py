"""
Agency Pulse — Session Router
===============================

Endpoints:
  GET  /api/session/roles     - Roles for the bearer token's user
  POST /api/session/sign-out  - Drop the session's cached roles
"""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from dashboard.api.middleware import get_bearer_token, get_registry
from scripts.lib.logger import setup_logger

logger = setup_logger("session_router")

router = APIRouter(prefix="/api/session", tags=["session"])


@router.get("/roles")
async def my_roles(request: Request):
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    roles = get_registry(request).cache_for(token).get_roles()
    return {"roles": sorted(roles)}


@router.post("/sign-out")
async def sign_out(request: Request):
    token = get_bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    cleared = get_registry(request).sign_out(token)
    logger.info("Session signed out (cached=%s)", cleared)
    return {"status": "signed_out", "cleared": cleared}
