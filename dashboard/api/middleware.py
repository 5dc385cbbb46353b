"""
Agency Pulse — Session Roles
==============================
Resolves the caller's roles from their Supabase access token.

Each bearer token gets its own RoleCache held by the SessionRegistry on
app.state; sign-out drops it. Role checks are enforced only when
REQUIRE_ROLES=true so local development works without tokens.
"""
from __future__ import annotations

import os
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from fastapi import HTTPException, Request

from scripts.lib.logger import setup_logger
from scripts.lib.roles import DEFAULT_TTL_SECONDS, RoleCache
from scripts.lib.supabase_client import create_session_client, rpc

logger = setup_logger("api_session")

DEFAULT_MAX_SESSIONS = 1000


def fetch_roles_for_token(access_token: str):
    """Ask the store which roles the token's user holds."""
    client = create_session_client(access_token)
    return rpc("get_my_roles", client=client) or []


class SessionRegistry:
    """
    One RoleCache per signed-in session.

    Access tokens rotate, so a token that stops being presented never signs
    out. Caches past their TTL are pruned whenever a session is looked up,
    and the registry never holds more than ``max_sessions`` caches (the
    least recently used is dropped first).
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        fetcher: Callable[[str], object] = fetch_roles_for_token,
        clock: Callable[[], float] = time.monotonic,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._fetcher = fetcher
        self._clock = clock
        self._caches: "OrderedDict[str, RoleCache]" = OrderedDict()
        self._lock = threading.Lock()

    def _prune(self, keep: str) -> None:
        expired = [
            token for token, cache in self._caches.items()
            if token != keep and cache.is_expired
        ]
        for token in expired:
            del self._caches[token]
        while len(self._caches) > self.max_sessions:
            self._caches.popitem(last=False)
        if expired:
            logger.debug("Pruned %d expired sessions", len(expired))

    def cache_for(self, access_token: str) -> RoleCache:
        with self._lock:
            cache = self._caches.get(access_token)
            if cache is None:
                cache = RoleCache(
                    lambda: self._fetcher(access_token),
                    ttl_seconds=self.ttl_seconds,
                    clock=self._clock,
                )
                self._caches[access_token] = cache
            else:
                self._caches.move_to_end(access_token)
            self._prune(keep=access_token)
            return cache

    def sign_out(self, access_token: str) -> bool:
        """Invalidate and forget a session's roles. False if it was unknown."""
        with self._lock:
            cache = self._caches.pop(access_token, None)
        if cache is None:
            return False
        cache.invalidate()
        return True

    @property
    def session_count(self) -> int:
        return len(self._caches)


def get_bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def registry_from_env() -> SessionRegistry:
    return SessionRegistry(
        ttl_seconds=float(os.getenv("ROLE_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS)),
        max_sessions=int(os.getenv("SESSION_CACHE_MAX", DEFAULT_MAX_SESSIONS)),
    )


def get_registry(request: Request) -> SessionRegistry:
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        registry = registry_from_env()
        request.app.state.sessions = registry
    return registry


def roles_required() -> bool:
    return os.getenv("REQUIRE_ROLES", "false").lower() == "true"


def require_role(*roles: str):
    """
    Dependency that admits callers holding any of ``roles``.

    Usage:
        @router.get("/weekly", dependencies=[Depends(require_role("owner", "manager"))])
    """

    async def _check(request: Request):
        if not roles_required():
            return

        token = get_bearer_token(request)
        if not token:
            raise HTTPException(status_code=401, detail="Missing bearer token")

        cache = get_registry(request).cache_for(token)
        if not cache.has_any_role(roles):
            logger.warning("Denied %s: requires one of %s", request.url.path, roles)
            raise HTTPException(
                status_code=403,
                detail=f"Requires one of: {', '.join(roles)}",
            )

    return _check
