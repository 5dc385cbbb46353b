"""
Role lookups for a signed-in user.

A RoleCache belongs to one session: it wraps the function that asks the
store for the caller's roles, remembers the answer for a TTL measured on an
injected clock, and is dropped explicitly on sign-out.

Usage:
    cache = RoleCache(lambda: rpc("get_my_roles", client=session_client))
    if cache.has_role("manager"):
        ...
    cache.invalidate()
"""
from __future__ import annotations

import time
from typing import Callable, FrozenSet, Iterable, Optional

from scripts.lib.logger import setup_logger

logger = setup_logger(__name__)

ROLE_NAMES = frozenset({
    "owner",
    "manager",
    "producer",
    "reviewer",
    "sales_service",
    "csr",
})

DEFAULT_TTL_SECONDS = 60.0


class RoleCache:
    """TTL cache of one user's roles."""

    def __init__(
        self,
        fetch_roles: Callable[[], Optional[Iterable[str]]],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch_roles = fetch_roles
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._roles: Optional[FrozenSet[str]] = None
        self._fetched_at: Optional[float] = None

    @property
    def is_fresh(self) -> bool:
        if self._roles is None or self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at < self.ttl_seconds

    @property
    def is_expired(self) -> bool:
        """Loaded once and now past its TTL; the next lookup would refetch."""
        if self._fetched_at is None:
            return False
        return self._clock() - self._fetched_at >= self.ttl_seconds

    def get_roles(self) -> FrozenSet[str]:
        """Cached roles, refetched once the TTL has elapsed."""
        if self.is_fresh:
            return self._roles

        now = self._clock()
        try:
            raw = self._fetch_roles() or []
        except Exception as e:
            # An unverifiable user gets no roles until the next refresh.
            logger.error("Role lookup failed: %s", e)
            raw = []

        roles = set()
        for role in raw:
            if role in ROLE_NAMES:
                roles.add(role)
            else:
                logger.warning("Ignoring unknown role %r", role)

        self._roles = frozenset(roles)
        self._fetched_at = now
        return self._roles

    def ensure_loaded(self) -> FrozenSet[str]:
        return self.get_roles()

    def has_role(self, role: str) -> bool:
        return role in self.get_roles()

    def has_any_role(self, roles: Iterable[str]) -> bool:
        current = self.get_roles()
        return any(role in current for role in roles)

    def invalidate(self) -> None:
        """Forget cached roles (call on sign-out)."""
        self._roles = None
        self._fetched_at = None
