"""
Session / credential store.

The storefront persists the admin's bearer token and the customer's tracking
history client-side. Here that storage is an injectable async capability
(get / set / clear) so the shipment flows can be exercised without any
browser-like global.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

import redis.asyncio as redis
from jose import JWTError, jwt

from petshop_shipping.app.core.config import settings

logger = logging.getLogger("petshop_shipping.session")

# Redis key prefix for persisted session values
SESSION_KEY_PREFIX = "petshop:session:"


class SessionStore(Protocol):
    """Capability interface for persisted client-side values."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def clear(self, key: Optional[str] = None) -> None:
        ...


class InMemorySessionStore:
    """Process-local store; also used per request to carry a forwarded token."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def clear(self, key: Optional[str] = None) -> None:
        if key is None:
            self._values.clear()
        else:
            self._values.pop(key, None)


class RedisSessionStore:
    """Store backed by Redis, namespaced under a key prefix."""

    def __init__(self, client=None, prefix: str = SESSION_KEY_PREFIX):
        self.client = client or redis.from_url(
            settings.redis_url,
            decode_responses=settings.redis_decode_responses,
        )
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(self._key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value)

    async def clear(self, key: Optional[str] = None) -> None:
        if key is not None:
            await self.client.delete(self._key(key))
            return
        for name in (settings.token_storage_key, settings.tracking_history_key):
            await self.client.delete(self._key(name))

    async def ping(self) -> bool:
        """
        Test Redis connection.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            return await self.client.ping()
        except Exception:
            return False


def create_session_store(backend: Optional[str] = None) -> SessionStore:
    """Build the app-level store selected by ``session_backend``."""
    backend = (backend or settings.session_backend).lower()
    if backend == "redis":
        return RedisSessionStore()
    if backend != "memory":
        raise ValueError(f"Unknown session backend: {backend}")
    return InMemorySessionStore()


def is_token_expired(token: str, now: Optional[datetime] = None) -> bool:
    """
    Check the ``exp`` claim of a JWT without verifying its signature.

    The signature is the backend's business; this only avoids sending a token
    that is already known to be dead. Opaque (non-JWT) tokens never expire here.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return False

    exp = claims.get("exp")
    if exp is None:
        return False
    now = now or datetime.now(timezone.utc)
    return float(exp) <= now.timestamp()


async def bearer_token(store: SessionStore) -> Optional[str]:
    """
    Read the persisted bearer token.

    Returns:
        The token, or None when absent or expired
    """
    token = await store.get(settings.token_storage_key)
    if not token:
        return None
    if is_token_expired(token):
        logger.warning("Persisted bearer token has expired; sending request without it")
        return None
    return token
