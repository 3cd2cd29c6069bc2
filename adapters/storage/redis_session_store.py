from __future__ import annotations

import logging

from pydantic import ValidationError
from redis.asyncio import Redis

from core.domain.session import SessionState
from core.ports.session_store import SessionStore

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """Redis-backed session store holding the serialized portfolio per session."""

    def __init__(
        self,
        redis_url: str,
        *,
        namespace: str = "portfolio",
        ttl_seconds: int | None = None,
        client: Redis | None = None,
    ) -> None:
        self._client = client or Redis.from_url(redis_url, decode_responses=True)
        self._namespace = namespace
        self._ttl_seconds = ttl_seconds

    def _key(self, session_id: str) -> str:
        return ":".join([self._namespace, "session", session_id])

    async def load(self, session_id: str) -> SessionState | None:
        payload = await self._client.get(self._key(session_id))
        if not payload:
            return None
        try:
            return SessionState.model_validate_json(payload)
        except ValidationError:
            logger.warning("Failed to decode session payload for %s", session_id)
            return None

    async def save(self, session_id: str, state: SessionState) -> None:
        payload = state.model_dump_json()
        if self._ttl_seconds:
            await self._client.set(self._key(session_id), payload, ex=self._ttl_seconds)
        else:
            await self._client.set(self._key(session_id), payload)

    async def clear(self, session_id: str) -> None:
        await self._client.delete(self._key(session_id))

    async def close(self) -> None:
        await self._client.close()
