from __future__ import annotations

from typing import Protocol

from core.domain.session import SessionState


class SessionStore(Protocol):
    """Key-value persistence of the holding collection, keyed by session."""

    async def load(self, session_id: str) -> SessionState | None:
        """Return the stored state for a session, if any."""

    async def save(self, session_id: str, state: SessionState) -> None:
        """Persist the latest state for a session."""

    async def clear(self, session_id: str) -> None:
        """Forget a session."""

    async def close(self) -> None:
        """Close any underlying resources."""
