from __future__ import annotations

from core.domain.session import SessionState
from core.ports.session_store import SessionStore


class InMemorySessionStore(SessionStore):
    """Process-local store; state is lost on restart."""

    def __init__(self) -> None:
        self._states: dict[str, str] = {}

    async def load(self, session_id: str) -> SessionState | None:
        payload = self._states.get(session_id)
        if payload is None:
            return None
        return SessionState.model_validate_json(payload)

    async def save(self, session_id: str, state: SessionState) -> None:
        self._states[session_id] = state.model_dump_json()

    async def clear(self, session_id: str) -> None:
        self._states.pop(session_id, None)

    async def close(self) -> None:
        self._states.clear()
