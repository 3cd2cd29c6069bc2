from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError
from sqlalchemy import create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from adapters.storage.models import Base, SessionRecord
from core.domain.session import SessionState
from core.ports.session_store import SessionStore

logger = logging.getLogger(__name__)


class SqlAlchemySessionStore(SessionStore):
    """Relational session store; one JSON row per session id."""

    def __init__(self, database_url: str, *, create_tables: bool = True) -> None:
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        self._engine: Engine = create_engine(database_url, connect_args=connect_args, future=True)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False)
        if create_tables:
            Base.metadata.create_all(self._engine)

    async def load(self, session_id: str) -> SessionState | None:
        return await asyncio.to_thread(self.load_sync, session_id)

    async def save(self, session_id: str, state: SessionState) -> None:
        await asyncio.to_thread(self.save_sync, session_id, state)

    async def clear(self, session_id: str) -> None:
        await asyncio.to_thread(self.clear_sync, session_id)

    async def close(self) -> None:
        self._engine.dispose()

    def load_sync(self, session_id: str) -> SessionState | None:
        with self._session_factory() as session:
            record = session.execute(
                select(SessionRecord).where(SessionRecord.session_id == session_id)
            ).scalar_one_or_none()
            if record is None:
                return None
            payload = record.payload
        try:
            return SessionState.model_validate_json(payload)
        except ValidationError:
            logger.exception("Discarding unreadable session payload for %s", session_id)
            return None

    def save_sync(self, session_id: str, state: SessionState) -> None:
        with self._session_factory() as session:
            record = session.get(SessionRecord, session_id)
            if record is None:
                record = SessionRecord(session_id=session_id)
                session.add(record)
            record.payload = state.model_dump_json()
            record.revision = state.revision
            session.commit()
        logger.info("Stored %d holdings for session %s", len(state.holdings), session_id)

    def clear_sync(self, session_id: str) -> None:
        with self._session_factory() as session:
            session.execute(delete(SessionRecord).where(SessionRecord.session_id == session_id))
            session.commit()
