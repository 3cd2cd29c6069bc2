from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from core.domain.holding import Holding


class SessionState(BaseModel):
    """Serialized holding collection kept across page reloads."""

    holdings: list[Holding] = Field(default_factory=list)
    pending: dict[str, int] = Field(default_factory=dict)
    revision: int = 0
    saved_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
