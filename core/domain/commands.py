from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field


class CommandType(str, Enum):
    ADD_HOLDING = "add_holding"
    REMOVE_HOLDING = "remove_holding"
    STAGE_QUANTITY = "stage_quantity"
    COMMIT_QUANTITY = "commit_quantity"
    DISCARD_QUANTITY = "discard_quantity"
    REFRESH = "refresh"


class Command(BaseModel):
    command_id: str = Field(default_factory=lambda: str(uuid4()))
    type: CommandType
    session_id: str
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
