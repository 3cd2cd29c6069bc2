from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol

from core.domain.commands import Command


class CommandBus(Protocol):
    """Serialized entry point for holding mutations."""

    async def publish(self, command: Command) -> None:
        """Publish a command to the bus."""

    def consume(self) -> AsyncIterator[Command]:
        """Yield commands from the bus in publish order."""

    async def close(self) -> None:
        """Close any underlying connections."""
