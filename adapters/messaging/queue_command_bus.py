from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from core.domain.commands import Command
from core.ports.command_bus import CommandBus

logger = logging.getLogger(__name__)

_CLOSED = object()


class QueueCommandBus(CommandBus):
    """In-process FIFO bus; a single consumer applies commands one at a time."""

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    async def publish(self, command: Command) -> None:
        if self._closed:
            raise RuntimeError("Command bus is closed")
        await self._queue.put(command)
        logger.info("Published command %s type=%s", command.command_id, command.type)

    async def consume(self) -> AsyncIterator[Command]:
        while True:
            item = await self._queue.get()
            try:
                if item is _CLOSED:
                    return
                yield item  # type: ignore[misc]
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every published command has been handled."""
        await self._queue.join()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_CLOSED)
