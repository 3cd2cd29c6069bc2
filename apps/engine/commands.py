from __future__ import annotations

import logging

from apps.engine.dashboard import PortfolioDashboard
from core.domain.commands import Command, CommandType
from core.domain.errors import PortfolioError
from core.ports.command_bus import CommandBus

logger = logging.getLogger(__name__)


async def handle_command(command: Command, dashboard: PortfolioDashboard) -> None:
    if command.session_id != dashboard.session_id:
        logger.info("Ignoring command %s for session %s", command.command_id, command.session_id)
        return

    payload = command.payload
    logger.info("Handling command %s type=%s", command.command_id, command.type.value)

    if command.type == CommandType.ADD_HOLDING:
        await dashboard.add_holding(payload["holding"])
    elif command.type == CommandType.REMOVE_HOLDING:
        await dashboard.remove_holding(payload["holding_id"])
    elif command.type == CommandType.STAGE_QUANTITY:
        await dashboard.stage_quantity(payload["holding_id"], payload.get("quantity"))
    elif command.type == CommandType.COMMIT_QUANTITY:
        await dashboard.commit_quantity(payload["holding_id"])
    elif command.type == CommandType.DISCARD_QUANTITY:
        await dashboard.discard_quantity(payload["holding_id"])
    elif command.type == CommandType.REFRESH:
        await dashboard.refresh_all()
    else:
        logger.warning("Unsupported command type %s", command.type)


async def command_loop(bus: CommandBus, dashboard: PortfolioDashboard) -> None:
    async for command in bus.consume():
        try:
            await handle_command(command, dashboard)
        except PortfolioError as exc:
            logger.warning("Command %s rejected: %s", command.command_id, exc)
        except Exception:
            logger.exception("Command handling failed")
