from __future__ import annotations

import asyncio
import logging

from adapters.market_data.alpaca_quotes import AlpacaQuoteProvider
from adapters.market_data.yahoo_quotes import YahooQuoteProvider
from adapters.messaging.queue_command_bus import QueueCommandBus
from adapters.storage.memory_session_store import InMemorySessionStore
from adapters.storage.redis_session_store import RedisSessionStore
from adapters.storage.sqlalchemy_session_store import SqlAlchemySessionStore
from apps.engine.commands import command_loop
from apps.engine.dashboard import PortfolioDashboard
from apps.engine.defaults import default_holdings
from apps.engine.refresh import RefreshScheduler
from core.domain.holding_set import HoldingSetEditor
from core.ports.quote_provider import QuoteProvider
from core.ports.session_store import SessionStore
from core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_quote_provider(settings: Settings) -> QuoteProvider:
    if settings.quote_provider == "alpaca":
        return AlpacaQuoteProvider(settings)
    return YahooQuoteProvider()


def build_session_store(settings: Settings) -> SessionStore:
    if settings.session_store == "redis":
        return RedisSessionStore(
            settings.redis_url,
            namespace=settings.session_namespace,
            ttl_seconds=settings.session_ttl_seconds,
        )
    if settings.session_store == "sql":
        return SqlAlchemySessionStore(settings.database_url)
    return InMemorySessionStore()


def build_dashboard(settings: Settings) -> PortfolioDashboard:
    return PortfolioDashboard(
        build_quote_provider(settings),
        build_session_store(settings),
        settings.session_id,
        editor=HoldingSetEditor(performer_limit=settings.performer_limit),
        seed=default_holdings,
    )


async def run_engine(settings: Settings | None = None, bus: QueueCommandBus | None = None) -> None:
    settings = settings or get_settings()
    logger.info(
        "Dashboard starting session=%s provider=%s store=%s refresh=%ss",
        settings.session_id,
        settings.quote_provider,
        settings.session_store,
        settings.refresh_interval_seconds,
    )
    dashboard = build_dashboard(settings)
    bus = bus or QueueCommandBus()
    scheduler = RefreshScheduler(dashboard.refresh_all, settings.refresh_interval_seconds)

    await dashboard.start()
    scheduler.start()
    # Initial quote load on start, then every interval.
    scheduler.trigger()

    try:
        await command_loop(bus, dashboard)
    finally:
        await scheduler.stop()
        await bus.close()
        await dashboard.close()


def main() -> None:
    _configure_logging()
    asyncio.run(run_engine())


if __name__ == "__main__":
    main()
