from __future__ import annotations

import asyncio
from decimal import Decimal
from types import SimpleNamespace

import pytest

import apps.engine.main as engine_main
from adapters.market_data.yahoo_quotes import YahooQuoteProvider
from adapters.messaging.queue_command_bus import QueueCommandBus
from adapters.storage.memory_session_store import InMemorySessionStore
from adapters.storage.redis_session_store import RedisSessionStore
from adapters.storage.sqlalchemy_session_store import SqlAlchemySessionStore
from core.domain.commands import Command, CommandType
from core.domain.market_data import Quote
from core.settings import Settings


class DummyProvider:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def get_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        return Quote(symbol=symbol, current_price=Decimal("100"))


class DummyStore(InMemorySessionStore):
    def __init__(self) -> None:
        super().__init__()
        self.closed = False

    async def close(self) -> None:
        self.closed = True
        await super().close()


def test_build_quote_provider_selects_adapter(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[object] = []

    class FakeAlpaca:
        def __init__(self, settings: object) -> None:
            created.append(settings)

    monkeypatch.setattr(engine_main, "AlpacaQuoteProvider", FakeAlpaca)
    settings = SimpleNamespace(quote_provider="alpaca")

    assert isinstance(engine_main.build_quote_provider(settings), FakeAlpaca)
    assert created == [settings]
    assert isinstance(engine_main.build_quote_provider(SimpleNamespace(quote_provider="yahoo")), YahooQuoteProvider)


def test_build_session_store_selects_adapter(tmp_path) -> None:
    base = {
        "redis_url": "redis://localhost:6379/0",
        "session_namespace": "portfolio",
        "session_ttl_seconds": None,
        "database_url": f"sqlite:///{tmp_path / 'portfolio.db'}",
    }

    assert isinstance(engine_main.build_session_store(SimpleNamespace(session_store="memory", **base)), InMemorySessionStore)
    assert isinstance(engine_main.build_session_store(SimpleNamespace(session_store="redis", **base)), RedisSessionStore)
    assert isinstance(engine_main.build_session_store(SimpleNamespace(session_store="sql", **base)), SqlAlchemySessionStore)


def test_run_engine_refreshes_handles_commands_and_cleans_up(monkeypatch: pytest.MonkeyPatch) -> None:
    provider = DummyProvider()
    store = DummyStore()
    monkeypatch.setattr(engine_main, "build_quote_provider", lambda _settings: provider)
    monkeypatch.setattr(engine_main, "build_session_store", lambda _settings: store)

    async def _run() -> None:
        bus = QueueCommandBus()
        settings = Settings(_env_file=None)
        engine = asyncio.create_task(engine_main.run_engine(settings, bus))

        for _ in range(200):
            if len(provider.calls) >= 6:
                break
            await asyncio.sleep(0.01)
        await bus.publish(Command(type=CommandType.REMOVE_HOLDING, session_id="default", payload={"holding_id": "1"}))
        await asyncio.wait_for(bus.join(), timeout=1)
        await bus.close()
        await asyncio.wait_for(engine, timeout=1)

    asyncio.run(_run())

    assert sorted(provider.calls) == sorted(["AAPL", "MSFT", "GOOGL", "AMZN", "TSLA", "META"])
    assert store.closed is True


def test_main_configures_logging_and_runs(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    async def fake_run_engine() -> None:
        calls.append("run")

    monkeypatch.setattr(engine_main, "_configure_logging", lambda: calls.append("logging"))
    monkeypatch.setattr(engine_main, "run_engine", fake_run_engine)

    engine_main.main()

    assert calls == ["logging", "run"]


def test_run_engine_defaults_to_cached_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    loaded: list[Settings] = []
    store = DummyStore()

    def fake_get_settings() -> Settings:
        settings = Settings(_env_file=None)
        loaded.append(settings)
        return settings

    monkeypatch.setattr(engine_main, "get_settings", fake_get_settings)
    monkeypatch.setattr(engine_main, "build_quote_provider", lambda _settings: DummyProvider())
    monkeypatch.setattr(engine_main, "build_session_store", lambda _settings: store)

    async def _run() -> None:
        bus = QueueCommandBus()
        await bus.close()
        await asyncio.wait_for(engine_main.run_engine(bus=bus), timeout=1)

    asyncio.run(_run())

    assert len(loaded) == 1
    assert store.closed is True
