"""Portfolio dashboard service.

Wraps the holding editor with quote refreshes, session persistence and
snapshot publication. Every public transition publishes a fresh
``DashboardSnapshot`` to subscribers once the editor has recomputed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from apps.engine.refresh import fetch_quotes
from core.domain.errors import PortfolioError
from core.domain.holding import Holding
from core.domain.holding_set import HoldingSetEditor
from core.domain.reconciliation import ExternalSnapshot
from core.domain.session import SessionState
from core.domain.summaries import DashboardSnapshot
from core.ports.quote_provider import QuoteProvider
from core.ports.session_store import SessionStore

logger = logging.getLogger(__name__)

REFRESH_FAILED_MESSAGE = "Failed to fetch stock data"

SnapshotListener = Callable[[DashboardSnapshot], None]


class PortfolioDashboard:
    def __init__(
        self,
        provider: QuoteProvider,
        store: SessionStore,
        session_id: str,
        *,
        editor: HoldingSetEditor | None = None,
        seed: Callable[[], Iterable[Holding]] | None = None,
    ) -> None:
        self._provider = provider
        self._store = store
        self._session_id = session_id
        self._editor = editor or HoldingSetEditor()
        self._seed = seed
        self._listeners: list[SnapshotListener] = []
        self._refreshing = False
        self._last_refreshed_at: datetime | None = None
        self._error: str | None = None

    @property
    def editor(self) -> HoldingSetEditor:
        return self._editor

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    def snapshot(self) -> DashboardSnapshot:
        editor = self._editor
        return DashboardSnapshot(
            holdings=editor.holdings,
            metrics=tuple(editor.metrics()),
            sector_summaries=editor.sector_summaries,
            portfolio_summary=editor.portfolio_summary,
            performance=editor.performance(),
            pending=editor.pending,
            revision=editor.revision,
            last_refreshed_at=self._last_refreshed_at,
            refreshing=self._refreshing,
            error=self._error,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    async def start(self) -> DashboardSnapshot:
        """Restore the stored session, or seed a new one."""
        state = await self._store.load(self._session_id)
        if state is not None:
            self._editor.load(state.holdings, pending=state.pending, revision=state.revision)
            logger.info("Restored session %s with %d holdings", self._session_id, len(state.holdings))
        elif self._seed is not None:
            self._editor.load(self._seed())
            logger.info("Seeded session %s with %d holdings", self._session_id, len(self._editor.holdings))
            await self._persist()
        return self._publish()

    async def add_holding(self, holding: Holding | Mapping[str, Any], *, fetch_quote: bool = True) -> Holding:
        """Insert a holding at purchase terms, then try to price it."""
        if not isinstance(holding, Holding):
            holding = Holding.model_validate(dict(holding))
        added = self._editor.add(holding.with_fallback())
        await self._persist()
        self._publish()

        if fetch_quote:
            await self._price_holding(added.id)
        return self._editor.get(added.id)

    async def remove_holding(self, holding_id: str) -> Holding:
        removed = self._editor.remove(holding_id)
        await self._persist()
        self._publish()
        return removed

    async def stage_quantity(self, holding_id: str, quantity: Any) -> int:
        value = self._editor.stage_quantity(holding_id, quantity)
        await self._persist()
        self._publish()
        return value

    async def commit_quantity(self, holding_id: str) -> Holding:
        updated = self._editor.commit_quantity(holding_id)
        await self._persist()
        self._publish()
        return updated

    async def set_quantity(self, holding_id: str, quantity: Any) -> Holding:
        updated = self._editor.set_quantity(holding_id, quantity)
        await self._persist()
        self._publish()
        return updated

    async def discard_quantity(self, holding_id: str) -> None:
        self._editor.discard_quantity(holding_id)
        await self._persist()
        self._publish()

    async def refresh_all(self) -> bool:
        """Fetch quotes for every holding and merge them.

        Returns ``False`` without doing anything while another refresh is in
        flight, or when no quote at all could be fetched.
        """
        if self._refreshing:
            logger.info("Refresh already in progress; skipping")
            return False

        self._refreshing = True
        self._publish()
        try:
            return await self._refresh()
        finally:
            self._refreshing = False
            self._publish()

    async def close(self) -> None:
        await self._store.close()

    async def _refresh(self) -> bool:
        base_revision = self._editor.revision
        holdings = self._editor.holdings
        if not holdings:
            self._error = None
            self._last_refreshed_at = datetime.now(UTC)
            return True

        try:
            batch = await fetch_quotes(self._provider, [holding.ticker for holding in holdings])
        except Exception:
            logger.exception("Quote refresh failed")
            self._error = REFRESH_FAILED_MESSAGE
            return False

        if batch.all_failed:
            logger.error("Quote refresh failed for all %d tickers", len(batch.failed))
            self._error = REFRESH_FAILED_MESSAGE
            return False

        refreshed: list[Holding] = []
        for holding in holdings:
            quote = batch.quotes.get(holding.ticker)
            if quote is not None:
                refreshed.append(holding.with_quote(quote))
            elif holding.ticker in batch.failed:
                refreshed.append(holding.with_fallback())
            else:
                refreshed.append(holding)

        # Edits made while the fetch was in flight are newer than base_revision.
        self._editor.reconcile(ExternalSnapshot(holdings=tuple(refreshed), base_revision=base_revision))
        self._error = None
        self._last_refreshed_at = datetime.now(UTC)
        await self._persist()
        logger.info("Refreshed %d holdings (%d fell back)", len(batch.quotes), len(batch.failed))
        return True

    async def _price_holding(self, holding_id: str) -> None:
        ticker = self._editor.get(holding_id).ticker
        try:
            quote = await asyncio.to_thread(self._provider.get_quote, ticker)
        except Exception as exc:
            logger.warning("Keeping purchase price for %s: %s", ticker, exc)
            return

        try:
            self._editor.get(holding_id)
        except PortfolioError:
            logger.info("Holding %s removed before its quote arrived", ticker)
            return
        self._editor.apply_quotes({ticker: quote})
        await self._persist()
        self._publish()

    async def _persist(self) -> None:
        state = SessionState(
            holdings=list(self._editor.holdings),
            pending=self._editor.pending,
            revision=self._editor.revision,
        )
        try:
            await self._store.save(self._session_id, state)
        except Exception:
            logger.exception("Failed to save session %s", self._session_id)

    def _publish(self) -> DashboardSnapshot:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Snapshot listener failed")
        return snapshot


__all__ = ["PortfolioDashboard", "REFRESH_FAILED_MESSAGE"]
