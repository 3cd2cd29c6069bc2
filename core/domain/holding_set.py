"""Mutation surface over the holding collection.

Every transition validates its input before touching state, then recomputes
the sector and portfolio summaries before returning, so readers never see
holdings and summaries that disagree.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from core.domain.aggregation import calculate_portfolio_summary, calculate_sector_summaries, rank_performers
from core.domain.errors import DuplicateHoldingError, NotFoundError
from core.domain.holding import Holding
from core.domain.market_data import Quote
from core.domain.reconciliation import ExternalSnapshot, reconcile
from core.domain.summaries import (
    HoldingMetrics,
    HoldingRow,
    PerformanceBoard,
    PortfolioSummary,
    SectorRow,
    SectorSummary,
    TableRow,
)
from core.domain.valuation import effective_quantity, holding_metrics, parse_quantity

logger = logging.getLogger(__name__)


def _check_unique(holdings: Iterable[Holding]) -> None:
    tickers: set[str] = set()
    ids: set[str] = set()
    for holding in holdings:
        if holding.ticker in tickers:
            raise DuplicateHoldingError(holding.ticker)
        if holding.id in ids:
            raise DuplicateHoldingError(holding.ticker, holding_id=holding.id)
        tickers.add(holding.ticker)
        ids.add(holding.id)


class HoldingSetEditor:
    """Owns the holdings, the pending quantity overlay and the derived summaries."""

    def __init__(self, holdings: Iterable[Holding] = (), *, performer_limit: int = 5) -> None:
        initial = list(holdings)
        _check_unique(initial)
        self._holdings: list[Holding] = initial
        self._pending: dict[str, int] = {}
        self._edit_log: dict[str, int] = {}
        self._revision = 0
        self._performer_limit = performer_limit
        self._portfolio_summary = PortfolioSummary()
        self._sector_summaries: tuple[SectorSummary, ...] = ()
        self._recompute()

    @property
    def holdings(self) -> tuple[Holding, ...]:
        return tuple(self._holdings)

    @property
    def pending(self) -> dict[str, int]:
        return dict(self._pending)

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def edit_log(self) -> dict[str, int]:
        return dict(self._edit_log)

    @property
    def sector_summaries(self) -> tuple[SectorSummary, ...]:
        return self._sector_summaries

    @property
    def portfolio_summary(self) -> PortfolioSummary:
        return self._portfolio_summary

    def get(self, holding_id: str) -> Holding:
        return self._holdings[self._index_of(holding_id)]

    def find_by_ticker(self, ticker: str) -> Holding | None:
        wanted = ticker.strip().upper()
        for holding in self._holdings:
            if holding.ticker == wanted:
                return holding
        return None

    def add(self, holding: Holding) -> Holding:
        if self.find_by_ticker(holding.ticker) is not None:
            raise DuplicateHoldingError(holding.ticker)
        if any(existing.id == holding.id for existing in self._holdings):
            raise DuplicateHoldingError(holding.ticker, holding_id=holding.id)

        self._holdings.append(holding)
        self._commit(holding.id)
        logger.info("Added holding %s (%s) qty=%s", holding.ticker, holding.id, holding.quantity)
        return holding

    def remove(self, holding_id: str) -> Holding:
        index = self._index_of(holding_id)
        removed = self._holdings.pop(index)
        self._pending.pop(holding_id, None)
        self._commit(holding_id)
        logger.info("Removed holding %s (%s)", removed.ticker, holding_id)
        return removed

    def stage_quantity(self, holding_id: str, quantity: Any) -> int:
        """Record an uncommitted quantity; summaries keep the committed value."""
        self._index_of(holding_id)
        value = parse_quantity(quantity)
        self._pending[holding_id] = value
        logger.debug("Staged quantity %s for %s", value, holding_id)
        return value

    def commit_quantity(self, holding_id: str) -> Holding:
        index = self._index_of(holding_id)
        if holding_id not in self._pending:
            logger.debug("No pending quantity to commit for %s", holding_id)
            return self._holdings[index]

        quantity = self._pending.pop(holding_id)
        updated = self._holdings[index].with_quantity(quantity)
        self._holdings[index] = updated
        self._commit(holding_id)
        logger.info("Committed quantity %s for %s (%s)", quantity, updated.ticker, holding_id)
        return updated

    def set_quantity(self, holding_id: str, quantity: Any) -> Holding:
        self.stage_quantity(holding_id, quantity)
        return self.commit_quantity(holding_id)

    def discard_quantity(self, holding_id: str) -> None:
        self._index_of(holding_id)
        self._pending.pop(holding_id, None)

    def apply_quotes(self, quotes: Mapping[str, Quote], failed: Iterable[str] = ()) -> None:
        """Merge fetched quotes; holdings whose fetch failed fall back to purchase terms."""
        failed_tickers = {ticker.upper() for ticker in failed}
        updated: list[Holding] = []
        for holding in self._holdings:
            quote = quotes.get(holding.ticker)
            if quote is not None:
                updated.append(holding.with_quote(quote))
            elif holding.ticker in failed_tickers:
                updated.append(holding.with_fallback())
            else:
                updated.append(holding)
        self._holdings = updated
        self._commit()

    def load(
        self,
        holdings: Iterable[Holding],
        *,
        pending: Mapping[str, int] | None = None,
        revision: int | None = None,
    ) -> None:
        """Replace the whole collection, e.g. with a restored session.

        A restored ``revision`` keeps the counter moving forward across restarts.
        """
        replacement = list(holdings)
        _check_unique(replacement)
        ids = {holding.id for holding in replacement}
        self._holdings = replacement
        self._pending = {key: value for key, value in (pending or {}).items() if key in ids}
        self._edit_log.clear()
        if revision is not None:
            self._revision = max(self._revision, revision)
        self._commit()
        logger.info("Loaded %d holdings (revision=%s)", len(replacement), self._revision)

    def reconcile(self, snapshot: ExternalSnapshot) -> None:
        merged = reconcile(self._holdings, self._edit_log, snapshot)
        _check_unique(merged)
        ids = {holding.id for holding in merged}
        self._holdings = merged
        self._pending = {key: value for key, value in self._pending.items() if key in ids}
        self._commit()

    def metrics(self) -> list[HoldingMetrics]:
        """Per-holding valuation with pending edits applied."""
        total = self._portfolio_summary.total_investment
        return [
            holding_metrics(holding, total, self._pending.get(holding.id))
            for holding in self._holdings
        ]

    def table_rows(self) -> list[TableRow]:
        """Sector rows, each followed by its holdings."""
        by_id = {holding.id: holding for holding in self._holdings}
        rows: list[TableRow] = []
        for summary in self._sector_summaries:
            rows.append(SectorRow(summary=summary))
            rows.extend(HoldingRow(holding=by_id[holding_id]) for holding_id in summary.holding_ids)
        return rows

    def effective_quantity(self, row: TableRow) -> int:
        by_id = {holding.id: holding for holding in self._holdings}
        return effective_quantity(row, self._pending, by_id)

    def performance(self) -> PerformanceBoard:
        return rank_performers(self._holdings, limit=self._performer_limit)

    def _index_of(self, holding_id: str) -> int:
        for index, holding in enumerate(self._holdings):
            if holding.id == holding_id:
                return index
        raise NotFoundError(holding_id)

    def _commit(self, holding_id: str | None = None) -> None:
        self._revision += 1
        if holding_id is not None:
            self._edit_log[holding_id] = self._revision
        self._recompute()

    def _recompute(self) -> None:
        summary = calculate_portfolio_summary(self._holdings)
        self._portfolio_summary = summary
        self._sector_summaries = tuple(calculate_sector_summaries(self._holdings, summary.total_investment))


__all__ = ["HoldingSetEditor"]
