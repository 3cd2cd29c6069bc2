from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

from core.domain.market_data import Quote
from core.ports.quote_provider import QuoteProvider

logger = logging.getLogger(__name__)


def normalize_symbols(symbols: Iterable[str]) -> list[str]:
    seen = set()
    normalized: list[str] = []
    for symbol in symbols:
        item = symbol.strip().upper()
        if not item or item in seen:
            continue
        seen.add(item)
        normalized.append(item)
    return normalized


@dataclass(frozen=True)
class QuoteBatch:
    quotes: dict[str, Quote] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def all_failed(self) -> bool:
        return bool(self.failed) and not self.quotes


async def fetch_quotes(provider: QuoteProvider, symbols: Iterable[str]) -> QuoteBatch:
    """Fetch one quote per symbol concurrently; a failing symbol never aborts the batch."""
    tickers = normalize_symbols(symbols)
    if not tickers:
        return QuoteBatch()

    results = await asyncio.gather(
        *(asyncio.to_thread(provider.get_quote, ticker) for ticker in tickers),
        return_exceptions=True,
    )

    quotes: dict[str, Quote] = {}
    failed: dict[str, str] = {}
    for ticker, result in zip(tickers, results, strict=True):
        if isinstance(result, Quote):
            quotes[ticker] = result
        elif isinstance(result, Exception):
            logger.warning("Quote unavailable for %s: %s", ticker, result)
            failed[ticker] = str(result)
        else:
            raise result
    logger.info("Fetched %d quotes (%d failed)", len(quotes), len(failed))
    return QuoteBatch(quotes=quotes, failed=failed)


class RefreshScheduler:
    """Runs ``refresh`` every ``interval_seconds`` or when triggered.

    Refreshes run one after another inside a single task, so a firing never
    overlaps the previous one. A trigger that arrives while a refresh is in
    flight is dropped.
    """

    def __init__(self, refresh: Callable[[], Awaitable[object]], interval_seconds: float) -> None:
        self._refresh = refresh
        self._interval_seconds = interval_seconds
        self._event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self._refreshing = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Refresh scheduler started (interval=%ss)", self._interval_seconds)

    def trigger(self) -> None:
        if self._refreshing:
            logger.info("Refresh already in progress; trigger ignored")
            return
        self._event.set()

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Refresh scheduler stopped")

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.wait_for(self._event.wait(), timeout=self._interval_seconds)
                triggered_by_event = True
            except TimeoutError:
                triggered_by_event = False

            if triggered_by_event:
                self._event.clear()
            reason = "manual" if triggered_by_event else "interval"
            logger.info("Refreshing quotes (reason=%s)", reason)
            self._refreshing = True
            try:
                await self._refresh()
            except Exception:
                logger.exception("Scheduled refresh failed")
            finally:
                self._refreshing = False
                self._event.clear()
