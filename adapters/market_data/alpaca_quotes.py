from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from alpaca.common.exceptions import APIError
from alpaca.data import StockHistoricalDataClient
from alpaca.data.requests import StockSnapshotRequest

from core.domain.errors import QuoteUnavailable
from core.domain.market_data import Quote
from core.ports.quote_provider import QuoteProvider
from core.settings import Settings

logger = logging.getLogger(__name__)


def _decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def quote_from_snapshot(symbol: str, snapshot: Any) -> Quote:
    """Build a Quote from an Alpaca stock snapshot.

    Alpaca has no fundamentals, so P/E, market cap and moving averages stay unknown.
    """
    trade = getattr(snapshot, "latest_trade", None)
    daily = getattr(snapshot, "daily_bar", None)
    previous = getattr(snapshot, "previous_daily_bar", None)

    price = _decimal(getattr(trade, "price", None)) or _decimal(getattr(daily, "close", None))
    if price is None:
        raise QuoteUnavailable(symbol, "snapshot has no trade or daily bar")

    previous_close = _decimal(getattr(previous, "close", None))
    day_change = day_change_percent = None
    if previous_close:
        day_change = price - previous_close
        day_change_percent = day_change / previous_close * 100

    volume = getattr(daily, "volume", None)
    timestamp = getattr(trade, "timestamp", None)
    payload: dict[str, Any] = {
        "symbol": symbol,
        "current_price": price,
        "day_high": _decimal(getattr(daily, "high", None)),
        "day_low": _decimal(getattr(daily, "low", None)),
        "volume": int(volume) if volume is not None else None,
        "day_change": day_change,
        "day_change_percent": day_change_percent,
    }
    if timestamp is not None:
        payload["fetched_at"] = timestamp
    return Quote.model_validate(payload)


class AlpacaQuoteProvider(QuoteProvider):
    """Quotes from Alpaca's market data snapshot endpoint."""

    def __init__(self, settings: Settings, *, client: StockHistoricalDataClient | None = None) -> None:
        self._client = client or StockHistoricalDataClient(api_key=settings.api_key, secret_key=settings.api_secret)
        self._data_feed = settings.data_feed

    def get_quote(self, symbol: str) -> Quote:
        ticker = symbol.strip().upper()
        request = StockSnapshotRequest(symbol_or_symbols=ticker, feed=self._data_feed)
        try:
            response = self._client.get_stock_snapshot(request)
        except APIError as exc:
            raise QuoteUnavailable(ticker, f"Alpaca snapshot request failed: {exc}") from exc

        snapshot = response.get(ticker) if isinstance(response, dict) else None
        if snapshot is None:
            raise QuoteUnavailable(ticker, "no snapshot returned")
        return quote_from_snapshot(ticker, snapshot)
