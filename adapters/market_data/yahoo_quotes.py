"""Yahoo Finance quote provider backed by yfinance."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

import yfinance as yf

from core.domain.errors import QuoteUnavailable
from core.domain.market_data import Quote
from core.ports.quote_provider import QuoteProvider

logger = logging.getLogger(__name__)

PRICE_FIELDS = ("regularMarketPrice", "currentPrice")


def _decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _integer(value: Any) -> int | None:
    number = _decimal(value)
    return int(number) if number is not None else None


def _first(info: Mapping[str, Any], *keys: str) -> Decimal | None:
    for key in keys:
        number = _decimal(info.get(key))
        if number is not None:
            return number
    return None


def _latest_earnings(info: Mapping[str, Any]) -> Decimal | None:
    revenue = _decimal(info.get("totalRevenue"))
    if revenue:
        shares = _decimal(info.get("sharesOutstanding")) or Decimal("1")
        return revenue / shares
    return _decimal(info.get("trailingEps"))


def quote_from_yahoo(symbol: str, info: Mapping[str, Any]) -> Quote:
    """Map a yfinance ``Ticker.info`` payload onto a Quote."""
    price = _first(info, *PRICE_FIELDS)
    if price is None:
        raise QuoteUnavailable(symbol, "no market price in response")

    return Quote(
        symbol=symbol,
        current_price=price,
        exchange=info.get("exchange") or None,
        pe_ratio=_first(info, "forwardPE", "trailingPE"),
        latest_earnings=_latest_earnings(info),
        day_high=_decimal(info.get("regularMarketDayHigh")),
        day_low=_decimal(info.get("regularMarketDayLow")),
        volume=_integer(info.get("regularMarketVolume")),
        market_cap=_decimal(info.get("marketCap")),
        day_change=_decimal(info.get("regularMarketChange")),
        day_change_percent=_decimal(info.get("regularMarketChangePercent")),
        fifty_day_average=_decimal(info.get("fiftyDayAverage")),
        two_hundred_day_average=_decimal(info.get("twoHundredDayAverage")),
        year_high=_decimal(info.get("fiftyTwoWeekHigh")),
        year_low=_decimal(info.get("fiftyTwoWeekLow")),
    )


class YahooQuoteProvider(QuoteProvider):
    """Fetch quotes through ``yfinance.Ticker(...).info``."""

    def __init__(self, *, ticker_factory: Callable[[str], Any] = yf.Ticker) -> None:
        self._ticker_factory = ticker_factory

    def get_quote(self, symbol: str) -> Quote:
        ticker = symbol.strip().upper()
        logger.debug("Fetching Yahoo quote for %s", ticker)
        try:
            info = self._ticker_factory(ticker).info
        except Exception as exc:
            raise QuoteUnavailable(ticker, str(exc)) from exc
        if not info:
            raise QuoteUnavailable(ticker, "empty response")
        return quote_from_yahoo(ticker, info)
