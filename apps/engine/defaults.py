"""Sample portfolio used when a session has nothing stored yet."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from core.domain.holding import Holding

_SAMPLE_PURCHASE_DATE = date(2023, 1, 1)

_SAMPLE_ROWS = (
    ("1", "Apple Inc.", "AAPL", "Technology", "NASDAQ", "150", 10),
    ("2", "Microsoft Corporation", "MSFT", "Technology", "NASDAQ", "250", 5),
    ("3", "Alphabet Inc.", "GOOGL", "Technology", "NASDAQ", "2800", 3),
    ("4", "Amazon.com Inc.", "AMZN", "Consumer Cyclical", "NASDAQ", "3300", 2),
    ("5", "Tesla, Inc.", "TSLA", "Automotive", "NASDAQ", "900", 5),
    ("6", "Meta Platforms Inc.", "META", "Technology", "NASDAQ", "330", 4),
)


def default_holdings() -> list[Holding]:
    return [
        Holding(
            id=holding_id,
            name=name,
            ticker=ticker,
            sector=sector,
            exchange=exchange,
            purchase_price=Decimal(price),
            quantity=quantity,
            purchase_date=_SAMPLE_PURCHASE_DATE,
        )
        for holding_id, name, ticker, sector, exchange, price, quantity in _SAMPLE_ROWS
    ]


__all__ = ["default_holdings"]
