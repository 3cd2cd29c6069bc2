from __future__ import annotations

from typing import Any


class PortfolioError(Exception):
    """Base class for portfolio domain errors."""


class DuplicateHoldingError(PortfolioError):
    def __init__(self, ticker: str, *, holding_id: str | None = None) -> None:
        self.ticker = ticker
        self.holding_id = holding_id
        if holding_id is not None:
            message = f"Holding id {holding_id} already exists"
        else:
            message = f"A holding for {ticker} already exists"
        super().__init__(message)


class NotFoundError(PortfolioError):
    def __init__(self, holding_id: str) -> None:
        self.holding_id = holding_id
        super().__init__(f"No holding with id {holding_id}")


class InvalidQuantityError(PortfolioError):
    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f"Quantity must be a non-negative integer, got {value!r}")


class QuoteUnavailable(PortfolioError):
    """Quote could not be fetched for a single ticker."""

    def __init__(self, symbol: str, reason: str | None = None) -> None:
        self.symbol = symbol
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Quote unavailable for {symbol}{detail}")


class DivisionDegenerate(PortfolioError):
    """Zero denominator in a percentage calculation."""


__all__ = [
    "DivisionDegenerate",
    "DuplicateHoldingError",
    "InvalidQuantityError",
    "NotFoundError",
    "PortfolioError",
    "QuoteUnavailable",
]
