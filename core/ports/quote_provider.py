from __future__ import annotations

from typing import Protocol

from core.domain.market_data import Quote


class QuoteProvider(Protocol):
    """Market data source for a single ticker."""

    def get_quote(self, symbol: str) -> Quote:
        """Return the latest quote or raise QuoteUnavailable."""
