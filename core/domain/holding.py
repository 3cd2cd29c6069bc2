from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.domain.market_data import MARKET_DATA_FIELDS, Quote


class Holding(BaseModel):
    """One tracked stock position.

    Holdings are immutable; edits produce a new instance via ``model_copy``.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    ticker: str
    sector: str
    exchange: str | None = None
    purchase_price: Decimal = Field(gt=0)
    quantity: int = Field(ge=0)
    purchase_date: date | None = None
    current_price: Decimal = Field(ge=0)

    pe_ratio: Decimal | None = None
    latest_earnings: Decimal | None = None
    day_high: Decimal | None = None
    day_low: Decimal | None = None
    volume: int | None = None
    market_cap: Decimal | None = None
    day_change: Decimal | None = None
    day_change_percent: Decimal | None = None
    fifty_day_average: Decimal | None = None
    two_hundred_day_average: Decimal | None = None
    year_high: Decimal | None = None
    year_low: Decimal | None = None
    last_updated: datetime | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _default_current_price(cls, data: Any) -> Any:
        # Until a quote arrives the purchase price stands in for the market price.
        if isinstance(data, dict) and data.get("current_price") is None:
            data = {**data, "current_price": data.get("purchase_price")}
        return data

    @field_validator("ticker")
    @classmethod
    def _normalize_ticker(cls, value: str) -> str:
        ticker = value.strip().upper()
        if not ticker:
            raise ValueError("ticker must not be empty")
        return ticker

    @field_validator("sector", "name")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        return value.strip()

    def with_quantity(self, quantity: int) -> Holding:
        return self.model_copy(update={"quantity": quantity})

    def with_quote(self, quote: Quote) -> Holding:
        update = quote.market_data()
        if quote.exchange:
            update["exchange"] = quote.exchange
        return self.model_copy(update=update)

    def with_fallback(self) -> Holding:
        """Copy with the purchase price as current price and market data unknown."""
        update: dict[str, Any] = {name: None for name in MARKET_DATA_FIELDS}
        update["current_price"] = self.purchase_price
        update["last_updated"] = None
        return self.model_copy(update=update)

    def with_market_data_from(self, other: Holding) -> Holding:
        """Copy carrying ``other``'s price and market data but this holding's terms."""
        update: dict[str, Any] = {name: getattr(other, name) for name in MARKET_DATA_FIELDS}
        update["current_price"] = other.current_price
        update["last_updated"] = other.last_updated
        if other.exchange:
            update["exchange"] = other.exchange
        return self.model_copy(update=update)


__all__ = ["Holding"]
