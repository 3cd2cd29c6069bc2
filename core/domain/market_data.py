from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MARKET_DATA_FIELDS: tuple[str, ...] = (
    "pe_ratio",
    "latest_earnings",
    "day_high",
    "day_low",
    "volume",
    "market_cap",
    "day_change",
    "day_change_percent",
    "fifty_day_average",
    "two_hundred_day_average",
    "year_high",
    "year_low",
)


def _to_mapping(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if hasattr(value, "model_dump"):
        return value.model_dump()
    if isinstance(value, dict):
        return dict(value)
    if hasattr(value, "__dict__"):
        return dict(value.__dict__)
    return {}


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=UTC)
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class Quote(BaseModel):
    """Latest market data for a ticker as reported by a quote provider.

    Every field other than ``symbol`` and ``current_price`` may be missing;
    ``None`` means the provider did not report it.
    """

    symbol: str
    current_price: Decimal = Field(ge=0)
    exchange: str | None = None
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
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=False)

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("fetched_at", mode="before")
    @classmethod
    def _parse_fetched_at(cls, value: Any) -> datetime:
        return _parse_timestamp(value) or datetime.now(UTC)

    @classmethod
    def from_payload(cls, payload: Any) -> Quote:
        raw = _to_mapping(payload)
        return cls.model_validate(raw)

    def market_data(self) -> dict[str, Any]:
        """Market data fields in the shape a holding stores them."""
        data = {name: getattr(self, name) for name in MARKET_DATA_FIELDS}
        data["current_price"] = self.current_price
        data["last_updated"] = self.fetched_at
        return data


__all__ = ["MARKET_DATA_FIELDS", "Quote"]
