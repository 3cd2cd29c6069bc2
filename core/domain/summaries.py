"""Derived views over a holding collection.

None of these models has a lifecycle of its own; they are recomputed from the
holdings whenever the collection changes.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from core.domain.holding import Holding

ZERO = Decimal("0")


class HoldingMetrics(BaseModel):
    holding_id: str
    ticker: str
    sector: str
    effective_quantity: int
    investment: Decimal
    present_value: Decimal
    gain_loss: Decimal
    gain_loss_percentage: Decimal
    portfolio_percentage: Decimal
    pending: bool = False

    model_config = ConfigDict(frozen=True)


class SectorSummary(BaseModel):
    sector: str
    total_investment: Decimal
    present_value: Decimal
    gain_loss: Decimal
    percentage_of_portfolio: Decimal
    holding_count: int
    total_quantity: int
    holding_ids: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


class PortfolioSummary(BaseModel):
    total_investment: Decimal = ZERO
    total_value: Decimal = ZERO
    total_gain_loss: Decimal = ZERO
    total_gain_loss_percentage: Decimal = ZERO
    sector_count: int = 0
    stock_count: int = 0

    model_config = ConfigDict(frozen=True)


class PerformanceEntry(BaseModel):
    ticker: str
    name: str
    gain_loss_percentage: Decimal

    model_config = ConfigDict(frozen=True)


class PerformanceBoard(BaseModel):
    """Best and worst performers by gain/loss percentage."""

    top: tuple[PerformanceEntry, ...] = ()
    bottom: tuple[PerformanceEntry, ...] = ()

    model_config = ConfigDict(frozen=True)


class HoldingRow(BaseModel):
    kind: Literal["holding"] = "holding"
    holding: Holding

    model_config = ConfigDict(frozen=True)


class SectorRow(BaseModel):
    kind: Literal["sector"] = "sector"
    summary: SectorSummary

    model_config = ConfigDict(frozen=True)


TableRow = Annotated[HoldingRow | SectorRow, Field(discriminator="kind")]


class DashboardSnapshot(BaseModel):
    """Read-only state handed to the rendering layer after every recompute."""

    holdings: tuple[Holding, ...] = ()
    metrics: tuple[HoldingMetrics, ...] = ()
    sector_summaries: tuple[SectorSummary, ...] = ()
    portfolio_summary: PortfolioSummary = Field(default_factory=PortfolioSummary)
    performance: PerformanceBoard = Field(default_factory=PerformanceBoard)
    pending: dict[str, int] = Field(default_factory=dict)
    revision: int = 0
    last_refreshed_at: datetime | None = None
    refreshing: bool = False
    error: str | None = None

    model_config = ConfigDict(frozen=True)


__all__ = [
    "DashboardSnapshot",
    "HoldingMetrics",
    "HoldingRow",
    "PerformanceBoard",
    "PerformanceEntry",
    "PortfolioSummary",
    "SectorRow",
    "SectorSummary",
    "TableRow",
]
