"""Domain models."""

from core.domain.commands import Command, CommandType
from core.domain.errors import (
    DivisionDegenerate,
    DuplicateHoldingError,
    InvalidQuantityError,
    NotFoundError,
    PortfolioError,
    QuoteUnavailable,
)
from core.domain.holding import Holding
from core.domain.holding_set import HoldingSetEditor
from core.domain.market_data import Quote
from core.domain.reconciliation import ExternalSnapshot
from core.domain.session import SessionState
from core.domain.summaries import DashboardSnapshot, PortfolioSummary, SectorSummary

__all__ = [
    "Command",
    "CommandType",
    "DashboardSnapshot",
    "DivisionDegenerate",
    "DuplicateHoldingError",
    "ExternalSnapshot",
    "Holding",
    "HoldingSetEditor",
    "InvalidQuantityError",
    "NotFoundError",
    "PortfolioError",
    "PortfolioSummary",
    "Quote",
    "QuoteUnavailable",
    "SectorSummary",
    "SessionState",
]
