from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from core.domain.holding import Holding
from core.domain.summaries import ZERO, PerformanceBoard, PerformanceEntry, PortfolioSummary, SectorSummary
from core.domain.valuation import gain_loss_percentage, investment, percentage, present_value

CENT = Decimal("0.01")


def group_by_sector(holdings: Sequence[Holding]) -> dict[str, list[Holding]]:
    """Partition holdings by sector label, keeping first-seen sector order."""
    groups: dict[str, list[Holding]] = {}
    for holding in holdings:
        groups.setdefault(holding.sector, []).append(holding)
    return groups


def calculate_sector_summaries(
    holdings: Sequence[Holding], total_portfolio_investment: Decimal
) -> list[SectorSummary]:
    """One summary per distinct sector label, valued at committed quantities."""
    summaries: list[SectorSummary] = []
    for sector, members in group_by_sector(holdings).items():
        total_investment = sum((investment(holding) for holding in members), ZERO)
        value = sum((present_value(holding) for holding in members), ZERO)
        summaries.append(
            SectorSummary(
                sector=sector,
                total_investment=total_investment,
                present_value=value,
                gain_loss=value - total_investment,
                percentage_of_portfolio=percentage(total_investment, total_portfolio_investment),
                holding_count=len(members),
                total_quantity=sum(holding.quantity for holding in members),
                holding_ids=tuple(holding.id for holding in members),
            )
        )
    return summaries


def calculate_portfolio_summary(holdings: Sequence[Holding]) -> PortfolioSummary:
    total_investment = ZERO
    total_value = ZERO
    for holding in holdings:
        total_investment += investment(holding)
        total_value += present_value(holding)
    total_gain_loss = total_value - total_investment
    return PortfolioSummary(
        total_investment=total_investment,
        total_value=total_value,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percentage=percentage(total_gain_loss, total_investment),
        sector_count=len({holding.sector for holding in holdings}),
        stock_count=len(holdings),
    )


def rank_performers(holdings: Sequence[Holding], *, limit: int = 5) -> PerformanceBoard:
    if limit <= 0 or not holdings:
        return PerformanceBoard()
    ranked = sorted(holdings, key=gain_loss_percentage, reverse=True)
    entries = [
        PerformanceEntry(
            ticker=holding.ticker,
            name=holding.name,
            gain_loss_percentage=gain_loss_percentage(holding).quantize(CENT),
        )
        for holding in ranked
    ]
    return PerformanceBoard(top=tuple(entries[:limit]), bottom=tuple(reversed(entries[-limit:])))


__all__ = [
    "calculate_portfolio_summary",
    "calculate_sector_summaries",
    "group_by_sector",
    "rank_performers",
]
