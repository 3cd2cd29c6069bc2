from __future__ import annotations

from decimal import Decimal

import pandas as pd

from core.domain.summaries import DashboardSnapshot


def _to_float(value: Decimal | None) -> float:
    if value is None:
        return float("nan")
    return float(value)


def holdings_to_frame(snapshot: DashboardSnapshot) -> pd.DataFrame:
    """Table-ready holdings, pending quantities applied, sorted by sector then ticker."""
    by_id = {item.holding_id: item for item in snapshot.metrics}
    records: list[dict[str, object]] = []
    for holding in snapshot.holdings:
        item = by_id.get(holding.id)
        records.append(
            {
                "id": holding.id,
                "ticker": holding.ticker,
                "name": holding.name,
                "sector": holding.sector,
                "exchange": holding.exchange,
                "purchase_price": _to_float(holding.purchase_price),
                "quantity": item.effective_quantity if item else holding.quantity,
                "current_price": _to_float(holding.current_price),
                "investment": _to_float(item.investment if item else None),
                "present_value": _to_float(item.present_value if item else None),
                "gain_loss": _to_float(item.gain_loss if item else None),
                "gain_loss_percentage": _to_float(item.gain_loss_percentage if item else None),
                "portfolio_percentage": _to_float(item.portfolio_percentage if item else None),
                "pe_ratio": _to_float(holding.pe_ratio),
                "latest_earnings": _to_float(holding.latest_earnings),
                "day_change_percent": _to_float(holding.day_change_percent),
                "pending": item.pending if item else False,
            }
        )

    df = pd.DataFrame.from_records(records)
    if df.empty:
        return df

    df.sort_values(["sector", "ticker"], inplace=True)
    df.reset_index(drop=True, inplace=True)
    return df


def sectors_to_frame(snapshot: DashboardSnapshot) -> pd.DataFrame:
    records = [
        {
            "sector": summary.sector,
            "total_investment": _to_float(summary.total_investment),
            "present_value": _to_float(summary.present_value),
            "gain_loss": _to_float(summary.gain_loss),
            "percentage_of_portfolio": _to_float(summary.percentage_of_portfolio),
            "holding_count": summary.holding_count,
            "total_quantity": summary.total_quantity,
        }
        for summary in snapshot.sector_summaries
    ]
    df = pd.DataFrame.from_records(records)
    if df.empty:
        return df

    df.sort_values("percentage_of_portfolio", ascending=False, inplace=True, kind="stable")
    df.reset_index(drop=True, inplace=True)
    return df
