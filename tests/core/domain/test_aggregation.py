from __future__ import annotations

from decimal import Decimal

from core.domain.aggregation import (
    calculate_portfolio_summary,
    calculate_sector_summaries,
    group_by_sector,
    rank_performers,
)
from core.domain.holding import Holding


def _holding(ticker: str, sector: str, purchase: str, quantity: int, current: str | None = None) -> Holding:
    return Holding(
        id=ticker.lower(),
        name=f"{ticker} Inc.",
        ticker=ticker,
        sector=sector,
        purchase_price=Decimal(purchase),
        quantity=quantity,
        current_price=Decimal(current) if current is not None else None,
    )


def _scenario() -> list[Holding]:
    return [
        _holding("AAPL", "Technology", "150", 10, current="180"),
        _holding("TSLA", "Automotive", "900", 5, current="850"),
    ]


def test_portfolio_summary_totals() -> None:
    summary = calculate_portfolio_summary(_scenario())

    assert summary.total_investment == Decimal("6000")
    assert summary.total_value == Decimal("6050")
    assert summary.total_gain_loss == Decimal("50")
    assert summary.total_gain_loss_percentage.quantize(Decimal("0.01")) == Decimal("0.83")
    assert summary.sector_count == 2
    assert summary.stock_count == 2


def test_sector_summaries_follow_first_seen_order_and_sum_to_total() -> None:
    holdings = [
        _holding("AAPL", "Technology", "150", 10),
        _holding("TSLA", "Automotive", "900", 5),
        _holding("MSFT", "Technology", "250", 5),
    ]
    total = calculate_portfolio_summary(holdings).total_investment

    summaries = calculate_sector_summaries(holdings, total)

    assert [item.sector for item in summaries] == ["Technology", "Automotive"]
    technology = summaries[0]
    assert technology.total_investment == Decimal("2750")
    assert technology.holding_count == 2
    assert technology.total_quantity == 15
    assert technology.holding_ids == ("aapl", "msft")
    assert sum(item.total_investment for item in summaries) == total
    assert sum(item.percentage_of_portfolio for item in summaries).quantize(Decimal("0.01")) == Decimal("100.00")


def test_sector_with_only_zero_quantity_holdings_is_still_listed() -> None:
    holdings = [
        _holding("AAPL", "Technology", "150", 10),
        _holding("F", "Automotive", "12", 0),
    ]

    summaries = calculate_sector_summaries(holdings, Decimal("1500"))

    automotive = summaries[1]
    assert automotive.sector == "Automotive"
    assert automotive.total_investment == Decimal("0")
    assert automotive.percentage_of_portfolio == Decimal("0")


def test_empty_portfolio_reports_zeroes() -> None:
    summary = calculate_portfolio_summary([])

    assert summary.total_investment == Decimal("0")
    assert summary.total_gain_loss_percentage == Decimal("0")
    assert summary.sector_count == 0
    assert calculate_sector_summaries([], Decimal("0")) == []


def test_all_zero_quantities_give_zero_percentages() -> None:
    holdings = [_holding("AAPL", "Technology", "150", 0, current="200")]

    summary = calculate_portfolio_summary(holdings)
    sectors = calculate_sector_summaries(holdings, summary.total_investment)

    assert summary.total_gain_loss_percentage == Decimal("0")
    assert sectors[0].percentage_of_portfolio == Decimal("0")


def test_recalculation_is_idempotent() -> None:
    holdings = _scenario()

    assert calculate_portfolio_summary(holdings) == calculate_portfolio_summary(holdings)
    assert calculate_sector_summaries(holdings, Decimal("6000")) == calculate_sector_summaries(
        holdings, Decimal("6000")
    )


def test_group_by_sector_keeps_collection_order() -> None:
    groups = group_by_sector(_scenario())

    assert list(groups) == ["Technology", "Automotive"]
    assert [holding.ticker for holding in groups["Technology"]] == ["AAPL"]


def test_rank_performers_top_and_bottom() -> None:
    holdings = [
        _holding("AAA", "Technology", "100", 1, current="150"),
        _holding("BBB", "Technology", "100", 1, current="90"),
        _holding("CCC", "Technology", "100", 1, current="120"),
    ]

    board = rank_performers(holdings, limit=2)

    assert [entry.ticker for entry in board.top] == ["AAA", "CCC"]
    assert [entry.ticker for entry in board.bottom] == ["BBB", "CCC"]
    assert board.top[0].gain_loss_percentage == Decimal("50.00")
    assert board.bottom[0].gain_loss_percentage == Decimal("-10.00")


def test_rank_performers_handles_empty_and_disabled() -> None:
    assert rank_performers([]).top == ()
    assert rank_performers(_scenario(), limit=0).bottom == ()
