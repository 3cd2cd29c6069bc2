from __future__ import annotations

from decimal import Decimal

from core.domain.holding import Holding
from core.domain.holding_set import HoldingSetEditor
from core.domain.reconciliation import ExternalSnapshot, reconcile


def _holding(ticker: str, quantity: int, current: str | None = None) -> Holding:
    return Holding(
        id=ticker.lower(),
        name=ticker,
        ticker=ticker,
        sector="Technology",
        purchase_price=Decimal("100"),
        quantity=quantity,
        current_price=Decimal(current) if current is not None else None,
    )


def _priced(holding: Holding, price: str) -> Holding:
    return holding.model_copy(update={"current_price": Decimal(price), "pe_ratio": Decimal("25")})


def test_snapshot_wins_without_local_edits() -> None:
    editor = HoldingSetEditor([_holding("AAPL", 10), _holding("MSFT", 5)])
    snapshot = ExternalSnapshot(
        holdings=tuple(_priced(holding, "120") for holding in editor.holdings),
        base_revision=editor.revision,
    )

    editor.reconcile(snapshot)

    assert [holding.current_price for holding in editor.holdings] == [Decimal("120"), Decimal("120")]


def test_local_quantity_commit_after_fetch_start_wins() -> None:
    editor = HoldingSetEditor([_holding("AAPL", 10), _holding("MSFT", 5)])
    base = editor.revision
    stale = tuple(_priced(holding, "130") for holding in editor.holdings)

    editor.set_quantity("aapl", 20)
    editor.reconcile(ExternalSnapshot(holdings=stale, base_revision=base))

    aapl = editor.get("aapl")
    assert aapl.quantity == 20
    assert aapl.current_price == Decimal("130")
    assert aapl.pe_ratio == Decimal("25")
    assert editor.portfolio_summary.total_investment == Decimal("2500")


def test_local_addition_after_fetch_start_survives() -> None:
    editor = HoldingSetEditor([_holding("AAPL", 10)])
    base = editor.revision
    stale = tuple(_priced(holding, "110") for holding in editor.holdings)

    editor.add(_holding("TSLA", 5))
    editor.reconcile(ExternalSnapshot(holdings=stale, base_revision=base))

    assert [holding.ticker for holding in editor.holdings] == ["AAPL", "TSLA"]


def test_local_removal_after_fetch_start_stays_removed() -> None:
    editor = HoldingSetEditor([_holding("AAPL", 10), _holding("MSFT", 5)])
    base = editor.revision
    stale = tuple(_priced(holding, "110") for holding in editor.holdings)

    editor.remove("msft")
    editor.reconcile(ExternalSnapshot(holdings=stale, base_revision=base))

    assert [holding.ticker for holding in editor.holdings] == ["AAPL"]


def test_edits_older_than_snapshot_follow_snapshot() -> None:
    editor = HoldingSetEditor([_holding("AAPL", 10)])
    editor.set_quantity("aapl", 15)
    snapshot = ExternalSnapshot(
        holdings=(_priced(_holding("AAPL", 12), "140"),),
        base_revision=editor.revision,
    )

    editor.reconcile(snapshot)

    assert editor.get("aapl").quantity == 12


def test_snapshot_entry_for_locally_added_ticker_is_suppressed() -> None:
    local = [_holding("AAPL", 10)]
    external = _holding("AAPL", 3).model_copy(update={"id": "remote"})

    merged = reconcile(local, {"aapl": 2}, ExternalSnapshot(holdings=(external,), base_revision=1))

    assert [holding.id for holding in merged] == ["aapl"]
