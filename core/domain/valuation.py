"""Per-holding valuation.

Every function takes an optional ``quantity`` override so an uncommitted edit
can be valued with exactly the same code path as committed state. Percentages
with a zero denominator are reported as ``0``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from core.domain.errors import DivisionDegenerate, InvalidQuantityError
from core.domain.holding import Holding
from core.domain.summaries import ZERO, HoldingMetrics, TableRow

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _quantity(holding: Holding, quantity: int | None) -> int:
    return holding.quantity if quantity is None else quantity


def _ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == 0:
        raise DivisionDegenerate(f"{numerator} / 0")
    return numerator / denominator


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """``part / whole * 100``, or ``0`` when ``whole`` is zero."""
    try:
        return _ratio(part, whole) * HUNDRED
    except DivisionDegenerate:
        return ZERO


def investment(holding: Holding, quantity: int | None = None) -> Decimal:
    return holding.purchase_price * _quantity(holding, quantity)


def present_value(holding: Holding, quantity: int | None = None) -> Decimal:
    return holding.current_price * _quantity(holding, quantity)


def gain_loss(holding: Holding, quantity: int | None = None) -> Decimal:
    qty = _quantity(holding, quantity)
    return present_value(holding, qty) - investment(holding, qty)


def gain_loss_percentage(holding: Holding, quantity: int | None = None) -> Decimal:
    qty = _quantity(holding, quantity)
    return percentage(gain_loss(holding, qty), investment(holding, qty))


def portfolio_percentage(holding: Holding, total_investment: Decimal, quantity: int | None = None) -> Decimal:
    return percentage(investment(holding, quantity), total_investment)


def holding_metrics(
    holding: Holding,
    total_investment: Decimal,
    quantity: int | None = None,
) -> HoldingMetrics:
    qty = _quantity(holding, quantity)
    cost = investment(holding, qty)
    value = present_value(holding, qty)
    change = value - cost
    return HoldingMetrics(
        holding_id=holding.id,
        ticker=holding.ticker,
        sector=holding.sector,
        effective_quantity=qty,
        investment=cost,
        present_value=value,
        gain_loss=change,
        gain_loss_percentage=percentage(change, cost),
        portfolio_percentage=percentage(cost, total_investment),
        pending=quantity is not None and quantity != holding.quantity,
    )


def parse_quantity(value: Any) -> int:
    """Validate a user supplied quantity.

    Accepts ints, integral Decimals/floats and strings holding a whole number.
    Raises InvalidQuantityError for anything negative, fractional or non-numeric.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidQuantityError(value)
    if isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, (Decimal, float, str)):
        try:
            number = Decimal(value.strip() if isinstance(value, str) else str(value))
        except InvalidOperation as exc:
            raise InvalidQuantityError(value) from exc
    else:
        raise InvalidQuantityError(value)

    if not number.is_finite() or number < 0 or number != number.to_integral_value():
        raise InvalidQuantityError(value)
    return int(number)


def effective_quantity(
    row: TableRow,
    pending: Mapping[str, int],
    holdings: Mapping[str, Holding],
) -> int:
    """Quantity a table row should be valued with, pending edits included."""
    if row.kind == "holding":
        return pending.get(row.holding.id, row.holding.quantity)
    total = 0
    for holding_id in row.summary.holding_ids:
        holding = holdings.get(holding_id)
        if holding is None:
            logger.debug("Sector %s references unknown holding %s", row.summary.sector, holding_id)
            continue
        total += pending.get(holding_id, holding.quantity)
    return total


__all__ = [
    "effective_quantity",
    "gain_loss",
    "gain_loss_percentage",
    "holding_metrics",
    "investment",
    "parse_quantity",
    "percentage",
    "portfolio_percentage",
    "present_value",
]
