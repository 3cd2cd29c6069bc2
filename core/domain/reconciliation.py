"""Reconcile local edits with an externally supplied holdings snapshot.

A snapshot records the editor revision at the moment its fetch started. Any
local edit committed at a later revision is newer than the snapshot and wins
for that holding; everything else follows the snapshot.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from core.domain.holding import Holding


class ExternalSnapshot(BaseModel):
    holdings: tuple[Holding, ...]
    base_revision: int

    model_config = ConfigDict(frozen=True)


def reconcile(
    local: Sequence[Holding],
    edit_log: Mapping[str, int],
    snapshot: ExternalSnapshot,
) -> list[Holding]:
    """Merge ``snapshot`` into ``local`` given the revision of each local edit.

    ``edit_log`` maps holding id to the revision of its latest add, quantity
    commit or removal. Removed ids stay in the log so a stale snapshot cannot
    bring them back.
    """

    def _locally_newer(holding_id: str) -> bool:
        return edit_log.get(holding_id, -1) > snapshot.base_revision

    local_by_id = {holding.id: holding for holding in local}
    snapshot_ids = {holding.id for holding in snapshot.holdings}

    added = [
        holding
        for holding in local
        if holding.id not in snapshot_ids and _locally_newer(holding.id)
    ]
    added_tickers = {holding.ticker for holding in added}

    merged: list[Holding] = []
    for external in snapshot.holdings:
        if _locally_newer(external.id):
            current = local_by_id.get(external.id)
            if current is None:
                continue
            merged.append(current.with_market_data_from(external))
        elif external.ticker in added_tickers:
            continue
        else:
            merged.append(external)

    merged.extend(added)
    return merged


__all__ = ["ExternalSnapshot", "reconcile"]
