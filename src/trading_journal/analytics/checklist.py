"""Setup-checklist adherence scoring.

A trade taken under a setup template scores the share of the
template's *active* checklist items that were ticked.  Inactive items
count toward neither side.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .record import TradeRecord


@dataclass(frozen=True)
class ChecklistItem:
    item_id: str
    template_id: str
    is_active: bool = True


@dataclass(frozen=True)
class CriteriaCheck:
    trade_id: str
    item_id: str
    checked: bool


def adherence_pct(checked_active: int, total_active: int) -> float | None:
    """``checked / total × 100``; ``None`` without active items."""
    if total_active <= 0:
        return None
    return checked_active / total_active * 100


def checklist_scores(
    trades: Sequence[TradeRecord],
    items: Iterable[ChecklistItem],
    checks: Iterable[CriteriaCheck],
) -> dict[str, float | None]:
    """Adherence percent per trade id.

    ``None`` for trades with no template or whose template has no
    active items.
    """
    active = [i for i in items if i.is_active]
    active_per_template = Counter(i.template_id for i in active)
    template_of_item = {i.item_id: i.template_id for i in active}

    checked_per_trade: Counter[str] = Counter()
    for c in checks:
        if not c.checked or c.item_id not in template_of_item:
            continue
        checked_per_trade[c.trade_id] += 1

    scores: dict[str, float | None] = {}
    for t in trades:
        if not t.template_id:
            scores[t.trade_id] = None
            continue
        scores[t.trade_id] = adherence_pct(
            checked_per_trade[t.trade_id], active_per_template[t.template_id]
        )
    return scores
