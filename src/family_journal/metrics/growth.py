from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from family_journal.metrics.money import DEFAULT_MONEY_LIMIT, ZERO, money_add
from family_journal.metrics.positions import ClosedPosition

POLICY_PER_DATE = "per_date"
POLICY_PER_TRADE = "per_trade"
GROWTH_POLICIES = (POLICY_PER_DATE, POLICY_PER_TRADE)


@dataclass(frozen=True)
class GrowthPoint:
    date: date
    value: Decimal


def compute_capital_growth(
    positions: Iterable[ClosedPosition],
    *,
    policy: str = POLICY_PER_DATE,
    limit: Decimal = DEFAULT_MONEY_LIMIT,
) -> list[GrowthPoint]:
    """Prefix sum of realized profit in exit order, seeded at zero.

    Exits sort by date then trade id. Under ``per_date`` every exit on the
    same day folds into one point; ``per_trade`` emits a point per exit.
    """
    if policy not in GROWTH_POLICIES:
        raise ValueError(f"Unknown growth policy: {policy!r}")
    ordered = sorted(positions, key=lambda position: (position.exit_date, position.trade_id))

    points: list[GrowthPoint] = []
    value = ZERO
    for position in ordered:
        value = money_add(value, position.net_profit, limit)
        if policy == POLICY_PER_DATE and points and points[-1].date == position.exit_date:
            points[-1] = GrowthPoint(date=position.exit_date, value=value)
        else:
            points.append(GrowthPoint(date=position.exit_date, value=value))
    return points


def growth_payload(point: GrowthPoint) -> dict[str, str | float]:
    return {"date": point.date.isoformat(), "value": float(point.value)}
