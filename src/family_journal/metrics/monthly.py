from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from family_journal.metrics.money import DEFAULT_MONEY_LIMIT, ZERO, money_add, percent_of
from family_journal.metrics.positions import OUTCOME_LOSS, OUTCOME_WIN, ClosedPosition

ORDER_DESC = "desc"
ORDER_ASC = "asc"


@dataclass(frozen=True)
class MonthlyBucket:
    month: str
    total_trades: int
    winning_trades: int
    losing_trades: int
    total_investment: Decimal
    net_profit: Decimal

    @property
    def roi(self) -> Decimal:
        return compute_roi(self.net_profit, self.total_investment)


def compute_roi(net_profit: Decimal, total_investment: Decimal) -> Decimal:
    """ROI percent from summed totals; 0 when nothing was invested."""
    return percent_of(net_profit, total_investment)


def compute_monthly_performance(
    positions: Iterable[ClosedPosition],
    *,
    order: str = ORDER_DESC,
    limit: Decimal = DEFAULT_MONEY_LIMIT,
) -> list[MonthlyBucket]:
    if order not in (ORDER_DESC, ORDER_ASC):
        raise ValueError(f"Unknown month order: {order!r}")

    counts: dict[str, list[int]] = {}
    investment: dict[str, Decimal] = {}
    profit: dict[str, Decimal] = {}
    for position in positions:
        month = position.month
        tally = counts.setdefault(month, [0, 0, 0])
        tally[0] += 1
        if position.outcome == OUTCOME_WIN:
            tally[1] += 1
        elif position.outcome == OUTCOME_LOSS:
            tally[2] += 1
        investment[month] = money_add(investment.get(month, ZERO), position.investment, limit)
        profit[month] = money_add(profit.get(month, ZERO), position.net_profit, limit)

    buckets = [
        MonthlyBucket(
            month=month,
            total_trades=tally[0],
            winning_trades=tally[1],
            losing_trades=tally[2],
            total_investment=investment[month],
            net_profit=profit[month],
        )
        for month, tally in counts.items()
    ]
    buckets.sort(key=lambda bucket: bucket.month, reverse=order == ORDER_DESC)
    return buckets


def bucket_payload(bucket: MonthlyBucket) -> dict[str, str | int | float]:
    return {
        "month": bucket.month,
        "total_trades": bucket.total_trades,
        "winning_trades": bucket.winning_trades,
        "losing_trades": bucket.losing_trades,
        "total_investment": float(bucket.total_investment),
        "net_profit": float(bucket.net_profit),
        "roi": float(bucket.roi),
    }
