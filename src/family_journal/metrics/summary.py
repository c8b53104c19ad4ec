from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from family_journal.metrics.growth import GrowthPoint
from family_journal.metrics.money import DEFAULT_MONEY_LIMIT, ZERO, money_sum, percent_of
from family_journal.metrics.monthly import MonthlyBucket, compute_roi


@dataclass(frozen=True)
class PeriodSummary:
    total_trades: int
    winning_trades: int
    losing_trades: int
    total_investment: Decimal
    net_profit: Decimal
    current_capital: Decimal

    @property
    def roi(self) -> Decimal:
        return compute_roi(self.net_profit, self.total_investment)

    @property
    def win_rate(self) -> Decimal:
        return percent_of(Decimal(self.winning_trades), Decimal(self.total_trades))


def compute_period_summary(
    buckets: Iterable[MonthlyBucket],
    growth: list[GrowthPoint],
    limit: Decimal = DEFAULT_MONEY_LIMIT,
) -> PeriodSummary:
    bucket_list = list(buckets)
    return PeriodSummary(
        total_trades=sum(bucket.total_trades for bucket in bucket_list),
        winning_trades=sum(bucket.winning_trades for bucket in bucket_list),
        losing_trades=sum(bucket.losing_trades for bucket in bucket_list),
        total_investment=money_sum((bucket.total_investment for bucket in bucket_list), limit),
        net_profit=money_sum((bucket.net_profit for bucket in bucket_list), limit),
        current_capital=growth[-1].value if growth else ZERO,
    )


def summary_payload(summary: PeriodSummary) -> dict[str, int | float]:
    return {
        "total_trades": summary.total_trades,
        "winning_trades": summary.winning_trades,
        "losing_trades": summary.losing_trades,
        "total_investment": float(summary.total_investment),
        "net_profit": float(summary.net_profit),
        "roi": float(summary.roi),
        "win_rate": float(summary.win_rate),
        "current_capital": float(summary.current_capital),
    }
