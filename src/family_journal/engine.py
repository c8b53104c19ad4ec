from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from family_journal.config.app_config import AnalyticsSettings
from family_journal.errors import InvalidArgument
from family_journal.metrics.filters import TradeFilter, apply_filter
from family_journal.metrics.growth import POLICY_PER_DATE, GrowthPoint, compute_capital_growth
from family_journal.metrics.money import DEFAULT_MONEY_LIMIT
from family_journal.metrics.monthly import ORDER_DESC, MonthlyBucket, compute_monthly_performance
from family_journal.metrics.positions import ClosedPosition, closed_positions
from family_journal.metrics.summary import PeriodSummary, compute_period_summary
from family_journal.metrics.symbols import SymbolRank, compute_symbol_breakdown
from family_journal.storage.ledger import TradeLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardSnapshot:
    summary: PeriodSummary
    monthly: list[MonthlyBucket]
    growth: list[GrowthPoint]


class AnalyticsEngine:
    """Binds the pure aggregators to a trade ledger.

    Nothing is cached between calls. Within one call the ledger is read once
    and every series is derived from that in-memory set, so totals agree even
    if the ledger changes underneath.
    """

    def __init__(
        self,
        ledger: TradeLedger,
        *,
        growth_policy: str = POLICY_PER_DATE,
        monthly_order: str = ORDER_DESC,
        money_limit: Decimal = DEFAULT_MONEY_LIMIT,
    ) -> None:
        self.ledger = ledger
        self.growth_policy = growth_policy
        self.monthly_order = monthly_order
        self.money_limit = money_limit

    @classmethod
    def from_settings(cls, ledger: TradeLedger, settings: AnalyticsSettings) -> "AnalyticsEngine":
        return cls(
            ledger,
            growth_policy=settings.growth_policy,
            monthly_order=settings.monthly_order,
            money_limit=settings.money_limit,
        )

    def monthly_performance(self, trade_filter: TradeFilter, *, order: str | None = None) -> list[MonthlyBucket]:
        positions = self._snapshot(trade_filter)
        return compute_monthly_performance(
            positions, order=order or self.monthly_order, limit=self.money_limit
        )

    def capital_growth(self, trade_filter: TradeFilter) -> list[GrowthPoint]:
        positions = self._snapshot(trade_filter)
        return compute_capital_growth(positions, policy=self.growth_policy, limit=self.money_limit)

    def top_symbols(self, member_id: int | None = None) -> list[SymbolRank]:
        self._check_member(member_id)
        trades = self.ledger.load_all_trades(member_id)
        positions = closed_positions(trades, self.money_limit)
        return compute_symbol_breakdown(positions, self.money_limit)

    def dashboard(self, trade_filter: TradeFilter) -> DashboardSnapshot:
        positions = self._snapshot(trade_filter)
        monthly = compute_monthly_performance(positions, order=self.monthly_order, limit=self.money_limit)
        growth = compute_capital_growth(positions, policy=self.growth_policy, limit=self.money_limit)
        summary = compute_period_summary(monthly, growth, self.money_limit)
        return DashboardSnapshot(summary=summary, monthly=monthly, growth=growth)

    def _snapshot(self, trade_filter: TradeFilter) -> list[ClosedPosition]:
        self._check_member(trade_filter.member_id)
        if trade_filter.is_empty_range:
            return []
        trades = apply_filter(self.ledger.load_trades(trade_filter), trade_filter)
        positions = closed_positions(trades, self.money_limit)
        logger.debug(
            "Snapshot member=%s start=%s end=%s: %d records, %d closed",
            trade_filter.member_id,
            trade_filter.start_date,
            trade_filter.end_date,
            len(trades),
            len(positions),
        )
        return positions

    def _check_member(self, member_id: int | None) -> None:
        if member_id is not None and not self.ledger.member_exists(member_id):
            raise InvalidArgument(f"Unknown member: {member_id}")
