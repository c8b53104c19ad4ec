from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from family_journal.metrics.money import DEFAULT_MONEY_LIMIT, ZERO, money_add, ratio
from family_journal.metrics.positions import ClosedPosition


@dataclass(frozen=True)
class SymbolRank:
    symbol: str
    trade_count: int
    total_profit: Decimal

    @property
    def avg_profit(self) -> Decimal:
        return ratio(self.total_profit, Decimal(self.trade_count))


def compute_symbol_breakdown(
    positions: Iterable[ClosedPosition], limit: Decimal = DEFAULT_MONEY_LIMIT
) -> list[SymbolRank]:
    counts: dict[str, int] = {}
    totals: dict[str, Decimal] = {}
    for position in positions:
        counts[position.symbol] = counts.get(position.symbol, 0) + 1
        totals[position.symbol] = money_add(totals.get(position.symbol, ZERO), position.net_profit, limit)

    return [
        SymbolRank(symbol=symbol, trade_count=counts[symbol], total_profit=totals[symbol])
        for symbol in sorted(counts)
    ]


def rank_symbols(ranks: Iterable[SymbolRank], limit: int | None = None) -> list[SymbolRank]:
    ordered = sorted(ranks, key=lambda rank: (-rank.total_profit, rank.symbol))
    if limit is None or limit <= 0:
        return ordered
    return ordered[:limit]


def symbol_payload(rank: SymbolRank) -> dict[str, str | int | float]:
    return {
        "symbol": rank.symbol,
        "trade_count": rank.trade_count,
        "avg_profit": float(rank.avg_profit),
        "total_profit": float(rank.total_profit),
    }
