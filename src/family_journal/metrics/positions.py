from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from family_journal.metrics.money import DEFAULT_MONEY_LIMIT, ZERO, money_add, money_mul, ratio
from family_journal.models import TradeRecord

Outcome = str

OUTCOME_WIN: Outcome = "win"
OUTCOME_LOSS: Outcome = "loss"
OUTCOME_FLAT: Outcome = "flat"

_ONE = Decimal("1")


@dataclass(frozen=True)
class EffectivePosition:
    quantity: Decimal
    buy_price: Decimal


@dataclass(frozen=True)
class ClosedPosition:
    trade_id: int
    member_id: int | None
    symbol: str
    exit_date: date
    effective_quantity: Decimal
    effective_buy_price: Decimal
    sell_price: Decimal
    investment: Decimal
    net_profit: Decimal
    outcome: Outcome

    @property
    def month(self) -> str:
        return self.exit_date.strftime("%Y-%m")


def split_adjusted(trade: TradeRecord) -> EffectivePosition:
    """Effective quantity and entry price for a record, stored fields untouched.

    The exit price is recorded after the split, so only the entry side is
    rescaled. A flagged record without a ratio was normalized at entry time.
    The rescaled entry price is rounded when the ratio does not divide it;
    ``close_position`` never derives money amounts from it.
    """
    quantity = Decimal(trade.quantity)
    if not trade.is_split or trade.split_ratio is None or trade.split_ratio == _ONE:
        return EffectivePosition(quantity=quantity, buy_price=trade.buy_price)
    return EffectivePosition(
        quantity=quantity * trade.split_ratio,
        buy_price=ratio(trade.buy_price, trade.split_ratio),
    )


def classify_outcome(net_profit: Decimal) -> Outcome:
    if net_profit > ZERO:
        return OUTCOME_WIN
    if net_profit < ZERO:
        return OUTCOME_LOSS
    return OUTCOME_FLAT


def close_position(trade: TradeRecord, limit: Decimal = DEFAULT_MONEY_LIMIT) -> ClosedPosition | None:
    sell_date = trade.sell_date
    sell_price = trade.sell_price
    if sell_date is None or sell_price is None:
        return None
    effective = split_adjusted(trade)
    # A split does not change the cost basis; both legs stay division-free.
    investment = money_mul(trade.buy_price, Decimal(trade.quantity), limit)
    proceeds = money_mul(sell_price, effective.quantity, limit)
    net_profit = money_add(proceeds, -investment, limit)
    return ClosedPosition(
        trade_id=trade.trade_id,
        member_id=trade.member_id,
        symbol=trade.symbol,
        exit_date=sell_date,
        effective_quantity=effective.quantity,
        effective_buy_price=effective.buy_price,
        sell_price=sell_price,
        investment=investment,
        net_profit=net_profit,
        outcome=classify_outcome(net_profit),
    )


def closed_positions(
    trades: Iterable[TradeRecord], limit: Decimal = DEFAULT_MONEY_LIMIT
) -> list[ClosedPosition]:
    positions: list[ClosedPosition] = []
    for trade in trades:
        position = close_position(trade, limit)
        if position is not None:
            positions.append(position)
    return positions
