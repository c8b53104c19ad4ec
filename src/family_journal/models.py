from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from family_journal.errors import InvalidTradeRecord


@dataclass(frozen=True)
class Member:
    member_id: int
    member_name: str
    is_active: bool = True


@dataclass(frozen=True)
class TradeRecord:
    trade_id: int
    member_id: int | None
    symbol: str
    buy_date: date
    buy_price: Decimal
    quantity: int
    exchange: str | None = None
    sell_date: date | None = None
    sell_price: Decimal | None = None
    is_split: bool = False
    split_ratio: Decimal | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        validate_trade(self)

    @property
    def is_closed(self) -> bool:
        return self.sell_date is not None and self.sell_price is not None


def validate_trade(trade: TradeRecord) -> None:
    if trade.quantity <= 0:
        raise InvalidTradeRecord(f"Trade {trade.trade_id}: quantity must be positive, got {trade.quantity}.")
    if trade.sell_date is not None and trade.sell_price is None:
        raise InvalidTradeRecord(f"Trade {trade.trade_id}: sell_date recorded without sell_price.")
    if trade.sell_date is not None and trade.sell_date < trade.buy_date:
        raise InvalidTradeRecord(
            f"Trade {trade.trade_id}: sell_date {trade.sell_date.isoformat()} "
            f"precedes buy_date {trade.buy_date.isoformat()}."
        )
    if trade.split_ratio is not None and trade.split_ratio <= 0:
        raise InvalidTradeRecord(f"Trade {trade.trade_id}: split_ratio must be positive.")
