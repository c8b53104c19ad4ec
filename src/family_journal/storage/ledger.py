from __future__ import annotations

from typing import Iterable, Protocol

from family_journal.metrics.filters import TradeFilter, apply_filter, apply_member_scope
from family_journal.models import Member, TradeRecord


class TradeLedger(Protocol):
    def load_trades(self, trade_filter: TradeFilter) -> list[TradeRecord]:
        """Closed-position candidates for a member and exit-date window."""
        ...

    def load_all_trades(self, member_id: int | None) -> list[TradeRecord]:
        ...

    def member_exists(self, member_id: int) -> bool:
        ...


class InMemoryLedger:
    def __init__(self, trades: Iterable[TradeRecord] = (), members: Iterable[Member] = ()) -> None:
        self._trades = list(trades)
        self._members = {member.member_id: member for member in members}

    def add_member(self, member: Member) -> None:
        self._members[member.member_id] = member

    def add_trade(self, trade: TradeRecord) -> None:
        self._trades.append(trade)

    def load_trades(self, trade_filter: TradeFilter) -> list[TradeRecord]:
        return apply_filter(self._trades, trade_filter)

    def load_all_trades(self, member_id: int | None) -> list[TradeRecord]:
        return apply_member_scope(self._trades, member_id)

    def member_exists(self, member_id: int) -> bool:
        if not self._members:
            return any(trade.member_id == member_id for trade in self._trades)
        return member_id in self._members
