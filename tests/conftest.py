"""Shared fixtures for the analytics tests.

The ``example_trades`` fixture is the two-trade scenario used throughout:
one winning January exit and one losing February exit for member 1.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from itertools import count
from pathlib import Path
from typing import Callable

import pytest

from family_journal.models import Member, TradeRecord
from family_journal.storage.ledger import InMemoryLedger
from family_journal.storage.sqlite_store import connect, init_db, insert_member, insert_trade

MEMBER_ID = 1
OTHER_MEMBER_ID = 2


@pytest.fixture
def make_trade() -> Callable[..., TradeRecord]:
    ids = count(1)

    def _make(
        symbol: str = "INFY",
        *,
        buy_price: str = "100",
        quantity: int = 10,
        sell_price: str | None = None,
        sell_date: str | None = None,
        buy_date: str = "2023-01-02",
        member_id: int | None = MEMBER_ID,
        trade_id: int | None = None,
        is_split: bool = False,
        split_ratio: str | None = None,
    ) -> TradeRecord:
        return TradeRecord(
            trade_id=trade_id if trade_id is not None else next(ids),
            member_id=member_id,
            symbol=symbol,
            exchange="NSE",
            buy_date=date.fromisoformat(buy_date),
            buy_price=Decimal(buy_price),
            quantity=quantity,
            sell_date=date.fromisoformat(sell_date) if sell_date else None,
            sell_price=Decimal(sell_price) if sell_price is not None else None,
            is_split=is_split,
            split_ratio=Decimal(split_ratio) if split_ratio is not None else None,
        )

    return _make


@pytest.fixture
def example_trades(make_trade) -> list[TradeRecord]:
    return [
        make_trade("TCS", buy_price="100", quantity=10, sell_price="120", sell_date="2024-01-15"),
        make_trade("HDFC", buy_price="50", quantity=4, sell_price="40", sell_date="2024-02-10"),
    ]


@pytest.fixture
def members() -> list[Member]:
    return [
        Member(member_id=MEMBER_ID, member_name="Asha"),
        Member(member_id=OTHER_MEMBER_ID, member_name="Ravi"),
    ]


@pytest.fixture
def example_ledger(example_trades, members) -> InMemoryLedger:
    return InMemoryLedger(example_trades, members)


@pytest.fixture
def sqlite_db(tmp_path: Path, make_trade) -> Path:
    """A ledger file with two members, three closed trades and one open trade."""
    db_path = tmp_path / "journal.sqlite"
    conn = connect(db_path)
    try:
        init_db(conn)
        first = insert_member(conn, "Asha")
        second = insert_member(conn, "Ravi")
        insert_trade(conn, make_trade("TCS", buy_price="100", quantity=10, sell_price="120", sell_date="2024-01-15", member_id=first))
        insert_trade(conn, make_trade("HDFC", buy_price="50", quantity=4, sell_price="40", sell_date="2024-02-10", member_id=first))
        insert_trade(conn, make_trade("TCS", buy_price="200", quantity=1, sell_price="250.50", sell_date="2024-02-20", member_id=second))
        insert_trade(conn, make_trade("WIPRO", buy_price="300", quantity=2, member_id=first))
    finally:
        conn.close()
    return db_path
