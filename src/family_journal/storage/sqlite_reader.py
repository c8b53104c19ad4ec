from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

from family_journal.metrics.filters import TradeFilter
from family_journal.metrics.money import to_decimal
from family_journal.models import Member, TradeRecord

logger = logging.getLogger(__name__)


def connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


class SqliteLedger:
    """Read side of the trade ledger backed by a SQLite file.

    Each call opens its own connection, so one instance can be shared
    across request handlers.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def load_trades(self, trade_filter: TradeFilter) -> list[TradeRecord]:
        if trade_filter.is_empty_range:
            return []
        clauses = ["sell_date IS NOT NULL", "sell_price IS NOT NULL"]
        params: list[Any] = []
        if trade_filter.member_id is not None:
            clauses.append("member_id = ?")
            params.append(trade_filter.member_id)
        if trade_filter.start_date is not None:
            clauses.append("substr(sell_date, 1, 10) >= ?")
            params.append(trade_filter.start_date.isoformat())
        if trade_filter.end_date is not None:
            clauses.append("substr(sell_date, 1, 10) <= ?")
            params.append(trade_filter.end_date.isoformat())
        return self._fetch_trades(clauses, params)

    def load_all_trades(self, member_id: int | None) -> list[TradeRecord]:
        clauses: list[str] = []
        params: list[Any] = []
        if member_id is not None:
            clauses.append("member_id = ?")
            params.append(member_id)
        return self._fetch_trades(clauses, params)

    def member_exists(self, member_id: int) -> bool:
        with closing(connect(self.db_path)) as conn:
            row = conn.execute("SELECT 1 FROM members WHERE id = ?", (member_id,)).fetchone()
        return row is not None

    def load_members(self) -> list[Member]:
        with closing(connect(self.db_path)) as conn:
            rows = conn.execute("SELECT id, member_name, is_active FROM members ORDER BY id").fetchall()
        return [
            Member(member_id=row["id"], member_name=row["member_name"], is_active=bool(row["is_active"]))
            for row in rows
        ]

    def _fetch_trades(self, clauses: list[str], params: list[Any]) -> list[TradeRecord]:
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        query = f"SELECT * FROM trades{where} ORDER BY id"
        with closing(connect(self.db_path)) as conn:
            rows = conn.execute(query, params).fetchall()
        logger.debug("Loaded %d trade rows from %s", len(rows), self.db_path)
        return [_trade_from_row(row) for row in rows]


def _trade_from_row(row: sqlite3.Row) -> TradeRecord:
    return TradeRecord(
        trade_id=row["id"],
        member_id=row["member_id"],
        symbol=row["symbol"],
        exchange=row["exchange"],
        buy_date=_parse_date(row["buy_date"]),
        buy_price=to_decimal(row["buy_price"]),
        quantity=int(row["quantity"]),
        sell_date=_parse_optional_date(row["sell_date"]),
        sell_price=_optional_decimal(row["sell_price"]),
        is_split=bool(row["is_split"]),
        split_ratio=_optional_decimal(row["split_ratio"]),
        notes=row["notes"],
    )


def _optional_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return to_decimal(value)


def _parse_optional_date(value: str | None) -> date | None:
    if not value:
        return None
    return _parse_date(value)


def _parse_date(value: str | None) -> date:
    if value is None:
        raise ValueError("Missing date")
    return date.fromisoformat(value[:10])
