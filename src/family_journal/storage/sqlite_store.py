from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from family_journal.errors import InvalidArgument
from family_journal.models import TradeRecord


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS members (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            member_name TEXT NOT NULL,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS trades (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            member_id INTEGER REFERENCES members(id),
            symbol TEXT NOT NULL,
            exchange TEXT,
            buy_date TEXT NOT NULL,
            buy_price TEXT NOT NULL,
            quantity INTEGER NOT NULL CHECK (quantity > 0),
            sell_date TEXT,
            sell_price TEXT,
            is_split INTEGER NOT NULL DEFAULT 0,
            split_ratio TEXT,
            notes TEXT,
            created_at TEXT NOT NULL
        )
        """
    )
    conn.execute("CREATE INDEX IF NOT EXISTS trades_member_sell_date ON trades (member_id, sell_date)")
    conn.commit()


def insert_member(conn: sqlite3.Connection, member_name: str, *, is_active: bool = True) -> int:
    cursor = conn.execute(
        "INSERT INTO members (member_name, is_active, created_at) VALUES (?, ?, ?)",
        (member_name, 1 if is_active else 0, _now_iso()),
    )
    conn.commit()
    return int(cursor.lastrowid)


def default_member_id(conn: sqlite3.Connection) -> int | None:
    row = conn.execute("SELECT id FROM members WHERE is_active = 1 ORDER BY id LIMIT 1").fetchone()
    return None if row is None else int(row[0])


def insert_trade(conn: sqlite3.Connection, trade: TradeRecord) -> int:
    """Store a validated record and return its id.

    ``trade.trade_id`` is ignored; the database assigns ids. A missing member
    falls back to the first active member; an unknown member is rejected.
    """
    member_id = trade.member_id
    if member_id is None:
        member_id = default_member_id(conn)
        if member_id is None:
            raise InvalidArgument("No active member to own the trade.")
    elif conn.execute("SELECT 1 FROM members WHERE id = ?", (member_id,)).fetchone() is None:
        raise InvalidArgument(f"Unknown member: {member_id}")
    cursor = conn.execute(
        """
        INSERT INTO trades (
            member_id, symbol, exchange, buy_date, buy_price, quantity,
            sell_date, sell_price, is_split, split_ratio, notes, created_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            member_id,
            trade.symbol,
            trade.exchange,
            trade.buy_date.isoformat(),
            str(trade.buy_price),
            trade.quantity,
            trade.sell_date.isoformat() if trade.sell_date else None,
            str(trade.sell_price) if trade.sell_price is not None else None,
            1 if trade.is_split else 0,
            str(trade.split_ratio) if trade.split_ratio is not None else None,
            trade.notes,
            _now_iso(),
        ),
    )
    conn.commit()
    return int(cursor.lastrowid)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
