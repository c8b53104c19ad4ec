from __future__ import annotations

import argparse
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

from family_journal.config.app_config import load_app_config
from family_journal.errors import AnalyticsError
from family_journal.metrics.filters import parse_date, parse_member_id
from family_journal.models import TradeRecord
from family_journal.storage.sqlite_store import connect, init_db, insert_member, insert_trade


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Record members and trades in the SQLite ledger.")
    parser.add_argument("--config", type=Path, default=None, help="Path to app.toml (default: config/app.toml).")
    parser.add_argument("--db", type=Path, default=None, help="SQLite ledger path (overrides config).")
    commands = parser.add_subparsers(dest="command", required=True)

    member_parser = commands.add_parser("add-member", help="Add a family member.")
    member_parser.add_argument("name", type=str)
    member_parser.add_argument("--inactive", action="store_true", help="Create the member as inactive.")

    trade_parser = commands.add_parser("add-trade", help="Add an open or closed trade.")
    trade_parser.add_argument("symbol", type=str)
    trade_parser.add_argument("--buy-date", required=True, help="Entry date (YYYY-MM-DD).")
    trade_parser.add_argument("--buy-price", required=True, help="Entry price per unit.")
    trade_parser.add_argument("--quantity", required=True, type=int, help="Units bought.")
    trade_parser.add_argument("--sell-date", default=None, help="Exit date (YYYY-MM-DD).")
    trade_parser.add_argument("--sell-price", default=None, help="Exit price per unit.")
    trade_parser.add_argument("--member", default=None, help="Member id (default: first active member).")
    trade_parser.add_argument("--exchange", default=None)
    trade_parser.add_argument(
        "--split-ratio",
        default=None,
        help="New shares per old share for a split between entry and exit.",
    )
    trade_parser.add_argument("--notes", default=None)
    args = parser.parse_args(argv)

    app_config = load_app_config(args.config)
    db_path = args.db or app_config.app.db_path
    conn = connect(db_path)
    try:
        init_db(conn)
        if args.command == "add-member":
            member_id = insert_member(conn, args.name, is_active=not args.inactive)
            print(f"Added member {member_id}: {args.name}")
            return 0

        split_ratio = _optional_decimal(args.split_ratio, "split ratio")
        trade = TradeRecord(
            trade_id=0,
            member_id=parse_member_id(args.member),
            symbol=args.symbol.strip().upper(),
            exchange=args.exchange,
            buy_date=_required_date(args.buy_date, "buy_date"),
            buy_price=_required_decimal(args.buy_price, "buy price"),
            quantity=args.quantity,
            sell_date=parse_date(args.sell_date, "sell_date"),
            sell_price=_optional_decimal(args.sell_price, "sell price"),
            is_split=split_ratio is not None,
            split_ratio=split_ratio,
            notes=args.notes,
        )
        trade_id = insert_trade(conn, trade)
    except AnalyticsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    finally:
        conn.close()

    state = "closed" if trade.is_closed else "open"
    print(f"Added {state} trade {trade_id}: {trade.symbol} x{trade.quantity}")
    return 0


def _required_date(value: str, field: str) -> date:
    parsed = parse_date(value, field)
    if parsed is None:
        raise SystemExit(f"Missing {field}.")
    return parsed


def _required_decimal(value: str, label: str) -> Decimal:
    parsed = _optional_decimal(value, label)
    if parsed is None:
        raise SystemExit(f"Missing {label}.")
    return parsed


def _optional_decimal(value: str | None, label: str) -> Decimal | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation as exc:
        raise SystemExit(f"Invalid {label}: {value!r}") from exc
    if not parsed.is_finite():
        raise SystemExit(f"Invalid {label}: {value!r}")
    return parsed


if __name__ == "__main__":
    raise SystemExit(main())
