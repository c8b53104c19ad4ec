from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

from family_journal.config.app_config import load_app_config
from family_journal.engine import AnalyticsEngine, DashboardSnapshot
from family_journal.errors import AnalyticsError
from family_journal.metrics.filters import TradeFilter, parse_member_id, resolve_time_range
from family_journal.metrics.growth import growth_payload
from family_journal.metrics.monthly import bucket_payload
from family_journal.metrics.summary import summary_payload
from family_journal.metrics.symbols import SymbolRank, rank_symbols, symbol_payload
from family_journal.storage.sqlite_reader import SqliteLedger


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Report realized trading performance from the journal ledger.")
    parser.add_argument("--config", type=Path, default=None, help="Path to app.toml (default: config/app.toml).")
    parser.add_argument("--db", type=Path, default=None, help="SQLite ledger path (overrides config).")
    parser.add_argument("--member", type=str, default=None, help="Member id to scope the report to.")
    parser.add_argument(
        "--range",
        dest="time_range",
        type=str,
        default="ALL",
        help="ALL, 1Y, 6M, 3M, CUSTOM or a YYYY-MM month.",
    )
    parser.add_argument("--start", type=str, default=None, help="Start date (YYYY-MM-DD) for --range CUSTOM.")
    parser.add_argument("--end", type=str, default=None, help="End date (YYYY-MM-DD) for --range CUSTOM.")
    parser.add_argument("--top", type=int, default=None, help="Number of top symbols to show.")
    parser.add_argument("--json", action="store_true", help="Print JSON output.")
    parser.add_argument("--out", type=Path, default=None, help="Write output to a file instead of stdout.")
    args = parser.parse_args(argv)

    app_config = load_app_config(args.config)
    logging.basicConfig(level=app_config.logging.level, stream=sys.stderr)

    db_path = args.db or app_config.app.db_path
    if not db_path.exists():
        raise SystemExit(f"DB not found: {db_path}")

    engine = AnalyticsEngine.from_settings(SqliteLedger(db_path), app_config.analytics)
    try:
        start_date, end_date = resolve_time_range(
            args.time_range, today=date.today(), start_date=args.start, end_date=args.end
        )
        trade_filter = TradeFilter(
            member_id=parse_member_id(args.member),
            start_date=start_date,
            end_date=end_date,
        )
        snapshot = engine.dashboard(trade_filter)
        ranks = rank_symbols(
            engine.top_symbols(trade_filter.member_id),
            args.top or app_config.analytics.top_symbols_limit,
        )
    except AnalyticsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if not snapshot.monthly:
        print("No closed trades in the selected period.", file=sys.stderr)

    if args.json or (args.out is not None and args.out.suffix.lower() == ".json"):
        payload = {
            "filters": {
                "member_id": trade_filter.member_id,
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
            },
            "summary": summary_payload(snapshot.summary),
            "monthly": [bucket_payload(bucket) for bucket in snapshot.monthly],
            "growth": [growth_payload(point) for point in snapshot.growth],
            "top_symbols": [symbol_payload(rank) for rank in ranks],
        }
        text = json.dumps(payload, indent=2, sort_keys=True)
    else:
        text = _format_report(snapshot, ranks)

    if args.out is None:
        print(text)
    else:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(text + "\n", encoding="utf-8")

    return 0


def _format_report(snapshot: DashboardSnapshot, ranks: list[SymbolRank]) -> str:
    summary = snapshot.summary
    lines = [
        f"total_trades {summary.total_trades}",
        f"winning_trades {summary.winning_trades}",
        f"losing_trades {summary.losing_trades}",
        f"win_rate {summary.win_rate:.1f}",
        f"total_investment {summary.total_investment:.2f}",
        f"net_profit {summary.net_profit:.2f}",
        f"roi {summary.roi:.2f}",
        f"current_capital {summary.current_capital:.2f}",
        "",
        "month trades wins losses investment net_profit roi",
    ]
    for bucket in snapshot.monthly:
        lines.append(
            f"{bucket.month} {bucket.total_trades} {bucket.winning_trades} {bucket.losing_trades} "
            f"{bucket.total_investment:.2f} {bucket.net_profit:.2f} {bucket.roi:.2f}"
        )
    lines.append("")
    lines.append("date capital")
    for point in snapshot.growth:
        lines.append(f"{point.date.isoformat()} {point.value:.2f}")
    lines.append("")
    lines.append("symbol trades avg_profit total_profit")
    for rank in ranks:
        lines.append(f"{rank.symbol} {rank.trade_count} {rank.avg_profit:.2f} {rank.total_profit:.2f}")
    return "\n".join(lines)


if __name__ == "__main__":
    raise SystemExit(main())
