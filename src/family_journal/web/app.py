from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from datetime import date
from typing import Any, AsyncIterator, Iterator

from fastapi import FastAPI, HTTPException, Request

from family_journal.config.app_config import AppConfig, load_app_config
from family_journal.engine import AnalyticsEngine
from family_journal.errors import AnalyticsError, InvalidArgument
from family_journal.metrics.filters import TradeFilter, parse_filter, parse_member_id, resolve_time_range
from family_journal.metrics.growth import growth_payload
from family_journal.metrics.monthly import ORDER_ASC, ORDER_DESC, bucket_payload
from family_journal.metrics.summary import summary_payload
from family_journal.metrics.symbols import rank_symbols, symbol_payload
from family_journal.storage.sqlite_reader import SqliteLedger

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
    app_config = load_app_config()
    logger.info("Serving analytics from %s", app_config.app.db_path)
    yield


app = FastAPI(title="Family Trade Journal", lifespan=_lifespan)


@app.get("/api/health")
def health_api() -> dict[str, Any]:
    app_config = load_app_config()
    return {"status": "ok", "db_exists": app_config.app.db_path.exists()}


@app.get("/api/analytics/monthly-performance")
def monthly_performance_api(request: Request) -> list[dict[str, Any]]:
    app_config = load_app_config()
    engine = _engine(app_config)
    params = request.query_params
    order = (params.get("order") or app_config.analytics.monthly_order).strip().lower()
    if order not in (ORDER_DESC, ORDER_ASC):
        raise HTTPException(status_code=400, detail=f"Unknown order: {order!r}")
    with _analytics_errors():
        buckets = engine.monthly_performance(_request_filter(request), order=order)
    return [bucket_payload(bucket) for bucket in buckets]


@app.get("/api/analytics/capital-growth")
def capital_growth_api(request: Request) -> list[dict[str, Any]]:
    engine = _engine(load_app_config())
    with _analytics_errors():
        points = engine.capital_growth(_request_filter(request))
    return [growth_payload(point) for point in points]


@app.get("/api/analytics/top-symbols")
def top_symbols_api(request: Request) -> list[dict[str, Any]]:
    app_config = load_app_config()
    engine = _engine(app_config)
    params = request.query_params
    with _analytics_errors():
        member_id = parse_member_id(params.get("member_id"))
        limit = _parse_limit(params.get("limit"), app_config.analytics.top_symbols_limit)
        ranks = engine.top_symbols(member_id)
    return [symbol_payload(rank) for rank in rank_symbols(ranks, limit)]


@app.get("/api/analytics/summary")
def summary_api(request: Request) -> dict[str, Any]:
    app_config = load_app_config()
    engine = _engine(app_config)
    params = request.query_params
    with _analytics_errors():
        start_date, end_date = resolve_time_range(
            params.get("range"),
            today=date.today(),
            start_date=params.get("start_date"),
            end_date=params.get("end_date"),
        )
        trade_filter = TradeFilter(
            member_id=parse_member_id(params.get("member_id")),
            start_date=start_date,
            end_date=end_date,
        )
        snapshot = engine.dashboard(trade_filter)
        ranks = engine.top_symbols(trade_filter.member_id)
    return {
        "filters": {
            "member_id": trade_filter.member_id,
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
        },
        "summary": summary_payload(snapshot.summary),
        "monthly": [bucket_payload(bucket) for bucket in snapshot.monthly],
        "growth": [growth_payload(point) for point in snapshot.growth],
        "top_symbols": [
            symbol_payload(rank)
            for rank in rank_symbols(ranks, app_config.analytics.top_symbols_limit)
        ],
    }


def _engine(app_config: AppConfig) -> AnalyticsEngine:
    db_path = app_config.app.db_path
    if not db_path.exists():
        raise HTTPException(status_code=404, detail="Database not found.")
    return AnalyticsEngine.from_settings(SqliteLedger(db_path), app_config.analytics)


def _request_filter(request: Request) -> TradeFilter:
    params = request.query_params
    return parse_filter(
        member_id=params.get("member_id"),
        start_date=params.get("start_date"),
        end_date=params.get("end_date"),
    )


def _parse_limit(value: str | None, default: int) -> int | None:
    if value is None or not value.strip():
        return default
    cleaned = value.strip().lower()
    if cleaned == "all":
        return None
    try:
        parsed = int(cleaned)
    except ValueError as exc:
        raise InvalidArgument(f"Invalid limit: {value!r}") from exc
    if parsed <= 0:
        raise InvalidArgument(f"Invalid limit: {value!r}")
    return parsed


@contextmanager
def _analytics_errors() -> Iterator[None]:
    try:
        yield
    except InvalidArgument as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except AnalyticsError as exc:
        logger.error("Analytics request failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def main() -> None:
    import uvicorn

    app_config = load_app_config()
    logging.basicConfig(level=app_config.logging.level)
    uvicorn.run(
        "family_journal.web.app:app",
        host=app_config.app.host,
        port=app_config.app.port,
        reload=app_config.app.reload,
    )


if __name__ == "__main__":
    main()
