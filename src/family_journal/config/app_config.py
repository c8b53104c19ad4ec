from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Mapping

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - Python <3.11
    import tomli as tomllib

from family_journal.metrics.growth import GROWTH_POLICIES, POLICY_PER_DATE
from family_journal.metrics.money import DEFAULT_MONEY_LIMIT
from family_journal.metrics.monthly import ORDER_ASC, ORDER_DESC

CONFIG_ENV_VAR = "FAMILY_JOURNAL_CONFIG"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class AppSettings:
    db_path: Path
    host: str
    port: int
    reload: bool


@dataclass(frozen=True)
class AnalyticsSettings:
    growth_policy: str
    monthly_order: str
    top_symbols_limit: int
    money_limit: Decimal


@dataclass(frozen=True)
class LoggingSettings:
    level: str


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    analytics: AnalyticsSettings
    logging: LoggingSettings


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    return Path(env.get(CONFIG_ENV_VAR, "config/app.toml"))


def load_app_config(path: Path | None = None) -> AppConfig:
    config_path = path or default_config_path()
    raw: Mapping[str, Any] = {}
    if config_path.exists():
        raw = tomllib.loads(config_path.read_text(encoding="utf-8"))

    app_raw = _section(raw, "app")
    analytics_raw = _section(raw, "analytics")
    logging_raw = _section(raw, "logging")

    app = AppSettings(
        db_path=Path(app_raw.get("db_path", "data/family_journal.sqlite")),
        host=str(app_raw.get("host", "127.0.0.1")),
        port=int(app_raw.get("port", 8000)),
        reload=bool(app_raw.get("reload", False)),
    )

    growth_policy = str(analytics_raw.get("growth_policy", POLICY_PER_DATE)).strip().lower()
    if growth_policy not in GROWTH_POLICIES:
        growth_policy = POLICY_PER_DATE

    monthly_order = str(analytics_raw.get("monthly_order", ORDER_DESC)).strip().lower()
    if monthly_order not in (ORDER_DESC, ORDER_ASC):
        monthly_order = ORDER_DESC

    analytics = AnalyticsSettings(
        growth_policy=growth_policy,
        monthly_order=monthly_order,
        top_symbols_limit=_positive_int(analytics_raw.get("top_symbols_limit"), 5),
        money_limit=_decimal_or_default(analytics_raw.get("money_limit"), DEFAULT_MONEY_LIMIT),
    )

    level = str(logging_raw.get("level", "INFO")).strip().upper()
    logging_settings = LoggingSettings(level=level if level in _LOG_LEVELS else "INFO")

    return AppConfig(app=app, analytics=analytics, logging=logging_settings)


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if isinstance(value, Mapping):
        return value
    return {}


def _positive_int(value: Any, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _decimal_or_default(value: Any, default: Decimal) -> Decimal:
    if value in (None, ""):
        return default
    try:
        parsed = Decimal(str(value))
    except InvalidOperation:
        return default
    if not parsed.is_finite() or parsed <= 0:
        return default
    return parsed
