from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from family_journal.errors import InvalidArgument
from family_journal.models import TradeRecord

RANGE_ALL = "ALL"
RANGE_CUSTOM = "CUSTOM"
_RELATIVE_RANGES = {"1Y": 12, "6M": 6, "3M": 3}
_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class TradeFilter:
    member_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None

    @property
    def is_empty_range(self) -> bool:
        return (
            self.start_date is not None
            and self.end_date is not None
            and self.start_date > self.end_date
        )

    @property
    def has_date_bounds(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    def member_only(self) -> "TradeFilter":
        return TradeFilter(member_id=self.member_id)


def parse_filter(
    member_id: str | int | None = None,
    start_date: str | date | None = None,
    end_date: str | date | None = None,
) -> TradeFilter:
    return TradeFilter(
        member_id=parse_member_id(member_id),
        start_date=parse_date(start_date, "start_date"),
        end_date=parse_date(end_date, "end_date"),
    )


def parse_member_id(value: str | int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidArgument(f"Invalid member_id: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError as exc:
        raise InvalidArgument(f"Invalid member_id: {value!r}") from exc


def parse_date(value: str | date | None, field: str = "date") -> date | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    if not _DATE_PATTERN.match(text):
        raise InvalidArgument(f"Invalid {field}: {value!r}; expected YYYY-MM-DD.")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidArgument(f"Invalid {field}: {value!r}; expected YYYY-MM-DD.") from exc


def matches_member(trade: TradeRecord, trade_filter: TradeFilter) -> bool:
    return trade_filter.member_id is None or trade.member_id == trade_filter.member_id


def matches_exit_window(trade: TradeRecord, trade_filter: TradeFilter) -> bool:
    if trade.sell_date is None:
        return False
    if trade_filter.start_date is not None and trade.sell_date < trade_filter.start_date:
        return False
    if trade_filter.end_date is not None and trade.sell_date > trade_filter.end_date:
        return False
    return True


def apply_filter(trades: Iterable[TradeRecord], trade_filter: TradeFilter) -> list[TradeRecord]:
    """Select the records a closed-position aggregate should see.

    Members are matched exactly and the exit date must fall inside the
    inclusive window. Open records have no exit date and never pass.
    An inverted window selects nothing.
    """
    if trade_filter.is_empty_range:
        return []
    return [
        trade
        for trade in trades
        if matches_member(trade, trade_filter) and matches_exit_window(trade, trade_filter)
    ]


def apply_member_scope(trades: Iterable[TradeRecord], member_id: int | None) -> list[TradeRecord]:
    return [trade for trade in trades if member_id is None or trade.member_id == member_id]


def resolve_time_range(
    preset: str | None,
    *,
    today: date,
    start_date: str | None = None,
    end_date: str | None = None,
) -> tuple[date | None, date | None]:
    """Turn a range preset into inclusive exit-date bounds.

    Explicit dates under ``ALL`` (or no preset) select ``CUSTOM``.
    """
    cleaned = (preset or "").strip().upper() or RANGE_ALL
    if cleaned == RANGE_ALL and ((start_date or "").strip() or (end_date or "").strip()):
        cleaned = RANGE_CUSTOM
    if cleaned == RANGE_ALL:
        return None, None
    if cleaned == RANGE_CUSTOM:
        return parse_date(start_date, "start_date"), parse_date(end_date, "end_date")
    if cleaned in _RELATIVE_RANGES:
        return _months_before(today, _RELATIVE_RANGES[cleaned]), None
    match = _MONTH_PATTERN.match(cleaned)
    if match:
        year = int(match.group(1))
        month = int(match.group(2))
        if not 1 <= month <= 12:
            raise InvalidArgument(f"Invalid month range: {preset!r}")
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last_day)
    raise InvalidArgument(f"Unknown time range: {preset!r}")


def _months_before(value: date, months: int) -> date:
    index = value.year * 12 + (value.month - 1) - months
    year, month_index = divmod(index, 12)
    month = month_index + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
