from __future__ import annotations


class AnalyticsError(ValueError):
    """Base class for analytics failures surfaced to callers."""


class InvalidArgument(AnalyticsError):
    pass


class InvalidTradeRecord(AnalyticsError):
    pass


class ArithmeticOverflow(AnalyticsError):
    pass
