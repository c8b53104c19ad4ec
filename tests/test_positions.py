from __future__ import annotations

from dataclasses import asdict
from decimal import Decimal

import pytest

from family_journal.errors import InvalidTradeRecord
from family_journal.metrics.positions import (
    OUTCOME_FLAT,
    OUTCOME_LOSS,
    OUTCOME_WIN,
    close_position,
    closed_positions,
    split_adjusted,
)


class TestClassification:
    def test_open_trade_has_no_position(self, make_trade):
        assert close_position(make_trade()) is None

    def test_sell_price_without_date_stays_open(self, make_trade):
        trade = make_trade(sell_price="120")
        assert not trade.is_closed
        assert close_position(trade) is None

    def test_winning_trade(self, make_trade):
        position = close_position(make_trade(sell_price="120", sell_date="2024-01-15"))
        assert position is not None
        assert position.net_profit == Decimal("200")
        assert position.investment == Decimal("1000")
        assert position.outcome == OUTCOME_WIN
        assert position.month == "2024-01"

    def test_losing_trade(self, make_trade):
        position = close_position(make_trade(buy_price="50", quantity=4, sell_price="40", sell_date="2024-02-10"))
        assert position.net_profit == Decimal("-40")
        assert position.outcome == OUTCOME_LOSS

    def test_breakeven_is_flat(self, make_trade):
        position = close_position(make_trade(sell_price="100", sell_date="2024-01-15"))
        assert position.net_profit == Decimal("0")
        assert position.outcome == OUTCOME_FLAT

    def test_fractional_prices_keep_cents(self, make_trade):
        position = close_position(
            make_trade(buy_price="10.05", quantity=3, sell_price="10.10", sell_date="2024-03-01")
        )
        assert position.net_profit == Decimal("0.15")
        assert position.investment == Decimal("30.15")

    def test_closed_positions_drops_open_records(self, make_trade):
        trades = [make_trade(), make_trade(sell_price="110", sell_date="2024-01-20")]
        positions = closed_positions(trades)
        assert [position.trade_id for position in positions] == [trades[1].trade_id]


class TestSplitAdjustment:
    def test_unflagged_trade_is_unchanged(self, make_trade):
        effective = split_adjusted(make_trade(split_ratio="2"))
        assert effective.quantity == Decimal("10")
        assert effective.buy_price == Decimal("100")

    def test_flag_without_ratio_was_normalized_at_entry(self, make_trade):
        effective = split_adjusted(make_trade(is_split=True))
        assert effective.quantity == Decimal("10")
        assert effective.buy_price == Decimal("100")

    def test_two_for_one_split(self, make_trade):
        trade = make_trade(buy_price="100", quantity=10, sell_price="60", sell_date="2024-05-01", is_split=True, split_ratio="2")
        position = close_position(trade)
        assert position.effective_quantity == Decimal("20")
        assert position.effective_buy_price == Decimal("50")
        assert position.investment == Decimal("1000")
        assert position.net_profit == Decimal("200")

    @pytest.mark.parametrize(
        ("buy_price", "split_ratio", "sell_price", "quantity", "investment", "net_profit"),
        [
            ("100", "3", "40", "30", "1000", "200"),
            ("90", "1.5", "70", "15", "900", "150"),
            ("33.33", "3", "11.20", "30", "333.30", "2.70"),
        ],
    )
    def test_uneven_ratios_stay_exact(
        self, make_trade, buy_price, split_ratio, sell_price, quantity, investment, net_profit
    ):
        trade = make_trade(
            buy_price=buy_price,
            quantity=10,
            sell_price=sell_price,
            sell_date="2024-05-01",
            is_split=True,
            split_ratio=split_ratio,
        )
        position = close_position(trade)
        assert position.effective_quantity == Decimal(quantity)
        assert position.investment == Decimal(investment)
        assert position.net_profit == Decimal(net_profit)
        assert position.net_profit.as_tuple().exponent >= -2

    def test_stored_record_is_not_rewritten(self, make_trade):
        trade = make_trade(sell_price="60", sell_date="2024-05-01", is_split=True, split_ratio="2")
        before = asdict(trade)
        close_position(trade)
        close_position(trade)
        assert asdict(trade) == before


class TestRecordInvariants:
    def test_quantity_must_be_positive(self, make_trade):
        with pytest.raises(InvalidTradeRecord):
            make_trade(quantity=0)

    def test_sell_date_requires_price(self, make_trade):
        with pytest.raises(InvalidTradeRecord):
            make_trade(sell_date="2024-02-01")

    def test_sell_date_not_before_buy_date(self, make_trade):
        with pytest.raises(InvalidTradeRecord):
            make_trade(buy_date="2024-02-01", sell_price="110", sell_date="2024-01-31")

    def test_split_ratio_must_be_positive(self, make_trade):
        with pytest.raises(InvalidTradeRecord):
            make_trade(is_split=True, split_ratio="0")
