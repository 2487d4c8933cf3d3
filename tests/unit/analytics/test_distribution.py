"""Tests for DistributionCalculator."""

from datetime import timedelta
from decimal import Decimal

import pytest

from trade_analytics.analytics.distribution import DistributionCalculator, DistributionMetrics
from trade_analytics.core.config import DistributionConfig
from trade_analytics.core.enums import DurationClass, PositionSizeClass
from trade_analytics.core.taxonomy import TaxonomyRegistry

from .conftest import T0, make_closed_trade, make_open_trade


class TestCalendarBuckets:

    def test_day_month_quarter_hour(self):
        trades = [
            make_closed_trade(100, 110, start=T0),                         # Mon Jan 10:00
            make_closed_trade(100, 90, start=T0 + timedelta(days=1)),      # Tue Jan
            make_closed_trade(100, 105, start=T0 + timedelta(days=120)),   # Apr
        ]
        dist = DistributionCalculator().calculate(trades)
        assert dist.by_day_of_week["MONDAY"].count == 1
        assert dist.by_day_of_week["TUESDAY"].total_profit_loss == Decimal("-100")
        assert dist.by_month["JANUARY"].count == 2
        assert dist.by_month["JANUARY"].win_rate == Decimal("50.00")
        assert dist.by_month["APRIL"].count == 1
        assert dist.by_quarter["Q1"].count == 2
        assert dist.by_quarter["Q2"].count == 1
        assert dist.by_hour_of_day[10].count == 3

    def test_only_non_empty_buckets_present(self):
        dist = DistributionCalculator().calculate([make_closed_trade()])
        assert list(dist.by_day_of_week) == ["MONDAY"]
        assert list(dist.by_quarter) == ["Q1"]

    def test_win_rate_two_decimals(self):
        trades = [
            make_closed_trade(100, 110),
            make_closed_trade(100, 110, start=T0 + timedelta(days=7)),
            make_closed_trade(100, 90, start=T0 + timedelta(days=14)),
        ]
        dist = DistributionCalculator().calculate(trades)
        assert dist.by_day_of_week["MONDAY"].win_rate == Decimal("66.67")


class TestContextBuckets:

    def test_asset_class_canonicalised(self):
        trades = [
            make_closed_trade(asset_class="etf"),
            make_closed_trade(asset_class="ETF", start=T0 + timedelta(days=1)),
        ]
        dist = DistributionCalculator().calculate(trades)
        assert list(dist.by_asset_class) == ["ETF"]
        assert dist.by_asset_class["ETF"].count == 2

    def test_missing_asset_class_excluded(self):
        dist = DistributionCalculator().calculate([make_closed_trade()])
        assert dist.by_asset_class == {}

    def test_custom_asset_class(self):
        dist = DistributionCalculator().calculate([make_closed_trade(asset_class="SPAC")])
        assert "SPAC" in dist.by_asset_class

    def test_custom_asset_class_disabled(self):
        calc = DistributionCalculator(registry=TaxonomyRegistry(allow_custom=False))
        dist = calc.calculate([make_closed_trade(asset_class="SPAC")])
        assert list(dist.by_asset_class) == ["UNKNOWN"]

    def test_strategy_defaults_to_unknown(self):
        trades = [
            make_closed_trade(strategy="breakout"),
            make_closed_trade(start=T0 + timedelta(days=1)),
        ]
        dist = DistributionCalculator().calculate(trades)
        assert dist.by_strategy["breakout"].count == 1
        assert dist.by_strategy["UNKNOWN"].count == 1


class TestDurationAndSize:

    @pytest.mark.parametrize("hold,expected", [
        (timedelta(minutes=30), DurationClass.INTRADAY_SHORT),
        (timedelta(hours=1), DurationClass.INTRADAY_LONG),
        (timedelta(hours=10), DurationClass.SINGLE_DAY),
        (timedelta(days=3), DurationClass.LESS_THAN_WEEK),
        (timedelta(days=10), DurationClass.LESS_THAN_MONTH),
        (timedelta(days=40), DurationClass.LONG_TERM),
    ])
    def test_duration_class(self, hold, expected):
        trade = make_closed_trade(hold=hold)
        assert DistributionCalculator().duration_class(trade) == expected

    def test_open_trade_has_no_duration(self):
        assert DistributionCalculator().duration_class(make_open_trade()) is None

    @pytest.mark.parametrize("quantity,expected", [
        (5, PositionSizeClass.MICRO),
        (10, PositionSizeClass.SMALL),
        (100, PositionSizeClass.MEDIUM),
        (300, PositionSizeClass.LARGE),
        (600, PositionSizeClass.EXTRA_LARGE),
    ])
    def test_position_size_class(self, quantity, expected):
        trade = make_closed_trade(100, 100, quantity)
        assert DistributionCalculator().position_size_class(trade) == expected

    def test_custom_thresholds(self):
        config = DistributionConfig(size_thresholds=[Decimal(1), Decimal(2), Decimal(3), Decimal(4)])
        trade = make_closed_trade(100, 100, 10)
        assert DistributionCalculator(config).position_size_class(trade) == PositionSizeClass.EXTRA_LARGE


class TestDistributionCalculator:

    def test_open_trades_excluded(self):
        dist = DistributionCalculator().calculate([make_open_trade()])
        assert dist == DistributionMetrics()

    def test_empty_input(self):
        assert DistributionCalculator().calculate([]) == DistributionMetrics()

    def test_to_dict_keys(self):
        d = DistributionCalculator().calculate([make_closed_trade()]).to_dict()
        assert d["by_duration"]["INTRADAY_LONG"]["count"] == 1
        assert d["by_position_size"]["SMALL"]["win_rate"] == "100.00"
        assert d["by_hour_of_day"]["10"]["total_profit_loss"] == "100.0000"
