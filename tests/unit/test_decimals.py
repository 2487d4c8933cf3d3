"""Tests for fixed-point decimal helpers."""

from decimal import Decimal

from trade_analytics.core.decimals import (
    clamp,
    mean,
    percentage,
    quantize,
    safe_div,
    sample_std,
    sqrt,
    to_decimal,
)


class TestQuantize:
    def test_half_up(self):
        assert str(quantize(Decimal("1.23445"))) == "1.2345"
        assert str(quantize(Decimal("-1.23445"))) == "-1.2345"

    def test_custom_scale(self):
        assert str(quantize(Decimal("66.6666"), 2)) == "66.67"

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")


class TestDivision:
    def test_safe_div_zero_denominator(self):
        assert safe_div(Decimal(5), 0) == 0

    def test_safe_div(self):
        assert safe_div(Decimal(1), 3) == Decimal("0.3333")

    def test_percentage(self):
        assert percentage(2, 3, scale=2) == Decimal("66.67")
        assert percentage(1, 0) == 0


class TestAggregates:
    def test_mean_empty(self):
        assert mean([]) == 0

    def test_sample_std(self):
        assert sample_std([Decimal(2), Decimal(4), Decimal(4), Decimal(4),
                           Decimal(5), Decimal(5), Decimal(7), Decimal(9)]) == Decimal("2.1381")

    def test_sample_std_single_value(self):
        assert sample_std([Decimal(3)]) == 0

    def test_sqrt_non_positive(self):
        assert sqrt(Decimal(-4)) == 0

    def test_clamp(self):
        assert clamp(Decimal(120), Decimal(0), Decimal(100)) == Decimal(100)
        assert clamp(Decimal(-1), Decimal(0), Decimal(100)) == 0
