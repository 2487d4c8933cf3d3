"""Tests for TimingCalculator."""

from datetime import timedelta
from decimal import Decimal

from trade_analytics.analytics.timing import TimingCalculator, TimingMetrics, ols_slope

from .conftest import T0, make_closed_trade


def _winner(mae, mfe, start=T0):
    """+100 P/L."""
    return make_closed_trade(100, 110, 10, start=start).with_excursions(mae, mfe)


def _loser(mae, mfe, start=T0):
    """-40 P/L."""
    return make_closed_trade(100, 96, 10, start=start).with_excursions(mae, mfe)


class TestEntryQuality:

    def test_winner_scaled_by_adverse_excursion(self):
        assert TimingCalculator().entry_quality(_winner(25, 200)) == Decimal("80")

    def test_winner_without_drawdown_is_perfect(self):
        assert TimingCalculator().entry_quality(_winner(0, 200)) == Decimal("100")

    def test_loser_gets_baseline(self):
        assert TimingCalculator().entry_quality(_loser(10, 100)) == Decimal("25")

    def test_missing_mae(self):
        trade = make_closed_trade()
        assert TimingCalculator().entry_quality(trade) is None

    def test_negative_mae_stored_as_magnitude(self):
        assert TimingCalculator().entry_quality(_winner(-25, 200)) == Decimal("80")


class TestExitQuality:

    def test_captured_share_of_favourable_move(self):
        assert TimingCalculator().exit_quality(_winner(0, 200)) == Decimal("50")

    def test_capped_at_hundred(self):
        assert TimingCalculator().exit_quality(_winner(0, 50)) == Decimal("100")

    def test_floored_at_zero(self):
        assert TimingCalculator().exit_quality(_loser(10, 100)) == 0

    def test_zero_mfe_is_neutral(self):
        assert TimingCalculator().exit_quality(_winner(0, 0)) == Decimal("50")

    def test_missing_mfe(self):
        assert TimingCalculator().exit_quality(make_closed_trade()) is None


class TestTimingCalculator:

    def test_averages_and_score(self):
        trades = [_winner(25, 200), _loser(10, 100, start=T0 + timedelta(days=1))]
        m = TimingCalculator().calculate(trades)
        assert m.entry_scores == (Decimal("80"), Decimal("25"))
        assert m.exit_scores == (Decimal("50"), Decimal("0"))
        assert m.average_entry_quality == Decimal("52.5")
        assert m.average_exit_quality == Decimal("25")
        assert m.timing_score == Decimal("38.75")
        assert m.entry_quality_trend == Decimal("-55")
        assert m.exit_quality_trend == Decimal("-50")

    def test_trades_without_excursions_skipped(self):
        trades = [make_closed_trade(), _winner(0, 100, start=T0 + timedelta(days=1))]
        m = TimingCalculator().calculate(trades)
        assert m.entry_scores == (Decimal("100"),)
        assert m.entry_quality_trend == 0

    def test_no_excursion_data(self):
        assert TimingCalculator().calculate([make_closed_trade()]) == TimingMetrics()

    def test_empty_input(self):
        assert TimingCalculator().calculate([]) == TimingMetrics()


class TestOlsSlope:

    def test_linear_series(self):
        assert ols_slope([Decimal(25), Decimal(50), Decimal(75)]) == Decimal("25")

    def test_flat_series(self):
        assert ols_slope([Decimal(10)] * 4) == 0

    def test_single_point(self):
        assert ols_slope([Decimal(10)]) == 0
