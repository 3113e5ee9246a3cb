"""
Tests for performance metrics.

Each metric is tested on small curves with hand-computed answers, plus the
degenerate inputs (short curves, flat curves, negative equity) that must
resolve to 0 or None rather than NaN.
"""

from datetime import date, timedelta

import numpy as np
import pytest

from financify.analytics.performance import (
    analyze_performance,
    compute_drawdown_series,
    compute_max_drawdown_percent,
    compute_sharpe_ratio,
    compute_total_return_percent,
    compute_trade_statistics,
)
from financify.backtesting.models import EquityPoint, Trade, TradeAction


def make_curve(values):
    start = date(2024, 1, 1)
    return [EquityPoint(date=start + timedelta(days=i), value=v) for i, v in enumerate(values)]


def sell(pl):
    return Trade(date=date(2024, 1, 1), action=TradeAction.SELL, price=1.0, quantity=1.0,
                 profit_and_loss=pl)


def buy():
    return Trade(date=date(2024, 1, 1), action=TradeAction.BUY, price=1.0, quantity=1.0)


def test_compute_total_return_percent_simple_case():
    """1000 -> 1100 is +10%."""
    assert compute_total_return_percent(make_curve([1000, 1050, 1100]), 1000) == pytest.approx(10.0)


def test_compute_total_return_percent_below_minus_100():
    """Leveraged losses can exceed the starting capital."""
    assert compute_total_return_percent(make_curve([1000, -500]), 1000) == pytest.approx(-150.0)


def test_compute_total_return_percent_short_curve():
    """Fewer than two points: 0."""
    assert compute_total_return_percent(make_curve([1000]), 1000) == 0.0


def test_compute_drawdown_series_with_drop():
    """Peak 120, trough 90 -> 25% drawdown; new high resets to 0."""
    drawdown = compute_drawdown_series([100.0, 120.0, 90.0, 130.0])

    assert np.allclose(drawdown.values, [0.0, 0.0, 0.25, 0.0])


def test_compute_drawdown_series_seeded_with_first_point():
    """A curve that only falls from its start registers drawdown."""
    drawdown = compute_drawdown_series([100.0, 80.0])

    assert np.allclose(drawdown.values, [0.0, 0.2])


def test_compute_drawdown_series_clips_negative_equity():
    """Equity below zero counts as a full drawdown, not more."""
    drawdown = compute_drawdown_series([100.0, -50.0])

    assert drawdown.iloc[-1] == 1.0


def test_compute_drawdown_series_non_positive_peak_is_zero():
    """Where the running peak is <= 0 drawdown is defined as 0."""
    drawdown = compute_drawdown_series([-10.0, -20.0, 0.0])

    assert np.allclose(drawdown.values, [0.0, 0.0, 0.0])


def test_compute_max_drawdown_percent_monotonic_increasing():
    """No drops, no drawdown."""
    assert compute_max_drawdown_percent([100.0, 110.0, 120.0]) == 0.0


def test_compute_max_drawdown_percent_with_drop():
    """Worst fall is from 1100 to 900."""
    mdd = compute_max_drawdown_percent([1000.0, 1100.0, 1000.0, 900.0, 950.0])

    assert mdd == pytest.approx(200.0 / 1100.0 * 100)


def test_compute_max_drawdown_percent_bounded():
    """Always within [0, 100]."""
    assert compute_max_drawdown_percent([100.0, -1000.0]) == 100.0


def test_compute_trade_statistics_counts_round_trips():
    """SELLs are closed trades; positive pl wins."""
    stats = compute_trade_statistics([buy(), sell(10.0), buy(), sell(-5.0), buy(), sell(0.0)])

    assert stats == {
        "total_trades": 6,
        "closed_trades": 3,
        "winning_trades": 1,
        "win_rate_percent": pytest.approx(100 / 3),
    }


def test_compute_trade_statistics_no_closed_trades():
    """Win rate is not applicable without a SELL."""
    stats = compute_trade_statistics([buy()])

    assert stats["closed_trades"] == 0
    assert stats["win_rate_percent"] is None


def test_compute_sharpe_ratio_matches_formula():
    """mean/std(ddof=1) of simple returns, annualized by sqrt(252)."""
    values = [100.0, 110.0, 99.0, 108.9]
    returns = np.diff(values) / np.array(values[:-1])
    expected = returns.mean() / returns.std(ddof=1) * np.sqrt(252)

    assert compute_sharpe_ratio(values) == pytest.approx(expected)


@pytest.mark.parametrize(
    "values",
    [
        [100.0],
        [100.0, 110.0],
        [100.0, 100.0, 100.0],
        [100.0, -10.0, 50.0],
    ],
)
def test_compute_sharpe_ratio_undefined_cases(values):
    """Too few returns, zero volatility or non-positive equity: None."""
    assert compute_sharpe_ratio(values) is None


def test_analyze_performance_flat_two_points():
    """Equity [1000, 1000]: zero drawdown and zero return, exactly."""
    metrics = analyze_performance(make_curve([1000.0, 1000.0]), [], 1000.0)

    assert metrics.max_drawdown_percent == 0.0
    assert metrics.total_return_percent == 0.0
    assert metrics.final_equity == 1000.0
    assert metrics.sharpe_ratio is None
    assert metrics.win_rate_percent is None


def test_analyze_performance_degenerate_short_curve():
    """Fewer than two points: numeric metrics 0, ratios None."""
    for curve in ([], make_curve([1000.0])):
        metrics = analyze_performance(curve, [], 1000.0)

        assert metrics.total_return_percent == 0.0
        assert metrics.max_drawdown_percent == 0.0
        assert metrics.final_equity == 0.0
        assert metrics.total_trades == 0
        assert metrics.sharpe_ratio is None


def test_analyze_performance_combines_metrics():
    """Return, drawdown and trade counts come from their own functions."""
    curve = make_curve([1000.0, 1200.0, 900.0, 1100.0])
    metrics = analyze_performance(curve, [buy(), sell(100.0)], 1000.0)

    assert metrics.total_return_percent == pytest.approx(10.0)
    assert metrics.max_drawdown_percent == pytest.approx(25.0)
    assert metrics.final_equity == 1100.0
    assert metrics.total_trades == 2
    assert metrics.closed_trades == 1
    assert metrics.win_rate_percent == pytest.approx(100.0)
    assert metrics.sharpe_ratio is not None
