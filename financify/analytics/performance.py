"""
Performance metrics for a single backtest run.

Metrics are computed from the equity curve (one value per bar, bar 0 being
the initial capital) and the trade log. Every function here is total: short
or degenerate inputs yield 0 or None, never NaN, Infinity or an exception.

  - Return: total return percent.
  - Drawdown: drawdown series and maximum drawdown percent.
  - Trades: counts and win rate.
  - Risk-adjusted: annualized Sharpe ratio of bar-to-bar returns.
"""

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from financify.backtesting.models import (
    EquityPoint,
    PerformanceMetrics,
    Trade,
    TradeAction,
)


def compute_total_return_percent(
    equity_curve: Sequence[EquityPoint],
    initial_capital: float,
) -> float:
    """
    Total return from initial capital to the last equity point, in percent.

    **Mathematical**:
        total_return_percent = (E_final - initial_capital) / initial_capital * 100

    Unbounded in both directions: a leveraged run whose equity goes negative
    returns less than -100.

    Args:
        equity_curve: Equity points in bar order.
        initial_capital: Starting cash (positive).

    Returns:
        Total return percent, or 0.0 with fewer than two points.
    """
    if len(equity_curve) < 2 or initial_capital <= 0:
        return 0.0
    final_equity = equity_curve[-1].value
    return (final_equity - initial_capital) / initial_capital * 100


def compute_drawdown_series(values: Sequence[float]) -> pd.Series:
    """
    Fractional drawdown from the running peak at each point.

    **Mathematical**: With peak_t = max(v_0, ..., v_t),
        drawdown_t = (peak_t - v_t) / peak_t   where peak_t > 0, else 0
    clipped to [0, 1]. The running peak is seeded with the first value, so a
    curve that only falls from its start still registers drawdown.

    Clipping keeps the figure meaningful for leveraged runs: equity below zero
    counts as a full (100%) drawdown rather than more.

    Args:
        values: Equity values in bar order.

    Returns:
        Series of drawdowns in [0, 1], same length as the input.
    """
    equity = pd.Series(values, dtype=float)
    if equity.empty:
        return equity

    peak = equity.cummax()
    drawdown = (peak - equity) / peak.where(peak > 0)
    return drawdown.fillna(0.0).clip(lower=0.0, upper=1.0)


def compute_max_drawdown_percent(values: Sequence[float]) -> float:
    """
    Largest peak-to-trough fall, in percent within [0, 100].

    Returns 0.0 with fewer than two values or a monotonically rising curve.
    """
    if len(values) < 2:
        return 0.0
    return float(compute_drawdown_series(values).max() * 100)


def compute_trade_statistics(trades: Sequence[Trade]) -> dict:
    """
    Count trades and round trips.

    A closed trade is a SELL (it realizes P&L against the latest entry);
    a winning trade is a SELL with positive P&L.

    Returns:
        Dict with total_trades, closed_trades, winning_trades and
        win_rate_percent (None when nothing has closed).
    """
    sells = [t for t in trades if t.action is TradeAction.SELL]
    winners = [t for t in sells if (t.profit_and_loss or 0.0) > 0]
    win_rate = len(winners) / len(sells) * 100 if sells else None
    return {
        "total_trades": len(trades),
        "closed_trades": len(sells),
        "winning_trades": len(winners),
        "win_rate_percent": win_rate,
    }


def compute_sharpe_ratio(
    values: Sequence[float],
    periods_per_year: int = 252,
) -> Optional[float]:
    """
    Annualized Sharpe ratio of bar-to-bar simple returns (risk-free rate 0).

    **Mathematical**: With r_t = v_t / v_{t-1} - 1,
        Sharpe = mean(r) / std(r, ddof=1) * sqrt(periods_per_year)

    **Edge cases** (all return None):
      - Fewer than two returns (std undefined).
      - Zero volatility, e.g. a flat curve with no trades.
      - Any non-positive equity value, where simple returns stop meaning much.

    Args:
        values: Equity values in bar order.
        periods_per_year: Bars per year (252 for daily bars).
    """
    equity = pd.Series(values, dtype=float)
    if len(equity) < 3 or (equity <= 0).any():
        return None

    returns = equity.pct_change().dropna()
    vol = returns.std(ddof=1)
    if np.isnan(vol) or vol < 1e-12:
        return None

    sharpe = returns.mean() / vol * np.sqrt(periods_per_year)
    if not np.isfinite(sharpe):
        return None
    return float(sharpe)


def analyze_performance(
    equity_curve: Sequence[EquityPoint],
    trades: Sequence[Trade],
    initial_capital: float,
) -> PerformanceMetrics:
    """
    Compute every summary metric for one run.

    With fewer than two equity points there is nothing to measure: numeric
    metrics are 0 and ratios are None.

    Args:
        equity_curve: Equity points in bar order (bar 0 = initial capital).
        trades: Trades in execution order.
        initial_capital: Starting cash.

    Returns:
        PerformanceMetrics.
    """
    stats = compute_trade_statistics(trades)
    if len(equity_curve) < 2:
        return PerformanceMetrics(**stats)

    values = [point.value for point in equity_curve]
    return PerformanceMetrics(
        total_return_percent=compute_total_return_percent(equity_curve, initial_capital),
        max_drawdown_percent=compute_max_drawdown_percent(values),
        final_equity=values[-1],
        sharpe_ratio=compute_sharpe_ratio(values),
        **stats,
    )
