"""
Technical indicators over a closing-price series.

This module provides the indicator functions that signal generators build on:
simple and exponential moving averages and Wilder's RSI, plus the crossing
tests used to turn two indicator lines into discrete events.

**Output convention**: every indicator returns a plain list with one element
per input price. Positions where the indicator has no value yet (not enough
lookback) hold `None`. There is no numeric sentinel: a 0.0 or NaN placeholder
compares silently in `<`/`>` tests, whereas `None` forces callers to handle the
warm-up period explicitly (see `crossed_above`).

All functions are stateless and deterministic; inputs are never modified.
"""

from typing import Optional, Sequence

import pandas as pd

IndicatorValues = list[Optional[float]]


def _check_period(period: int) -> None:
    if isinstance(period, bool) or not isinstance(period, int) or period < 1:
        raise ValueError(f"Indicator period must be a positive integer, got {period!r}")


def _to_optional(values: pd.Series) -> IndicatorValues:
    return [None if pd.isna(value) else float(value) for value in values]


def compute_sma(prices: Sequence[float], period: int) -> IndicatorValues:
    """
    Compute a simple moving average (SMA) over a price series.

    **Conceptual**: The SMA smooths short-term noise by averaging the most
    recent `period` closes with equal weight. Two SMAs of different lengths
    crossing each other is the classic trend-change signal (golden/death cross).

    **Mathematical**: For each index i >= period - 1:
        SMA_i = (1 / period) * sum(P_{i-k}) for k = 0 .. period-1
    i.e. the trailing window includes the current close.

    **Functionally**:
    - Input: closes in chronological order (oldest first); window length.
    - Output: list of the same length; the first (period - 1) entries are None.
    - A series shorter than `period` yields all None.
    - Each window is summed independently, oldest close first, so equal
      windows give bit-identical averages.

    Args:
        prices: Closing prices, oldest first.
        period: Number of closes to average (positive integer).

    Returns:
        List of SMA values with None padding on the left.

    Raises:
        ValueError: If period is not a positive integer.
    """
    _check_period(period)
    series = pd.Series(prices, dtype=float)
    # Each window summed on its own, oldest first; a running sum drifts
    window_mean = series.rolling(window=period).apply(lambda w: sum(w) / period, raw=True)
    return _to_optional(window_mean)


def compute_ema(prices: Sequence[float], period: int) -> IndicatorValues:
    """
    Compute an exponential moving average (EMA) over a price series.

    **Conceptual**: The EMA weights recent closes more heavily than the SMA,
    so it reacts faster to trend changes.

    **Mathematical**: With smoothing factor k = 2 / (period + 1):
        EMA_0 = P_0
        EMA_i = P_i * k + EMA_{i-1} * (1 - k)

    **Functionally**:
    - Defined for every index (no None padding).
    - EMA_0 is a naive seed, not a converged average; values only become
      representative after several periods. Strategies that care enforce a
      minimum series length instead of trusting early values.

    Args:
        prices: Closing prices, oldest first.
        period: EMA period (positive integer).

    Returns:
        List of EMA values, same length as input (empty for empty input).

    Raises:
        ValueError: If period is not a positive integer.
    """
    _check_period(period)
    if len(prices) == 0:
        return []

    k = 2 / (period + 1)
    ema: IndicatorValues = [float(prices[0])]
    for i in range(1, len(prices)):
        ema.append(float(prices[i]) * k + ema[i - 1] * (1 - k))
    return ema


def compute_rsi(prices: Sequence[float], period: int) -> IndicatorValues:
    """
    Compute the Relative Strength Index (RSI) with Wilder's smoothing.

    **Conceptual**: RSI compares the size of recent up-moves to recent
    down-moves on a 0..100 scale. Readings below ~30 are conventionally
    "oversold", above ~70 "overbought".

    **Mathematical**:
      1. Seed: over deltas d_1 .. d_period (d_i = P_i - P_{i-1}),
             avgGain = sum(max(d, 0)) / period
             avgLoss = sum(max(-d, 0)) / period
         RSI_period is the first defined value.
      2. For i > period (Wilder smoothing):
             avgGain = (avgGain * (period - 1) + max(d_i, 0)) / period
             avgLoss = (avgLoss * (period - 1) + max(-d_i, 0)) / period
      3. RSI = 100 if avgLoss == 0 else 100 - 100 / (1 + avgGain / avgLoss)

    **Edge cases**:
    - Indices before `period` are None.
    - A series with len <= period yields all None (no full set of deltas).
    - A flat series (no losses) reads 100, matching the zero-loss rule.

    Args:
        prices: Closing prices, oldest first.
        period: RSI lookback (positive integer, commonly 14).

    Returns:
        List of RSI values with None padding on the left.

    Raises:
        ValueError: If period is not a positive integer.
    """
    _check_period(period)
    rsi: IndicatorValues = [None] * len(prices)
    if len(prices) <= period:
        return rsi

    def strength(avg_gain: float, avg_loss: float) -> float:
        if avg_loss > 0:
            return 100 - (100 / (1 + (avg_gain / avg_loss)))
        return 100.0

    gains = 0.0
    losses = 0.0
    for i in range(1, period + 1):
        change = prices[i] - prices[i - 1]
        if change > 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period
    rsi[period] = strength(avg_gain, avg_loss)

    for i in range(period + 1, len(prices)):
        change = prices[i] - prices[i - 1]
        avg_gain = (avg_gain * (period - 1) + (change if change > 0 else 0.0)) / period
        avg_loss = (avg_loss * (period - 1) + (-change if change < 0 else 0.0)) / period
        rsi[i] = strength(avg_gain, avg_loss)

    return rsi


def crossed_above(fast: IndicatorValues, slow: IndicatorValues, i: int) -> bool:
    """
    True if `fast` crossed strictly above `slow` at index i.

    Uses `<=` on the prior bar and strict `>` on the current bar, so a line
    that touches and then separates fires once, and a tie never fires.
    Any None operand (warm-up) or i < 1 means no cross.
    """
    if i < 1:
        return False
    now_fast, now_slow = fast[i], slow[i]
    prev_fast, prev_slow = fast[i - 1], slow[i - 1]
    if None in (now_fast, now_slow, prev_fast, prev_slow):
        return False
    return now_fast > now_slow and prev_fast <= prev_slow


def crossed_below(fast: IndicatorValues, slow: IndicatorValues, i: int) -> bool:
    """Mirror of `crossed_above`: `>=` on the prior bar, strict `<` now."""
    if i < 1:
        return False
    now_fast, now_slow = fast[i], slow[i]
    prev_fast, prev_slow = fast[i - 1], slow[i - 1]
    if None in (now_fast, now_slow, prev_fast, prev_slow):
        return False
    return now_fast < now_slow and prev_fast >= prev_slow
