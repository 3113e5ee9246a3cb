"""
Tests for technical indicators and crossover helpers.

All expected values are small enough to verify by hand.
"""

import numpy as np
import pytest

from financify.utils.indicators import (
    compute_ema,
    compute_rsi,
    compute_sma,
    crossed_above,
    crossed_below,
)


def test_compute_sma_pads_warmup_with_none():
    """SMA is None until a full window is available."""
    sma = compute_sma([1, 2, 3, 4, 5], 3)

    assert sma[:2] == [None, None]
    assert np.allclose(sma[2:], [2.0, 3.0, 4.0])


def test_compute_sma_period_longer_than_series():
    """A window longer than the series yields all None."""
    assert compute_sma([1, 2], 3) == [None, None]


def test_compute_sma_period_one_is_identity():
    """SMA(1) reproduces the input."""
    assert compute_sma([5, 6, 7], 1) == [5.0, 6.0, 7.0]


def test_compute_sma_empty_input():
    """Empty input gives empty output."""
    assert compute_sma([], 3) == []


@pytest.mark.parametrize("period", [0, -1, 2.5, True])
def test_indicators_reject_invalid_period(period):
    """Period must be a positive int."""
    with pytest.raises(ValueError):
        compute_sma([1, 2, 3], period)
    with pytest.raises(ValueError):
        compute_ema([1, 2, 3], period)
    with pytest.raises(ValueError):
        compute_rsi([1, 2, 3], period)


def test_compute_ema_seeds_with_first_price():
    """EMA_0 = P_0, then EMA_i = P_i*k + EMA_{i-1}*(1-k) with k = 2/(n+1)."""
    ema = compute_ema([1, 2, 3], 3)

    # k = 0.5: 1, 1.5, 2.25
    assert np.allclose(ema, [1.0, 1.5, 2.25])


def test_compute_ema_defined_everywhere():
    """EMA has no None padding."""
    ema = compute_ema([10, 11, 12, 13], 10)

    assert len(ema) == 4
    assert all(value is not None for value in ema)


def test_compute_ema_empty_input():
    """Empty input gives empty output."""
    assert compute_ema([], 5) == []


def test_compute_rsi_all_gains_reads_100():
    """With no losses the RSI is 100."""
    rsi = compute_rsi([1, 2, 3, 4], 2)

    assert rsi[:2] == [None, None]
    assert rsi[2] == 100.0
    assert rsi[3] == 100.0


def test_compute_rsi_wilder_smoothing():
    """Hand-computed Wilder RSI on a fall-then-recover path."""
    rsi = compute_rsi([10, 9, 8, 7, 8, 9, 8], 2)

    # Seed over deltas -1, -1: gain 0, loss 1 -> 0
    # i=3 (-1): gain 0, loss 1 -> 0
    # i=4 (+1): gain 0.5, loss 0.5 -> 50
    # i=5 (+1): gain 0.75, loss 0.25 -> 75
    # i=6 (-1): gain 0.375, loss 0.625 -> 37.5
    assert rsi[:2] == [None, None]
    assert np.allclose(rsi[2:], [0.0, 0.0, 50.0, 75.0, 37.5])


def test_compute_rsi_series_not_longer_than_period():
    """len(prices) <= period yields all None."""
    assert compute_rsi([1, 2, 3], 3) == [None, None, None]


def test_compute_rsi_stays_in_range():
    """RSI values are always within [0, 100]."""
    prices = [100, 102, 99, 101, 98, 97, 103, 104, 100, 99, 105]
    rsi = compute_rsi(prices, 3)

    defined = [value for value in rsi if value is not None]
    assert defined
    assert all(0.0 <= value <= 100.0 for value in defined)


def test_crossed_above_requires_touch_then_strict_separation():
    """Prior bar <=, current bar strictly >."""
    fast = [1.0, 2.0, 3.0]
    slow = [2.0, 2.0, 2.0]

    assert crossed_above(fast, slow, 1) is False  # tie on current bar
    assert crossed_above(fast, slow, 2) is True   # tie then above


def test_crossed_below_mirror_rule():
    """Prior bar >=, current bar strictly <."""
    fast = [3.0, 2.0, 1.0]
    slow = [2.0, 2.0, 2.0]

    assert crossed_below(fast, slow, 1) is False
    assert crossed_below(fast, slow, 2) is True


def test_crossover_helpers_ignore_undefined_values():
    """Any None operand means no cross."""
    fast = [None, 1.0, 3.0]
    slow = [None, None, 2.0]

    assert crossed_above(fast, slow, 1) is False
    assert crossed_above(fast, slow, 2) is False
    assert crossed_below(fast, slow, 2) is False


def test_crossover_helpers_index_zero_never_crosses():
    """There is no prior bar at index 0."""
    assert crossed_above([2.0], [1.0], 0) is False
    assert crossed_below([1.0], [2.0], 0) is False


def test_compute_sma_sums_each_window_independently():
    """Each value equals sum(window) / period, summed oldest first."""
    prices = [0.3, 10.3, 0.3, 10.3, 10, 10.2, 9.9, 10.3, 10.3]
    short = compute_sma(prices, 2)
    long = compute_sma(prices, 4)

    for i in range(3, len(prices)):
        assert long[i] == sum(prices[i - 3:i + 1]) / 4
        assert short[i] == sum(prices[i - 1:i + 1]) / 2
    # The two averages tie exactly at bar 7
    assert short[7] == long[7]
