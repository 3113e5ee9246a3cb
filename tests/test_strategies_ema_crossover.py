"""
Tests for the EMA crossover signal generator.
"""

import pytest

from financify.backtesting.models import Signal
from financify.errors import ConfigurationError
from financify.strategies.ema_crossover import EmaCrossoverStrategy

N, B, S = Signal.NONE, Signal.BUY, Signal.SELL


def test_ema_crossover_jump_then_drop():
    """A jump lifts the fast EMA above the slow one; a drop pulls it back below."""
    signals = EmaCrossoverStrategy().generate_signals(
        [10, 10, 10, 12, 8], {"short_period": 1, "long_period": 3}
    )

    # EMA1 is the price itself. i=3: 12 > EMA3 = 11.0 after equal values -> BUY
    # i=4: 8 < EMA3 = 9.5 -> SELL
    assert signals == [N, N, N, B, S]


def test_ema_crossover_flat_series_never_signals():
    """Equal EMAs never cross."""
    signals = EmaCrossoverStrategy().generate_signals(
        [50.0] * 6, {"short_period": 1, "long_period": 3}
    )

    assert signals == [N] * 6


def test_ema_crossover_rejects_unordered_periods():
    """short_period must be below long_period."""
    with pytest.raises(ConfigurationError):
        EmaCrossoverStrategy().validate_parameters({"short_period": 26, "long_period": 12})


def test_ema_crossover_minimum_bars_is_long_period_plus_one():
    """Same lookback as the SMA crossover."""
    assert EmaCrossoverStrategy().minimum_bars({"short_period": 12, "long_period": 26}) == 27
