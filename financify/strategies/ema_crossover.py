"""
EMA crossover strategy.

Same crossing rule as the SMA crossover, applied to exponential moving
averages, which react faster to recent closes.

The EMA is defined from the first bar, but its early values are a naive seed
rather than a converged average. `minimum_bars` therefore asks for
`long_period + 1` bars: one full period of data for the long EMA plus one
bar to compare against, the same lookback as the SMA crossover.

Parameters:
  - short_period: short EMA period (positive int).
  - long_period: long EMA period (positive int, greater than short_period).
"""

from typing import Any, Mapping, Sequence

from financify.backtesting.models import Signal, StrategyKind
from financify.errors import ConfigurationError
from financify.strategies.base import empty_signals, require_period
from financify.utils.indicators import compute_ema, crossed_above, crossed_below


class EmaCrossoverStrategy:
    """Signal generator for StrategyKind.EMA_CROSSOVER."""

    kind = StrategyKind.EMA_CROSSOVER

    def validate_parameters(self, params: Mapping[str, Any]) -> dict:
        short_period = require_period(params, "short_period", self.kind)
        long_period = require_period(params, "long_period", self.kind)
        if short_period >= long_period:
            raise ConfigurationError(
                f"{self.kind.value} needs short_period < long_period, "
                f"got short_period={short_period}, long_period={long_period}."
            )
        return {"short_period": short_period, "long_period": long_period}

    def minimum_bars(self, params: Mapping[str, Any]) -> int:
        return self.validate_parameters(params)["long_period"] + 1

    def generate_signals(
        self,
        prices: Sequence[float],
        params: Mapping[str, Any],
    ) -> list[Signal]:
        checked = self.validate_parameters(params)
        short_ema = compute_ema(prices, checked["short_period"])
        long_ema = compute_ema(prices, checked["long_period"])

        signals = empty_signals(len(prices))
        for i in range(1, len(prices)):
            if crossed_above(short_ema, long_ema, i):
                signals[i] = Signal.BUY
            elif crossed_below(short_ema, long_ema, i):
                signals[i] = Signal.SELL
        return signals
