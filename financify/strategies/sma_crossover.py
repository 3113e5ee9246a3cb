"""
SMA crossover strategy: the reference signal generator.

**Conceptual**: Track a short and a long simple moving average. When the short
average moves above the long one, recent prices are outrunning the longer
trend (a "golden cross"): BUY. When it drops below (a "death cross"): SELL.
Everything else is NONE: the strategy only acts on the bar a cross happens,
not on every bar the lines stay apart.

**Mathematically**, at bar i > 0:
  - BUY  if short[i] > long[i] and short[i-1] <= long[i-1]
  - SELL if short[i] < long[i] and short[i-1] >= long[i-1]
Strict inequality on the current bar and non-strict on the prior bar means a
tie never fires and a touch-then-separate fires exactly once.

Parameters:
  - short_period: short SMA window (positive int).
  - long_period: long SMA window (positive int, greater than short_period).
"""

from typing import Any, Mapping, Sequence

from financify.backtesting.models import Signal, StrategyKind
from financify.errors import ConfigurationError
from financify.strategies.base import empty_signals, require_period
from financify.utils.indicators import compute_sma, crossed_above, crossed_below


class SmaCrossoverStrategy:
    """Signal generator for StrategyKind.SMA_CROSSOVER."""

    kind = StrategyKind.SMA_CROSSOVER

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
        # Two consecutive defined long SMAs for a cross to fire
        return self.validate_parameters(params)["long_period"] + 1

    def generate_signals(
        self,
        prices: Sequence[float],
        params: Mapping[str, Any],
    ) -> list[Signal]:
        checked = self.validate_parameters(params)
        short_sma = compute_sma(prices, checked["short_period"])
        long_sma = compute_sma(prices, checked["long_period"])

        signals = empty_signals(len(prices))
        for i in range(1, len(prices)):
            if crossed_above(short_sma, long_sma, i):
                signals[i] = Signal.BUY
            elif crossed_below(short_sma, long_sma, i):
                signals[i] = Signal.SELL
        return signals
