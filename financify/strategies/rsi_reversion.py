"""
RSI mean-reversion strategy.

**Conceptual**: Buy when momentum recovers out of oversold territory, sell when
it rolls over out of overbought territory. Acting on the *exit* from the zone
(rather than on every bar inside it) avoids buying into a falling knife and
fires at most once per excursion.

**Rule**, at bar i > 0 with both RSI[i-1] and RSI[i] defined:
  - BUY  if RSI[i-1] <= oversold   and RSI[i] > oversold
  - SELL if RSI[i-1] >= overbought and RSI[i] < overbought

Parameters:
  - period: RSI lookback (positive int, default convention 14).
  - oversold: lower threshold in (0, 100), default 30.
  - overbought: upper threshold in (0, 100), default 70, above oversold.
"""

from typing import Any, Mapping, Sequence

from financify.backtesting.models import Signal, StrategyKind
from financify.errors import ConfigurationError
from financify.strategies.base import empty_signals, optional_level, require_period
from financify.utils.indicators import compute_rsi, crossed_above, crossed_below

DEFAULT_OVERSOLD = 30.0
DEFAULT_OVERBOUGHT = 70.0


class RsiReversionStrategy:
    """Signal generator for StrategyKind.RSI_REVERSION."""

    kind = StrategyKind.RSI_REVERSION

    def validate_parameters(self, params: Mapping[str, Any]) -> dict:
        period = require_period(params, "period", self.kind)
        oversold = optional_level(params, "oversold", DEFAULT_OVERSOLD, self.kind)
        overbought = optional_level(params, "overbought", DEFAULT_OVERBOUGHT, self.kind)
        if oversold >= overbought:
            raise ConfigurationError(
                f"{self.kind.value} needs oversold < overbought, "
                f"got oversold={oversold}, overbought={overbought}."
            )
        return {"period": period, "oversold": oversold, "overbought": overbought}

    def minimum_bars(self, params: Mapping[str, Any]) -> int:
        # First RSI value lands at index `period`; a cross needs the next one too
        return self.validate_parameters(params)["period"] + 2

    def generate_signals(
        self,
        prices: Sequence[float],
        params: Mapping[str, Any],
    ) -> list[Signal]:
        checked = self.validate_parameters(params)
        rsi = compute_rsi(prices, checked["period"])
        oversold_line = [checked["oversold"]] * len(prices)
        overbought_line = [checked["overbought"]] * len(prices)

        signals = empty_signals(len(prices))
        for i in range(1, len(prices)):
            if crossed_above(rsi, oversold_line, i):
                signals[i] = Signal.BUY
            elif crossed_below(rsi, overbought_line, i):
                signals[i] = Signal.SELL
        return signals
