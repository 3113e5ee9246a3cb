"""
Exception taxonomy for the backtesting core.

**Conceptual**: Every problem the engine can detect is detected *before* the
simulation loop starts and is reported synchronously to the caller of
`run_backtest`. The classes below let callers distinguish "you asked for
something we cannot do" (configuration) from "the data you gave us cannot
support this strategy" (insufficient or malformed data).

**Why subclass ValueError?**
  - These are all bad-input errors; existing `except ValueError` handlers in
    host code keep working.
  - A single `BacktestError` base lets callers catch everything from the core.

Degenerate metrics (zero-division in drawdown/return math) are NOT exceptions:
they resolve to 0 or None inside `financify.analytics.performance`.
"""


class BacktestError(Exception):
    """Base class for all errors raised by the backtesting core."""


class ConfigurationError(BacktestError, ValueError):
    """
    Raised when a StrategyConfig cannot be run as given.

    Examples: non-positive initial capital, position sizing outside (0, 100],
    negative stop-loss, missing or invalid strategy parameters.
    """


class UnsupportedStrategyError(ConfigurationError):
    """
    Raised when the requested strategy kind has no registered signal generator.

    There is no silent fallback to a default strategy.
    """


class InsufficientDataError(BacktestError, ValueError):
    """
    Raised when the price series is too short for the chosen strategy.

    A series shorter than the strategy's longest indicator lookback would
    produce an all-NONE signal run; surfacing it is more honest than returning
    a flat equity curve that looks like a real result.
    """


class PriceDataError(BacktestError, ValueError):
    """
    Raised when a price series violates the PriceBar contract.

    Examples: dates out of order or duplicated, non-positive or non-finite
    closing prices, missing columns in a price CSV.
    """
