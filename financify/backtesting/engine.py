"""
Backtest orchestrator.

**Conceptual**: The engine is the one entrypoint that ties the pieces
together. It resolves the configured strategy to a signal generator, checks
every input up front, then runs the pipeline:

    closes -> signals -> simulation -> metrics -> BacktestResult

**Why check everything before simulating?**
  - A run either completes or fails with a typed error; there is no partial
    result to interpret.
  - Configuration problems (unknown strategy, bad parameters, bad risk
    settings) and data problems (too few bars, unordered dates, bad closes)
    are reported with messages that say what was expected.

The engine is deterministic: the same config and bars always produce an equal
BacktestResult. It holds no state between calls.
"""

from typing import Sequence, Union

import pandas as pd
from loguru import logger

from financify.analytics.performance import analyze_performance
from financify.backtesting.models import (
    BacktestResult,
    PriceBar,
    StrategyConfig,
    StrategyKind,
)
from financify.backtesting.simulation import simulate
from financify.data.io import price_bars_from_frame
from financify.data.schemas import closing_prices, validate_price_bars
from financify.errors import InsufficientDataError
from financify.strategies.registry import get_signal_generator

HistoricalData = Union[Sequence[PriceBar], pd.DataFrame]


def run_backtest(config: StrategyConfig, historical_data: HistoricalData) -> BacktestResult:
    """
    Run one backtest.

    Steps:
      1. Resolve `config.strategy_kind` to a StrategyKind and its generator.
      2. Validate strategy parameters (capital and risk were validated when
         the config was built).
      3. Validate the price series and check it covers the strategy's lookback.
      4. Generate signals, simulate, and compute metrics.

    Args:
        config: Strategy, parameters, capital, and risk settings.
        historical_data: Price bars in chronological order, or a DataFrame
                         accepted by `price_bars_from_frame`.

    Returns:
        BacktestResult with metrics, trades, the equity curve (one point per
        bar), and the raw signals.

    Raises:
        UnsupportedStrategyError: Unknown or unimplemented strategy.
        ConfigurationError: Invalid strategy parameters.
        PriceDataError: Unordered/duplicate dates or bad closing prices.
        InsufficientDataError: Fewer bars than the strategy needs (at least 2).
    """
    kind = StrategyKind.parse(config.strategy_kind)
    generator = get_signal_generator(kind)
    params = generator.validate_parameters(config.parameters)

    if isinstance(historical_data, pd.DataFrame):
        bars = price_bars_from_frame(historical_data, context=kind.value)
    else:
        bars = list(historical_data)
        validate_price_bars(bars, context=kind.value)

    required = generator.minimum_bars(params)
    if len(bars) < required:
        raise InsufficientDataError(
            f"{kind.value} with {params} needs at least {required} bars, got {len(bars)}."
        )

    logger.info(
        "Running {} backtest over {} bars ({} to {}), initial capital {:.2f}",
        kind.value,
        len(bars),
        bars[0].date,
        bars[-1].date,
        config.initial_capital,
    )
    logger.debug("Parameters: {}; risk: {}", params, config.risk)

    signals = generator.generate_signals(closing_prices(bars), params)
    simulation = simulate(bars, signals, config.initial_capital, config.risk)
    metrics = analyze_performance(
        simulation.equity_curve, simulation.trades, config.initial_capital
    )

    logger.info(
        "{} finished: return {:.2f}%, max drawdown {:.2f}%, {} trades",
        kind.value,
        metrics.total_return_percent,
        metrics.max_drawdown_percent,
        metrics.total_trades,
    )

    return BacktestResult(
        metrics=metrics,
        trades=simulation.trades,
        equity_curve=simulation.equity_curve,
        signals=tuple(signals),
        config=config,
    )
