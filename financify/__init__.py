"""
financify – single-instrument strategy backtesting.

Typical use:

    from financify import RiskConfig, StrategyConfig, run_backtest
    from financify.data.io import read_price_history_csv

    bars = read_price_history_csv("data/raw/MSFT.csv")
    config = StrategyConfig(
        strategy_kind="SMA Crossover",
        parameters={"short_period": 20, "long_period": 50},
        initial_capital=10_000,
        risk=RiskConfig(position_sizing_percent=5, stop_loss_percent=10, take_profit_percent=20),
    )
    result = run_backtest(config, bars)
"""

from financify.backtesting.engine import run_backtest
from financify.backtesting.models import (
    BacktestResult,
    PerformanceMetrics,
    PriceBar,
    RiskConfig,
    Signal,
    StrategyConfig,
    StrategyKind,
    Trade,
)

__all__ = [
    "BacktestResult",
    "PerformanceMetrics",
    "PriceBar",
    "RiskConfig",
    "Signal",
    "StrategyConfig",
    "StrategyKind",
    "Trade",
    "run_backtest",
]
