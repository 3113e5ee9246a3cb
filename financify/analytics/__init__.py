"""
Performance metrics for backtest results.

Total return, drawdown, trade statistics and Sharpe ratio computed from an
equity curve and trade log.
"""
