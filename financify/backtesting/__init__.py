"""
Backtest domain model, trade simulation, and the run_backtest orchestrator.
"""
