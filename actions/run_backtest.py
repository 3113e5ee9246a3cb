#!/usr/bin/env python3
"""
Run a single-strategy backtest over a price history CSV.

**Usage**:
    From project root:
    ```bash
    python actions/run_backtest.py --csv data/raw/MSFT.csv
    python actions/run_backtest.py --csv data/raw/MSFT.csv --strategy "EMA Crossover" --short 12 --long 26
    python actions/run_backtest.py --csv data/raw/MSFT.csv --strategy "RSI Reversion" --period 14 \\
        --stop-loss 5 --take-profit 15 --output data/results/msft_rsi.json
    ```

Capital and risk flags fall back to the FINANCIFY_* environment defaults
(see `financify.config.settings`). Exit codes: 0 on success, 2 on bad
configuration or price data.
"""

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from financify.backtesting.engine import run_backtest
from financify.backtesting.models import StrategyConfig, StrategyKind
from financify.data.io import read_price_history_csv
from financify.errors import BacktestError
from financify.logging_utils import configure_logging


def parse_args(argv=None):
    """
    Parse command line arguments.

    Returns:
        Namespace with csv, strategy, short, long, period, oversold, overbought,
        initial_capital, position_sizing, stop_loss, take_profit, output.
    """
    parser = argparse.ArgumentParser(
        description="Backtest a strategy over a price history CSV",
        epilog="""
Examples:
  # SMA 20/50 crossover with environment defaults for capital and risk
  python actions/run_backtest.py --csv data/raw/MSFT.csv

  # RSI mean reversion, saving the full result as JSON
  python actions/run_backtest.py --csv data/raw/MSFT.csv --strategy "RSI Reversion" --output out.json
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--csv",
        type=str,
        required=True,
        help="Price history CSV with timestamp/date and closing_price/close columns",
    )
    parser.add_argument(
        "--strategy",
        type=str,
        default=StrategyKind.SMA_CROSSOVER.value,
        help=f"Strategy name (one of: {', '.join(k.value for k in StrategyKind)})",
    )
    parser.add_argument("--short", type=int, default=20, help="Short average period (default: 20)")
    parser.add_argument("--long", type=int, default=50, help="Long average period (default: 50)")
    parser.add_argument("--period", type=int, default=14, help="RSI period (default: 14)")
    parser.add_argument("--oversold", type=float, default=None, help="RSI oversold level (default: 30)")
    parser.add_argument("--overbought", type=float, default=None, help="RSI overbought level (default: 70)")
    parser.add_argument("--initial-capital", type=float, default=None, help="Starting cash")
    parser.add_argument("--position-sizing", type=float, default=None, help="Percent of equity per BUY")
    parser.add_argument("--stop-loss", type=float, default=None, help="Stop-loss percent")
    parser.add_argument("--take-profit", type=float, default=None, help="Take-profit percent")
    parser.add_argument("--output", type=str, default=None, help="Write the full result to this JSON file")

    return parser.parse_args(argv)


def build_config(args) -> StrategyConfig:
    """Translate CLI arguments into a StrategyConfig (environment fills the gaps)."""
    kind = StrategyKind.parse(args.strategy)
    if kind is StrategyKind.RSI_REVERSION:
        parameters = {"period": args.period}
        if args.oversold is not None:
            parameters["oversold"] = args.oversold
        if args.overbought is not None:
            parameters["overbought"] = args.overbought
    else:
        parameters = {"short_period": args.short, "long_period": args.long}

    return StrategyConfig.from_dict({
        "strategy": kind.value,
        "parameters": parameters,
        "initial_capital": args.initial_capital,
        "risk": {
            "position_sizing_percent": args.position_sizing,
            "stop_loss_percent": args.stop_loss,
            "take_profit_percent": args.take_profit,
        },
    })


def main(argv=None) -> int:
    """
    Main entrypoint.

    Steps:
      1. Configure logging and parse arguments.
      2. Load the price history CSV.
      3. Run the backtest and print a metrics summary.
      4. Optionally save the full result as JSON.
    """
    configure_logging()
    args = parse_args(argv)

    try:
        config = build_config(args)
        bars = read_price_history_csv(args.csv)
        result = run_backtest(config, bars)
    except FileNotFoundError as e:
        print(f"✗ {e}")
        return 2
    except BacktestError as e:
        print(f"✗ {type(e).__name__}: {e}")
        return 2

    metrics = result.metrics
    kind = StrategyKind.parse(config.strategy_kind)
    print("=" * 60)
    print(f"{kind.value} backtest: {args.csv}")
    print("=" * 60)
    print(f"  Bars:               {len(bars):>12,}  ({bars[0].date} to {bars[-1].date})")
    print(f"  Initial Capital:    ${config.initial_capital:>12,.2f}")
    print(f"  Final Equity:       ${metrics.final_equity:>12,.2f}")
    print(f"  Total Return:       {metrics.total_return_percent:>12.2f}%")
    print(f"  Max Drawdown:       {metrics.max_drawdown_percent:>12.2f}%")
    print(f"  Trades:             {metrics.total_trades:>12,}  ({metrics.closed_trades} closed)")
    if metrics.win_rate_percent is not None:
        print(f"  Win Rate:           {metrics.win_rate_percent:>12.2f}%")
    if metrics.sharpe_ratio is not None:
        print(f"  Sharpe Ratio:       {metrics.sharpe_ratio:>12.2f}")
    print("-" * 60)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        print(f"  ✓ Saved result: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
