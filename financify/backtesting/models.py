"""
Data model for backtest inputs and outputs.

**Conceptual**: A backtest is a pure function of (StrategyConfig, price bars)
to BacktestResult. Every record in this module is a frozen dataclass: once
the engine appends a Trade or an EquityPoint, nothing downstream can change it.
That keeps results reproducible and safe to share between threads.

Records here:
  - Inputs: PriceBar, RiskConfig, StrategyConfig, StrategyKind.
  - Per-bar decisions: Signal.
  - Outputs: Trade, EquityPoint, PerformanceMetrics, BacktestResult.
"""

import math
import re
from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping, Optional

import pandas as pd

from financify.errors import ConfigurationError, UnsupportedStrategyError


class StrategyKind(Enum):
    """
    Strategy variants the engine knows how to run.

    Values are the display names the host application stores on a bot
    ("SMA Crossover", ...), so payloads can be parsed without a lookup table.
    """
    SMA_CROSSOVER = "SMA Crossover"
    EMA_CROSSOVER = "EMA Crossover"
    RSI_REVERSION = "RSI Reversion"

    @classmethod
    def parse(cls, value: "StrategyKind | str") -> "StrategyKind":
        """
        Resolve an enum member from itself, its display value, or its name.

        Name matching is case-insensitive ("sma_crossover" works); display
        values must match exactly.

        Raises:
            UnsupportedStrategyError: If the value names no known strategy.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for kind in cls:
                if value == kind.value or value.upper() == kind.name:
                    return kind
        known = [kind.value for kind in cls]
        raise UnsupportedStrategyError(
            f'Strategy "{value}" is not implemented. Known strategies: {known}.'
        )


class Signal(Enum):
    """Discrete per-bar trading decision."""
    BUY = "BUY"
    SELL = "SELL"
    NONE = "NONE"


class TradeAction(Enum):
    """Side of an executed trade."""
    BUY = "BUY"
    SELL = "SELL"


class ExitReason(Enum):
    """Why a position was closed."""
    SIGNAL = "SIGNAL"
    STOP_LOSS = "STOP_LOSS"
    TAKE_PROFIT = "TAKE_PROFIT"


@dataclass(frozen=True)
class PriceBar:
    """
    One bar of historical price data.

    Only `date` and `close` drive the engine; open/high/low are carried for
    callers that chart or export the series.

    Attributes:
        date: Calendar date of the bar.
        close: Closing price. Must be positive (checked by validate_price_bars).
        open: Optional opening price.
        high: Optional high price.
        low: Optional low price.
    """
    date: date
    close: float
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None


@dataclass(frozen=True)
class RiskConfig:
    """
    Position sizing and protective exit bands.

    **Conceptual**: Every BUY commits `position_sizing_percent` of current
    equity. While a position is open, the engine measures the move from the
    most recent entry price; crossing either band forces a SELL that overrides
    whatever the strategy said on that bar.

    `math.inf` disables a band: no finite move is ever <= -inf or >= +inf.

    Attributes:
        position_sizing_percent: Percent of current equity per BUY, in (0, 100].
        stop_loss_percent: Loss from latest entry that forces a SELL (>= 0).
        take_profit_percent: Gain from latest entry that forces a SELL (>= 0).

    Raises:
        ConfigurationError: On construction, if any value is out of range or NaN.
    """
    position_sizing_percent: float
    stop_loss_percent: float
    take_profit_percent: float

    def __post_init__(self):
        """Validate risk settings after initialization."""
        for name in ("position_sizing_percent", "stop_loss_percent", "take_profit_percent"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
        sizing = self.position_sizing_percent
        if math.isnan(sizing) or not 0 < sizing <= 100:
            raise ConfigurationError(
                f"position_sizing_percent must be in (0, 100], got {sizing}"
            )
        for name in ("stop_loss_percent", "take_profit_percent"):
            value = getattr(self, name)
            if math.isnan(value) or value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")

    @classmethod
    def disabled(cls, position_sizing_percent: float = 100.0) -> "RiskConfig":
        """Risk config with stop-loss and take-profit switched off."""
        return cls(
            position_sizing_percent=position_sizing_percent,
            stop_loss_percent=math.inf,
            take_profit_percent=math.inf,
        )


# camelCase keys used by the host application's bot payloads
_PARAMETER_ALIASES = {
    "shortSmaPeriod": "short_period",
    "longSmaPeriod": "long_period",
    "shortEmaPeriod": "short_period",
    "longEmaPeriod": "long_period",
    "rsiPeriod": "period",
}


def _snake_case(key: str) -> str:
    if key in _PARAMETER_ALIASES:
        return _PARAMETER_ALIASES[key]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


@dataclass(frozen=True)
class StrategyConfig:
    """
    Everything needed to run one backtest, apart from the price data.

    Attributes:
        strategy_kind: Which signal generator to use. Strings are resolved by
                       the orchestrator (unknown names fail there).
        parameters: Strategy-specific parameters, e.g.
                    {"short_period": 20, "long_period": 50} for SMA Crossover.
        initial_capital: Starting cash. Must be positive.
        risk: Position sizing and exit bands.

    Raises:
        ConfigurationError: On construction, if initial_capital is not positive.
    """
    strategy_kind: "StrategyKind | str"
    parameters: Mapping[str, float] = field(default_factory=dict)
    initial_capital: float = 10_000.0
    risk: RiskConfig = field(default_factory=lambda: RiskConfig.disabled())

    def __post_init__(self):
        """Validate capital after initialization."""
        capital = self.initial_capital
        if isinstance(capital, bool) or not isinstance(capital, (int, float)):
            raise ConfigurationError(f"initial_capital must be a number, got {capital!r}")
        if math.isnan(capital) or math.isinf(capital) or capital <= 0:
            raise ConfigurationError(f"initial_capital must be positive and finite, got {capital}")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], defaults=None) -> "StrategyConfig":
        """
        Build a StrategyConfig from a host-application bot payload.

        **Expected shape** (camelCase, as stored by the bot builder):
          ```
          {
              "strategy": "SMA Crossover",
              "strategyParams": {"shortSmaPeriod": 20, "longSmaPeriod": 50},
              "initialCapital": 10000,
              "risk": {"positionSizing": 5, "stopLoss": 10, "takeProfit": 20},
          }
          ```
        Snake_case keys (`strategy_kind`, `parameters`, `initial_capital`,
        `position_sizing_percent`, ...) are accepted as well. Capital and risk
        fields that are absent or None fall back to `defaults` (BacktestDefaults;
        loaded from the environment when omitted). An explicit 0 capital is
        rejected like any other non-positive value.

        Raises:
            ConfigurationError: If the strategy name is missing or a value is invalid.
        """
        if defaults is None:
            from financify.config.settings import get_settings
            defaults = get_settings().defaults

        strategy = payload.get("strategy", payload.get("strategy_kind"))
        if not strategy:
            raise ConfigurationError("Bot configuration has no strategy selected.")

        raw_params = payload.get("strategyParams", payload.get("parameters")) or {}
        parameters = {_snake_case(key): value for key, value in raw_params.items()}

        risk_payload = payload.get("risk") or {}

        def pick(*keys, default):
            for key in keys:
                if risk_payload.get(key) is not None:
                    try:
                        return float(risk_payload[key])
                    except (TypeError, ValueError):
                        raise ConfigurationError(
                            f"risk.{key} must be a number, got {risk_payload[key]!r}"
                        )
            return default

        risk = RiskConfig(
            position_sizing_percent=pick(
                "positionSizing", "position_sizing_percent",
                default=defaults.position_sizing_percent,
            ),
            stop_loss_percent=pick(
                "stopLoss", "stop_loss_percent", default=defaults.stop_loss_percent,
            ),
            take_profit_percent=pick(
                "takeProfit", "take_profit_percent", default=defaults.take_profit_percent,
            ),
        )

        capital = payload.get("initialCapital", payload.get("initial_capital"))
        if capital is None:
            capital = defaults.initial_capital
        try:
            capital = float(capital)
        except (TypeError, ValueError):
            raise ConfigurationError(f"initialCapital must be a number, got {capital!r}")

        return cls(
            strategy_kind=strategy,
            parameters=parameters,
            initial_capital=capital,
            risk=risk,
        )


@dataclass(frozen=True)
class Trade:
    """
    One executed trade.

    Attributes:
        date: Bar date the trade executed on (at that bar's close).
        action: BUY or SELL.
        price: Execution price (the bar's close).
        quantity: Shares traded; always positive. Fractional shares allowed.
        profit_and_loss: Realized P&L, SELL only: (exit - latest entry) * quantity.
        exit_reason: Why the position closed, SELL only.
    """
    date: date
    action: TradeAction
    price: float
    quantity: float
    profit_and_loss: Optional[float] = None
    exit_reason: Optional[ExitReason] = None

    def to_dict(self) -> dict:
        """Plain-JSON representation (enums as strings, date as ISO string)."""
        record = {
            "date": self.date.isoformat(),
            "action": self.action.value,
            "price": self.price,
            "quantity": self.quantity,
        }
        if self.action is TradeAction.SELL:
            record["profit_and_loss"] = self.profit_and_loss
            record["exit_reason"] = self.exit_reason.value if self.exit_reason else None
        return record


@dataclass(frozen=True)
class EquityPoint:
    """Total account value (cash + marked position) at a bar's close."""
    date: date
    value: float

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "value": self.value}


@dataclass(frozen=True)
class PerformanceMetrics:
    """
    Summary statistics derived from an equity curve and trade log.

    Degenerate inputs resolve to 0 (percentages, counts) or None (ratios that
    are not applicable); NaN and infinity never appear.

    Attributes:
        total_return_percent: (final - initial) / initial * 100. Any real number.
        max_drawdown_percent: Largest peak-to-trough fall, in [0, 100].
        final_equity: Last equity curve value.
        total_trades: Number of BUY and SELL trades.
        closed_trades: Number of SELL trades (realized round trips).
        winning_trades: SELL trades with positive realized P&L.
        win_rate_percent: winning / closed * 100, None with no closed trades.
        sharpe_ratio: Annualized Sharpe of bar-to-bar returns, None when undefined.
    """
    total_return_percent: float = 0.0
    max_drawdown_percent: float = 0.0
    final_equity: float = 0.0
    total_trades: int = 0
    closed_trades: int = 0
    winning_trades: int = 0
    win_rate_percent: Optional[float] = None
    sharpe_ratio: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BacktestResult:
    """
    Results from a backtest run.

    Attributes:
        metrics: Summary metrics.
        trades: Trades in order of occurrence.
        equity_curve: One point per input bar, bar 0 being the initial capital.
        signals: The strategy's raw per-bar signals (before risk overrides).
        config: The StrategyConfig that produced this result.
    """
    metrics: PerformanceMetrics
    trades: tuple = ()
    equity_curve: tuple = ()
    signals: tuple = ()
    config: Optional[StrategyConfig] = None

    @property
    def total_return_percent(self) -> float:
        return self.metrics.total_return_percent

    @property
    def max_drawdown_percent(self) -> float:
        return self.metrics.max_drawdown_percent

    def equity_series(self) -> pd.Series:
        """Equity curve as a pandas Series indexed by bar date."""
        return pd.Series(
            data=[point.value for point in self.equity_curve],
            index=pd.to_datetime([point.date for point in self.equity_curve]),
            name="equity",
            dtype=float,
        )

    def to_dict(self) -> dict:
        """
        Merged results mapping: every metric at the top level, plus the trade
        log and equity curve as lists of plain dicts.
        """
        result = self.metrics.to_dict()
        result["trades"] = [trade.to_dict() for trade in self.trades]
        result["equity_curve"] = [point.to_dict() for point in self.equity_curve]
        return result
