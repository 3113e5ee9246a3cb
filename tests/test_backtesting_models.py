"""
Tests for backtest input records and payload parsing.
"""

import math

import pytest

from financify.backtesting.models import RiskConfig, StrategyConfig, StrategyKind
from financify.config.settings import BacktestDefaults
from financify.errors import ConfigurationError, UnsupportedStrategyError

DEFAULTS = BacktestDefaults()


def test_from_dict_bot_payload():
    """camelCase bot payloads map onto StrategyConfig."""
    config = StrategyConfig.from_dict(
        {
            "strategy": "SMA Crossover",
            "strategyParams": {"shortSmaPeriod": 10, "longSmaPeriod": 30},
            "initialCapital": 25000,
            "risk": {"positionSizing": 10, "stopLoss": 5, "takeProfit": 15},
        },
        defaults=DEFAULTS,
    )

    assert config.strategy_kind == "SMA Crossover"
    assert config.parameters == {"short_period": 10, "long_period": 30}
    assert config.initial_capital == 25000.0
    assert config.risk == RiskConfig(10.0, 5.0, 15.0)


def test_from_dict_fills_defaults():
    """Absent or None capital and risk fields come from the defaults."""
    config = StrategyConfig.from_dict(
        {"strategy": "RSI Reversion", "strategyParams": {"rsiPeriod": 14}, "initialCapital": None},
        defaults=DEFAULTS,
    )

    assert config.parameters == {"period": 14}
    assert config.initial_capital == 10_000.0
    assert config.risk == RiskConfig(5.0, 10.0, 20.0)


def test_from_dict_snake_case_keys():
    """snake_case payloads are accepted too."""
    config = StrategyConfig.from_dict(
        {
            "strategy_kind": "EMA_CROSSOVER",
            "parameters": {"short_period": 12, "long_period": 26},
            "initial_capital": 100,
            "risk": {"position_sizing_percent": 100},
        },
        defaults=DEFAULTS,
    )

    assert StrategyKind.parse(config.strategy_kind) is StrategyKind.EMA_CROSSOVER
    assert config.risk.position_sizing_percent == 100.0
    assert config.risk.stop_loss_percent == 10.0


def test_from_dict_uses_environment_defaults(clean_settings, monkeypatch):
    """Without explicit defaults the FINANCIFY_* environment applies."""
    monkeypatch.setenv("FINANCIFY_INITIAL_CAPITAL", "777")

    config = StrategyConfig.from_dict({"strategy": "SMA Crossover"})

    assert config.initial_capital == 777.0


def test_from_dict_requires_strategy():
    """A bot with no strategy selected cannot be backtested."""
    with pytest.raises(ConfigurationError, match="no strategy"):
        StrategyConfig.from_dict({"strategyParams": {}}, defaults=DEFAULTS)


@pytest.mark.parametrize("capital", [0, -1, float("nan"), float("inf"), "1000"])
def test_strategy_config_rejects_bad_capital(capital):
    """Capital must be a positive finite number."""
    with pytest.raises(ConfigurationError):
        StrategyConfig(StrategyKind.SMA_CROSSOVER, initial_capital=capital)


@pytest.mark.parametrize(
    "sizing, stop, take",
    [(0, 10, 20), (101, 10, 20), (5, -1, 20), (5, 10, float("nan"))],
)
def test_risk_config_rejects_out_of_range(sizing, stop, take):
    """Sizing in (0, 100], bands >= 0."""
    with pytest.raises(ConfigurationError):
        RiskConfig(sizing, stop, take)


def test_risk_config_disabled_uses_infinite_bands():
    """Disabled risk never triggers."""
    risk = RiskConfig.disabled()

    assert risk.position_sizing_percent == 100.0
    assert math.isinf(risk.stop_loss_percent)
    assert math.isinf(risk.take_profit_percent)


def test_strategy_kind_parse_unknown():
    """Unknown names raise UnsupportedStrategyError listing known strategies."""
    with pytest.raises(UnsupportedStrategyError, match="SMA Crossover"):
        StrategyKind.parse("MACD")


@pytest.mark.parametrize("capital", [0, -100])
def test_from_dict_rejects_explicit_non_positive_capital(capital):
    """Only a missing capital falls back; 0 is an invalid value, not "unset"."""
    with pytest.raises(ConfigurationError, match="initial_capital"):
        StrategyConfig.from_dict(
            {"strategy": "SMA Crossover", "initialCapital": capital}, defaults=DEFAULTS
        )


def test_from_dict_rejects_non_numeric_risk():
    """Risk values that are not numbers are configuration errors."""
    with pytest.raises(ConfigurationError, match="stopLoss"):
        StrategyConfig.from_dict(
            {"strategy": "SMA Crossover", "risk": {"stopLoss": "ten"}}, defaults=DEFAULTS
        )


@pytest.mark.parametrize(
    "sizing, stop, take",
    [("5", 10, 20), (5, None, 20), (5, 10, True)],
)
def test_risk_config_rejects_non_numeric(sizing, stop, take):
    """Non-numbers raise ConfigurationError, not a bare TypeError."""
    with pytest.raises(ConfigurationError, match="must be a number"):
        RiskConfig(sizing, stop, take)
