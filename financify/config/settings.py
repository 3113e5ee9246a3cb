"""
Configuration settings for the backtesting core.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). All settings are validated
at load time, ensuring fail-fast behavior if configuration is invalid.

The engine itself never reads settings: `run_backtest` is a pure function of
its arguments. Settings only supply *defaults* to the outer surfaces that build
a StrategyConfig from partial input (`StrategyConfig.from_dict`, the CLI action)
and the log level for `configure_logging`.

**Why centralized config?**
  - Single source of truth for defaults (initial capital, risk bands).
  - Easy to test (inject fake settings instead of reading from environment).
  - Fail-fast validation (bad number in .env -> clear error at startup).

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from financify.errors import ConfigurationError

# Load .env from project root (dev/local environments); a missing file is fine
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _read_float(name: str, default: float) -> float:
    """Read a float environment variable, raising ConfigurationError if malformed."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got: {raw!r}")


@dataclass(frozen=True)
class BacktestDefaults:
    """
    Default values applied when a bot configuration omits them.

    **Conceptual**: The host application lets users build a bot with a handful
    of fields and fills in the rest. These defaults mirror the bot builder:
    $10,000 starting capital, 5% of equity per entry, 10% stop-loss and 20%
    take-profit.

    Attributes:
        initial_capital: Starting capital in base currency. Must be positive.
        position_sizing_percent: Percent of current equity committed per BUY.
                                 Must be in (0, 100].
        stop_loss_percent: Loss (percent from latest entry) that forces a SELL.
        take_profit_percent: Gain (percent from latest entry) that forces a SELL.
    """
    initial_capital: float = 10_000.0
    position_sizing_percent: float = 5.0
    stop_loss_percent: float = 10.0
    take_profit_percent: float = 20.0

    def __post_init__(self):
        """Validate defaults after initialization."""
        if self.initial_capital <= 0:
            raise ConfigurationError(
                f"FINANCIFY_INITIAL_CAPITAL must be positive, got {self.initial_capital}"
            )
        if not 0 < self.position_sizing_percent <= 100:
            raise ConfigurationError(
                "FINANCIFY_POSITION_SIZING_PERCENT must be in (0, 100], "
                f"got {self.position_sizing_percent}"
            )
        if self.stop_loss_percent < 0 or self.take_profit_percent < 0:
            raise ConfigurationError(
                "FINANCIFY_STOP_LOSS_PERCENT and FINANCIFY_TAKE_PROFIT_PERCENT must be >= 0"
            )

    @classmethod
    def from_env(cls) -> "BacktestDefaults":
        """
        Load backtest defaults from environment variables.

        **Environment variables** (all optional):
          - FINANCIFY_INITIAL_CAPITAL (default 10000)
          - FINANCIFY_POSITION_SIZING_PERCENT (default 5)
          - FINANCIFY_STOP_LOSS_PERCENT (default 10)
          - FINANCIFY_TAKE_PROFIT_PERCENT (default 20)

        Returns:
            BacktestDefaults with values loaded from environment.

        Raises:
            ConfigurationError: If a variable is not a number or out of range.
        """
        return cls(
            initial_capital=_read_float("FINANCIFY_INITIAL_CAPITAL", 10_000.0),
            position_sizing_percent=_read_float("FINANCIFY_POSITION_SIZING_PERCENT", 5.0),
            stop_loss_percent=_read_float("FINANCIFY_STOP_LOSS_PERCENT", 10.0),
            take_profit_percent=_read_float("FINANCIFY_TAKE_PROFIT_PERCENT", 20.0),
        )


@dataclass(frozen=True)
class LoggingSettings:
    """
    Log output configuration.

    Attributes:
        level: Minimum level for the stderr sink ("DEBUG", "INFO", "WARNING", ...).
               Defaults to WARNING so library use stays quiet.
    """
    level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        """Load logging settings from FINANCIFY_LOG_LEVEL."""
        return cls(level=os.getenv("FINANCIFY_LOG_LEVEL", "WARNING").upper())


@dataclass(frozen=True)
class Settings:
    """
    Global settings for the backtesting core.

    **Usage pattern**:
      ```python
      from financify.config.settings import get_settings

      settings = get_settings()
      capital = settings.defaults.initial_capital
      ```

    Attributes:
        defaults: Defaults for partially specified bot configurations.
        logging: Log sink configuration.
    """
    defaults: BacktestDefaults = field(default_factory=BacktestDefaults)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load global settings from environment variables.

        Raises:
            ConfigurationError: If any numeric variable is malformed or out of range.
        """
        return cls(
            defaults=BacktestDefaults.from_env(),
            logging=LoggingSettings.from_env(),
        )


# Cached on first access; tests call reset_settings() after changing the environment
_default_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings singleton.

    Settings are loaded from environment on first call, then cached for reuse.
    Tests can bypass this by constructing their own Settings objects.

    Returns:
        Global Settings singleton.

    Raises:
        ConfigurationError: If the environment holds invalid values.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env()

    return _default_settings


def reset_settings():
    """
    Reset the global settings singleton (for testing).

    **Testing pattern**:
      ```python
      def test_something(monkeypatch):
          monkeypatch.setenv("FINANCIFY_INITIAL_CAPITAL", "5000")
          reset_settings()
          assert get_settings().defaults.initial_capital == 5000.0
      ```
    """
    global _default_settings
    _default_settings = None
