"""
Signal generator interface for backtesting.

**Conceptual**: This module defines the contract between strategies and the
simulation engine. A signal generator turns the full closing-price series and
the strategy's parameters into one discrete Signal per bar. The engine never
knows which strategy produced the signals; it only walks them bar by bar and
applies risk rules on top.

**Why precompute the whole signal sequence?**
  - Indicators are computed once over the full series (O(n)), not re-derived
    at every bar.
  - Signals at bar i only use closes up to and including bar i (trailing
    windows), so precomputing does not leak future data.
  - The sequence can be inspected and tested independently of the engine.

**Contract** every generator honours:
  - Output length equals input length.
  - Index 0 is always Signal.NONE (there is no prior bar to compare against).
  - Undefined indicator values (warm-up) produce Signal.NONE, never an error.
  - Parameter problems raise ConfigurationError from `validate_parameters`.
"""

from typing import Any, Mapping, Protocol, Sequence

from financify.backtesting.models import Signal, StrategyKind
from financify.errors import ConfigurationError


class SignalGenerator(Protocol):
    """
    Strategy interface: (prices, parameters) -> per-bar signals.

    This is a Protocol (structural typing): any object with these members can
    be registered for a StrategyKind in `financify.strategies.registry`.

    Attributes:
        kind: The StrategyKind this generator implements.
    """

    kind: StrategyKind

    def validate_parameters(self, params: Mapping[str, Any]) -> dict:
        """
        Check and normalize strategy parameters.

        Returns:
            A new dict with parameters coerced to their working types
            (e.g., integral floats from JSON become ints) and optional
            parameters filled with defaults.

        Raises:
            ConfigurationError: If a required parameter is missing or invalid.
        """
        ...

    def minimum_bars(self, params: Mapping[str, Any]) -> int:
        """
        Shortest series on which a signal can fire: the longest indicator
        lookback plus one bar, since a cross compares two consecutive
        defined values.
        """
        ...

    def generate_signals(
        self,
        prices: Sequence[float],
        params: Mapping[str, Any],
    ) -> list[Signal]:
        """
        Produce one Signal per price.

        Args:
            prices: Closing prices, oldest first.
            params: Strategy parameters (validated internally).

        Returns:
            List of Signal, same length as prices, index 0 == Signal.NONE.
        """
        ...


def require_period(params: Mapping[str, Any], name: str, kind: StrategyKind) -> int:
    """
    Fetch a required lookback parameter as a positive int.

    Integral floats (20.0, as JSON often delivers) are accepted and coerced.

    Raises:
        ConfigurationError: If missing, non-numeric, non-integral, or < 1.
    """
    if name not in params or params[name] is None:
        raise ConfigurationError(
            f'{kind.value} requires parameter "{name}". Got parameters: {sorted(params)}.'
        )
    value = params[name]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f'{kind.value} parameter "{name}" must be a number, got {value!r}.')
    if value != int(value) or value < 1:
        raise ConfigurationError(
            f'{kind.value} parameter "{name}" must be a positive integer, got {value!r}.'
        )
    return int(value)


def optional_level(
    params: Mapping[str, Any],
    name: str,
    default: float,
    kind: StrategyKind,
) -> float:
    """
    Fetch an optional threshold parameter as a float in the open range (0, 100).

    Raises:
        ConfigurationError: If present but non-numeric or out of range.
    """
    value = params.get(name)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f'{kind.value} parameter "{name}" must be a number, got {value!r}.')
    if not 0 < value < 100:
        raise ConfigurationError(f'{kind.value} parameter "{name}" must be in (0, 100), got {value}.')
    return float(value)


def empty_signals(length: int) -> list[Signal]:
    """All-NONE signal sequence of the given length."""
    return [Signal.NONE] * length
