"""
StrategyKind -> SignalGenerator dispatch.

Adding a strategy means adding a StrategyKind member, writing a class that
satisfies the SignalGenerator protocol, and registering it here. The engine
looks generators up by enum member only; there is no string switch.
"""

from financify.backtesting.models import StrategyKind
from financify.errors import UnsupportedStrategyError
from financify.strategies.base import SignalGenerator
from financify.strategies.ema_crossover import EmaCrossoverStrategy
from financify.strategies.rsi_reversion import RsiReversionStrategy
from financify.strategies.sma_crossover import SmaCrossoverStrategy

_REGISTRY: dict[StrategyKind, SignalGenerator] = {}


def register_strategy(generator: SignalGenerator) -> None:
    """Register (or replace) the generator for `generator.kind`."""
    _REGISTRY[generator.kind] = generator


def get_signal_generator(kind: "StrategyKind | str") -> SignalGenerator:
    """
    Look up the generator for a strategy kind.

    Args:
        kind: StrategyKind member, its display value ("SMA Crossover") or name.

    Raises:
        UnsupportedStrategyError: If the kind is unknown or has no generator.
    """
    resolved = StrategyKind.parse(kind)
    try:
        return _REGISTRY[resolved]
    except KeyError:
        raise UnsupportedStrategyError(
            f'Strategy "{resolved.value}" is not implemented. '
            f"Implemented strategies: {sorted(k.value for k in _REGISTRY)}."
        )


def supported_strategies() -> list[StrategyKind]:
    """Strategy kinds with a registered generator, in enum order."""
    return [kind for kind in StrategyKind if kind in _REGISTRY]


register_strategy(SmaCrossoverStrategy())
register_strategy(EmaCrossoverStrategy())
register_strategy(RsiReversionStrategy())
