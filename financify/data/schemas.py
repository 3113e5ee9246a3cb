"""
Price series contract and validation.

**Conceptual**: The engine assumes its input is a clean, chronological series
of bars. This module is the gatekeeper that makes that assumption true:
every series is checked here before a single signal is generated, so the
simulation loop never needs defensive checks of its own.

**Contract** for a sequence of PriceBar:
  - At least MIN_PRICE_BARS bars (one seed bar plus one bar to trade on).
  - Dates strictly increasing (chronological, no duplicates).
  - Closing prices finite and strictly positive (a zero close would make
    the stop-loss percentage undefined).

Column contract for tabular price data (CSV or DataFrame), matching the
canonical raw-price layout used elsewhere in the project:
  - Date column: `timestamp` (preferred) or `date`.
  - Close column: `closing_price` (preferred) or `close`.
  - Optional: `open_price`, `high_price`, `low_price`.
"""

import math
from typing import Sequence

from financify.backtesting.models import PriceBar
from financify.errors import InsufficientDataError, PriceDataError

MIN_PRICE_BARS = 2

DATE_COLUMNS = ["timestamp", "date"]
CLOSE_COLUMNS = ["closing_price", "close"]
OPTIONAL_PRICE_COLUMNS = {
    "open": ["open_price", "open"],
    "high": ["high_price", "high"],
    "low": ["low_price", "low"],
}


def validate_price_bars(
    bars: Sequence[PriceBar],
    context: str | None = None,
) -> None:
    """
    Validate that a price series conforms to the PriceBar contract.

    Args:
        bars: Price bars in the order they will be simulated.
        context: Optional description of the source (e.g., "MSFT" or a file
                 path), prefixed to error messages.

    Raises:
        InsufficientDataError: If fewer than MIN_PRICE_BARS bars are given.
        PriceDataError: If a close is non-positive/non-finite or dates are
                        not strictly increasing.
    """
    ctx = f"{context}: " if context else ""

    if len(bars) < MIN_PRICE_BARS:
        raise InsufficientDataError(
            f"{ctx}Not enough historical data: got {len(bars)} bar(s), "
            f"need at least {MIN_PRICE_BARS}."
        )

    for i, bar in enumerate(bars):
        close = bar.close
        if close is None or not math.isfinite(close) or close <= 0:
            raise PriceDataError(
                f"{ctx}Bar {i} ({bar.date}) has invalid closing price {close!r}. "
                f"Closing prices must be finite and strictly positive."
            )
        if i > 0 and not bars[i - 1].date < bar.date:
            raise PriceDataError(
                f"{ctx}Bars are not in strictly ascending date order: "
                f"bar {i - 1} is {bars[i - 1].date}, bar {i} is {bar.date}. "
                f"Hint: sort oldest first and remove duplicate dates."
            )


def closing_prices(bars: Sequence[PriceBar]) -> list[float]:
    """Extract the close-price series, as floats, in bar order."""
    return [float(bar.close) for bar in bars]
