"""
Readers that turn tabular price history into PriceBar sequences.

**Conceptual**: The engine consumes `list[PriceBar]`, but price history usually
lives in a CSV or a DataFrame (e.g., one written by a data-fetching script with
newest-first rows). These helpers are the single bridge between the two:
they parse dates, pick the close column, sort oldest-first, and validate the
result against the PriceBar contract.

**Rule**: Engine and strategy code never call pd.read_csv directly; local price
history enters the system through `read_price_history_csv` only.
"""

from pathlib import Path

import pandas as pd

from financify.backtesting.models import PriceBar
from financify.data.schemas import (
    CLOSE_COLUMNS,
    DATE_COLUMNS,
    OPTIONAL_PRICE_COLUMNS,
    validate_price_bars,
)
from financify.errors import PriceDataError


def _first_present(df: pd.DataFrame, candidates: list[str]) -> str | None:
    for name in candidates:
        if name in df.columns:
            return name
    return None


def _optional_float(value) -> float | None:
    if pd.isna(value):
        return None
    return float(value)


def price_bars_from_frame(
    df: pd.DataFrame,
    context: str | None = None,
) -> list[PriceBar]:
    """
    Convert a price DataFrame into validated, chronological PriceBars.

    **Functionally**:
      - Date column: `timestamp` or `date`; parsed as ISO 8601 if not already
        datetime. Timezone-aware stamps are converted to UTC; only the
        calendar date is kept.
      - Close column: `closing_price` or `close`.
      - Optional open/high/low columns are carried through when present.
      - Rows are sorted ascending (either input order is accepted).

    Args:
        df: DataFrame with at least a date column and a close column.
        context: Optional source description for error messages.

    Returns:
        List of PriceBar, oldest first.

    Raises:
        PriceDataError: If required columns are missing, dates cannot be parsed,
                        or the series violates the PriceBar contract.
        InsufficientDataError: If fewer than two rows remain.
    """
    ctx = f"{context}: " if context else ""

    date_col = _first_present(df, DATE_COLUMNS)
    close_col = _first_present(df, CLOSE_COLUMNS)
    if date_col is None or close_col is None:
        raise PriceDataError(
            f"{ctx}Price data must have a date column {DATE_COLUMNS} and a close "
            f"column {CLOSE_COLUMNS}. Found columns: {list(df.columns)}."
        )

    frame = df.copy()
    if not pd.api.types.is_datetime64_any_dtype(frame[date_col]):
        try:
            frame[date_col] = pd.to_datetime(frame[date_col], format="ISO8601")
        except (ValueError, TypeError) as e:
            raise PriceDataError(
                f"{ctx}Failed to parse '{date_col}' column as datetime. "
                f"Expected ISO 8601 dates (e.g., '2024-01-15'). Error: {e}"
            )
    if frame[date_col].isna().any():
        raise PriceDataError(f"{ctx}'{date_col}' column contains missing dates.")
    if frame[date_col].dt.tz is not None:
        frame[date_col] = frame[date_col].dt.tz_convert("UTC").dt.tz_localize(None)

    frame = frame.sort_values(date_col, ascending=True).reset_index(drop=True)

    optional_cols = {
        field_name: _first_present(frame, candidates)
        for field_name, candidates in OPTIONAL_PRICE_COLUMNS.items()
    }

    bars = []
    for row in frame.itertuples(index=False):
        values = row._asdict()
        extras = {
            field_name: _optional_float(values[col])
            for field_name, col in optional_cols.items()
            if col is not None
        }
        bars.append(
            PriceBar(
                date=values[date_col].date(),
                close=float(values[close_col]),
                **extras,
            )
        )

    validate_price_bars(bars, context=context)
    return bars


def read_price_history_csv(path: Path | str) -> list[PriceBar]:
    """
    Read a local price-history CSV into validated PriceBars.

    Args:
        path: Path to a CSV with a date column and a close column
              (see `price_bars_from_frame`).

    Returns:
        List of PriceBar, oldest first.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        PriceDataError: If the CSV can't be parsed or violates the contract.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(
            f"Price history CSV not found: {path}. "
            f"Ensure the file exists and the path is correct."
        )

    try:
        df = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise PriceDataError(f"{path}: Failed to read CSV. Error: {e}")

    return price_bars_from_frame(df, context=str(path))
