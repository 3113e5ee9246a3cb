"""
Pytest configuration file.

Ensures the repo root is on sys.path so that 'import financify...' works, and
provides shared price-bar fixtures.
"""
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# Add the repo root to sys.path
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from financify.backtesting.models import PriceBar  # noqa: E402
from financify.config.settings import reset_settings  # noqa: E402


@pytest.fixture
def make_bars():
    """
    Factory fixture: closing prices -> consecutive daily PriceBars.

    Usage:
        bars = make_bars([100, 101, 102])
        bars = make_bars([100, 101], start=date(2024, 3, 1))
    """
    def _make(closes, start=date(2024, 1, 1)):
        return [
            PriceBar(date=start + timedelta(days=i), close=float(close))
            for i, close in enumerate(closes)
        ]
    return _make


@pytest.fixture
def clean_settings(monkeypatch):
    """Clear FINANCIFY_* variables and the settings cache around a test."""
    for name in (
        "FINANCIFY_INITIAL_CAPITAL",
        "FINANCIFY_POSITION_SIZING_PERCENT",
        "FINANCIFY_STOP_LOSS_PERCENT",
        "FINANCIFY_TAKE_PROFIT_PERCENT",
        "FINANCIFY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()
