import pytest
from datetime import date, timedelta
from unittest.mock import MagicMock

from models import PricePoint
from price_history import build_price_history
from factors import default_category_weights, default_sub_factor_weights


def make_prices(values, start="2024-01-01"):
    base = date.fromisoformat(start)
    return [PricePoint((base + timedelta(days=i)).isoformat(), float(v)) for i, v in enumerate(values)]


@pytest.fixture(scope="session")
def history():
    return build_price_history(seed=42)


@pytest.fixture
def category_weights():
    return default_category_weights()


@pytest.fixture
def sub_weights():
    return default_sub_factor_weights()


@pytest.fixture
def fake_clock():
    clock = MagicMock()
    clock.return_value = 0.0
    return clock
