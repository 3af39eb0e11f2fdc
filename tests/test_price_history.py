import math

import pytest

from config import PRICE_HISTORY
from models import round_half_up
from price_history import build_price_history, filter_by_range, next_dates, to_series
from sequence import SeededSequence


def test_length_and_dates(history):
    assert len(history) == 365
    assert history[0].date == "2024-01-01"
    assert history[1].date == "2024-01-02"
    assert history[-1].date == "2024-12-30"


def test_pinned_first_points(history):
    assert history[0].price == 1947.15
    assert history[1].price == 1948.50


def test_second_point_follows_recurrence(history):
    rand = SeededSequence(42)
    raw = PRICE_HISTORY["base_price"]
    for i in range(2):
        noise = (rand.next() - 0.5) * 20
        raw = raw + 0.15 + noise * 0.3
    seasonal = 30 * math.sin(2 * math.pi / 180)
    assert history[1].price == round_half_up(raw + seasonal)


def test_deterministic_for_seed():
    assert build_price_history(seed=42) == build_price_history(seed=42)
    assert build_price_history(seed=43) != build_price_history(seed=42)


def test_accepts_existing_sequence():
    assert build_price_history(sequence=SeededSequence(42)) == build_price_history(seed=42)


def test_prices_have_two_decimals(history):
    for point in history:
        assert round(point.price, 2) == point.price


def test_filter_by_range(history):
    week = filter_by_range(history, "1W")
    assert len(week) == 7
    assert week[-1] == history[-1]
    assert len(filter_by_range(history, "1Y")) == 365


def test_filter_by_range_rejects_unknown(history):
    with pytest.raises(ValueError):
        filter_by_range(history, "2Y")


def test_to_series(history):
    series = to_series(history[:3])
    assert list(series.index) == ["2024-01-01", "2024-01-02", "2024-01-03"]
    assert series.iloc[0] == history[0].price


def test_next_dates_cross_month():
    assert next_dates("2024-01-30", 3) == ["2024-01-31", "2024-02-01", "2024-02-02"]
