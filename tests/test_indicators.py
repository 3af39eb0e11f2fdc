import pytest

from indicators import (
    compute_atr, compute_momentum, compute_moving_average, compute_rsi,
    compute_support_resistance, compute_technical_indicators, trend_label,
)
from tests.conftest import make_prices


def test_moving_average_on_monotonic_sequence():
    ma = compute_moving_average(make_prices(range(1, 11)), 5)
    assert ma[:4] == [None, None, None, None]
    assert ma[4:] == [3.0, 4.0, 5.0, 6.0, 7.0, 8.0]


def test_moving_average_longer_than_series():
    assert compute_moving_average(make_prices([1, 2, 3]), 5) == [None, None, None]


def test_moving_average_rounds_to_cents():
    ma = compute_moving_average(make_prices([1.001, 1.002, 1.004]), 3)
    assert ma[-1] == 1.0


def test_rsi_all_gains_is_100():
    assert compute_rsi(make_prices(range(100, 115))) == 100


def test_rsi_insufficient_history():
    assert compute_rsi(make_prices(range(10))) == 50


def test_rsi_balanced_moves():
    values = [100, 101] * 8  # alternating up and down
    rsi = compute_rsi(make_prices(values[:15]))
    # 7 gains and 7 losses of 1.0 over the last 14 changes
    assert rsi == pytest.approx(50.0)


def test_rsi_only_uses_trailing_window():
    values = list(range(200, 100, -1)) + list(range(101, 116))
    assert compute_rsi(make_prices(values)) == 100


def test_atr_mean_absolute_change():
    values = [100 + (i % 2) * 2 for i in range(15)]
    assert compute_atr(make_prices(values)) == 2.0


def test_atr_insufficient_history():
    assert compute_atr(make_prices([1, 2, 3])) == 0


def test_support_resistance_uses_minimum_three_points():
    support, resistance = compute_support_resistance(make_prices(range(1, 21)))
    assert support == 2.0       # mean of 1, 2, 3
    assert resistance == 19.0   # mean of 18, 19, 20


def test_support_resistance_window_is_sixty():
    values = [1000] * 40 + list(range(1, 61))
    support, resistance = compute_support_resistance(make_prices(values))
    assert support == 3.5       # mean of 1..6
    assert resistance == 57.5   # mean of 55..60


def test_support_resistance_empty():
    assert compute_support_resistance([]) == (0.0, 0.0)


def test_momentum_clamps():
    values = [100] * 10 + [110]
    assert compute_momentum(make_prices(values)) == 100
    values = [100] * 10 + [90]
    assert compute_momentum(make_prices(values)) == -100


def test_momentum_scaled():
    values = [100] * 10 + [102]
    assert compute_momentum(make_prices(values)) == 40


def test_momentum_insufficient_history():
    assert compute_momentum(make_prices([1, 2, 3])) == 0


def test_full_indicator_set(history):
    ind = compute_technical_indicators(history)
    assert len(ind.ma5) == len(ind.ma20) == len(ind.ma50) == len(history)
    assert ind.ma50[48] is None and ind.ma50[49] is not None
    assert 0 <= ind.rsi <= 100
    assert ind.atr > 0
    assert ind.support < ind.resistance
    assert -100 <= ind.momentum <= 100


def test_trend_label():
    ind = compute_technical_indicators(make_prices(range(1, 61)))
    assert trend_label(ind, 60) == "strong_uptrend"
    assert trend_label(ind, 1) == "downtrend"
