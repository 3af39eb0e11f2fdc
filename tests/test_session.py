import logging

import pytest

from models import TimeHorizon
from session import DashboardSession, RefreshTimer


@pytest.fixture
def session(fake_clock):
    return DashboardSession(factor_seed_base=1000, update_interval=300, clock=fake_clock)


def test_timer_lifecycle(fake_clock):
    timer = RefreshTimer(300, clock=fake_clock)
    assert not timer.running
    assert not timer.is_due()

    timer.start()
    fake_clock.return_value = 299.0
    assert not timer.is_due()
    assert timer.seconds_remaining() == pytest.approx(1.0)

    fake_clock.return_value = 300.0
    assert timer.is_due()
    timer.mark()
    assert not timer.is_due()

    timer.stop()
    fake_clock.return_value = 10_000.0
    assert not timer.is_due()


def test_initial_snapshot(session):
    snap = session.snapshot
    assert snap.refresh_count == 0
    assert len(snap.filtered_data) == 180
    assert len(snap.predictions) == 30
    assert len(snap.factor_categories) == 6
    assert len(snap.risk_events) == 12
    assert len(snap.volatility_history) == 30
    assert snap.statistics.current_price == session.prices[-1].price
    assert snap.bias_score.up_probability + snap.bias_score.down_probability == 100


def test_poll_refreshes_when_due(session, fake_clock):
    session.start()
    first = session.snapshot
    assert not session.poll()

    fake_clock.return_value = 300.0
    assert session.poll()
    assert session.refresh_count == 1
    assert session.factor_seed == 1001
    assert session.snapshot is not first
    assert session.snapshot.refresh_count == 1

    assert not session.poll()
    session.stop()
    fake_clock.return_value = 900.0
    assert not session.poll()


def test_weight_edit_keeps_signals(session):
    before = [[sp.signal for sp in c.sub_parameters] for c in session.snapshot.factor_categories]
    snap = session.set_category_weight("global_macro", 50)
    after = [[sp.signal for sp in c.sub_parameters] for c in snap.factor_categories]

    assert before == after
    assert session.refresh_count == 0
    assert snap.factor_categories[0].weight == pytest.approx(0.50)
    assert sum(session.weights.category_weights.values()) == pytest.approx(100)


def test_refresh_redraws_signals(session):
    seeds = {session.factor_seed}
    for _ in range(3):
        session.refresh()
        seeds.add(session.factor_seed)
    assert seeds == {1000, 1001, 1002, 1003}


def test_refresh_does_not_touch_prices(session):
    prices = list(session.prices)
    session.refresh()
    assert session.prices == prices
    assert session.snapshot.statistics == session.statistics


def test_sub_factor_edit_through_session(session):
    session.set_sub_factor_weight("technical", "RSI (14-day)", 5)
    assert session.weights.category_weights["technical"] == 18
    technical = session.snapshot.factor_categories[3]
    assert technical.weight == pytest.approx(0.18)


def test_reset_paths(session):
    session.set_category_weight("technical", 30)
    session.reset_category("technical")
    assert session.weights.category_weights["technical"] == 15
    session.set_category_weight("india_market", 40)
    session.reset_all_weights()
    assert session.weights.category_weights["india_market"] == 15


def test_invalid_edit_leaves_state(session):
    weights = session.weights
    with pytest.raises(ValueError):
        session.set_category_weight("crypto", 10)
    assert session.weights is weights


def test_view_settings(session):
    assert len(session.set_time_range("1M").filtered_data) == 30
    assert len(session.set_prediction_horizon(90).predictions) == 90
    with pytest.raises(ValueError):
        session.set_prediction_horizon(14)
    with pytest.raises(ValueError):
        session.set_time_range("5Y")


def test_relevant_factors_follow_horizon(session):
    session.set_time_horizon(TimeHorizon.INTRADAY)
    relevant = session.relevant_factors()
    assert set(relevant) == {c.id for c in session.snapshot.factor_categories}
    for subs in relevant.values():
        assert all(TimeHorizon.INTRADAY in sp.relevant_horizons for sp in subs)


def test_filling_a_category_through_session(session):
    names = list(session.weights.sub_factor_weights["global_macro"])
    for name in names:
        session.set_sub_factor_weight("global_macro", name, 20)
    assert session.weights.category_weights["global_macro"] == 100
    assert sum(session.weights.category_weights.values()) == pytest.approx(100, abs=0.1)
    assert session.snapshot.factor_categories[0].weight == pytest.approx(1.0)


def test_refresh_summary_names_direction(session, caplog):
    with caplog.at_level(logging.INFO, logger="session"):
        snap = session.refresh()
    bias = snap.bias_score
    lean = "LONG" if bias.is_bullish else "SHORT" if bias.is_bearish else "FLAT"
    arrow = "▲" if snap.statistics.is_positive_change else "▼"
    assert f"[{lean}] Bias" in caplog.text
    assert f"XAU ${snap.statistics.current_price:.2f} {arrow}" in caplog.text
