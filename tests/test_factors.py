import pytest

from factors import (
    CATALOG, CATEGORY_IDS, category_signal, default_category_weights,
    default_sub_factor_weights, draw_signal, filter_by_horizon,
    generate_factor_hierarchy, get_template,
)
from models import Impact, TimeHorizon
from sequence import SeededSequence


class FixedSequence:
    """Stand-in that replays fixed draws."""

    def __init__(self, values):
        self.values = list(values)
        self.seed = 0

    def next(self):
        return self.values.pop(0)


def test_catalog_shape():
    assert CATEGORY_IDS == (
        "global_macro", "india_market", "market_microstructure",
        "technical", "volatility_risk", "behavioral_supply",
    )
    assert [len(t.sub_factors) for t in CATALOG] == [10, 6, 8, 6, 4, 7]


def test_default_sub_factor_sums_match_category_defaults():
    subs = default_sub_factor_weights()
    for cid, weight in default_category_weights().items():
        assert sum(subs[cid].values()) == pytest.approx(weight)


def test_default_category_weights_total_100():
    assert sum(default_category_weights().values()) == 100


def test_get_template_unknown():
    with pytest.raises(ValueError):
        get_template("crypto")


@pytest.mark.parametrize("draw, expected", [
    (0.0, 1), (0.3499, 1), (0.35, 0), (0.6499, 0), (0.65, -1), (0.999, -1),
])
def test_draw_signal_partition(draw, expected):
    assert draw_signal(FixedSequence([draw])) == expected


def test_category_signal_band():
    assert category_signal(1.6, 10) == 1
    assert category_signal(1.5, 10) == 0
    assert category_signal(-1.5, 10) == 0
    assert category_signal(-1.6, 10) == -1
    assert category_signal(5, 0) == 0


def test_one_draw_per_sub_factor_in_catalog_order():
    seq = SeededSequence(1000)
    categories = generate_factor_hierarchy(seq)
    assert seq.draws == sum(len(t.sub_factors) for t in CATALOG)

    replay = SeededSequence(1000)
    first = categories[0].sub_parameters[0]
    assert first.signal == draw_signal(replay)


def test_factor_score_and_weights():
    # global macro: all bullish; everything else neutral
    draws = [0.1] * 10 + [0.5] * 31
    categories = generate_factor_hierarchy(FixedSequence(draws))
    macro = categories[0]
    assert macro.factor_score == 35
    assert macro.signal == 1
    assert macro.weight == pytest.approx(0.35)
    assert macro.impact is Impact.BULLISH
    for cat in categories[1:]:
        assert cat.factor_score == 0
        assert cat.signal == 0


def test_custom_weights_rescore_same_draws():
    cat_weights = default_category_weights()
    cat_weights["technical"] = 30
    subs = default_sub_factor_weights()
    subs["technical"]["RSI (14-day)"] = 10

    base = generate_factor_hierarchy(SeededSequence(77))
    custom = generate_factor_hierarchy(SeededSequence(77), cat_weights, subs)

    base_signals = [[sp.signal for sp in c.sub_parameters] for c in base]
    custom_signals = [[sp.signal for sp in c.sub_parameters] for c in custom]
    assert base_signals == custom_signals

    technical = custom[3]
    assert technical.weight == pytest.approx(0.30)
    rsi = next(sp for sp in technical.sub_parameters if sp.name == "RSI (14-day)")
    assert rsi.weight == 10
    assert technical.factor_score == pytest.approx(
        sum(sp.signal * sp.weight for sp in technical.sub_parameters)
    )


def test_missing_weights_fall_back_to_defaults():
    categories = generate_factor_hierarchy(SeededSequence(5), {"technical": 20}, {})
    assert categories[0].weight == pytest.approx(0.35)
    assert categories[3].weight == pytest.approx(0.20)


def test_filter_by_horizon():
    categories = generate_factor_hierarchy(SeededSequence(5))
    micro = categories[2]
    intraday = filter_by_horizon(micro, TimeHorizon.INTRADAY)
    assert [sp.name for sp in intraday] == [
        "Open Interest Change", "OI + Price Divergence", "Volume Delta",
        "Large Trader Positioning", "VWAP Deviation", "Bid-Ask Spread",
    ]
    longterm = filter_by_horizon(micro, TimeHorizon.LONGTERM)
    assert [sp.name for sp in longterm] == ["COT Net Speculative", "ETF Flows (GLD/IAU)"]
