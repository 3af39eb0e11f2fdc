"""
Factor Hierarchy Generator

A fixed catalog of six categories and their sub-factors drives the bias
score. Each refresh draws one signal per sub-factor from the supplied
sequence (35% bullish / 30% neutral / 35% bearish, in catalog order), then
scores every category with the operator's current weights.

Changing weights re-scores the same draws: callers pass a sequence with the
same seed. Only a refresh hands in a new seed.

Simple interface:
    generate_factor_hierarchy(sequence, category_weights, sub_factor_weights)
        -> List[FactorCategory]
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from config import DEFAULT_CATEGORY_WEIGHTS, SIGNALS
from models import (
    CategoryWeights, FactorCategory, SubFactorWeights, SubParameter,
    TimeHorizon, round_half_up,
)
from sequence import SeededSequence

logger = logging.getLogger(__name__)

INTRADAY, SWING, LONGTERM = TimeHorizon.INTRADAY, TimeHorizon.SWING, TimeHorizon.LONGTERM


# ═══════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SubFactorTemplate:
    name: str
    weight: float                          # default percentage points
    detail: str
    horizons: Tuple[TimeHorizon, ...]


@dataclass(frozen=True)
class CategoryTemplate:
    id: str
    name: str
    icon: str
    sub_factors: Tuple[SubFactorTemplate, ...]

    @property
    def default_weight(self) -> float:
        return DEFAULT_CATEGORY_WEIGHTS[self.id]


CATALOG: Tuple[CategoryTemplate, ...] = (
    CategoryTemplate("global_macro", "Global Macro", "Globe", (
        SubFactorTemplate("US 10Y Real Yield", 10, "Real yield inversely correlated with gold; rising yields pressure gold", (SWING, LONGTERM)),
        SubFactorTemplate("Treasury Yield Curve", 3, "Yield curve shape signals recession risk and safe-haven demand", (SWING, LONGTERM)),
        SubFactorTemplate("Inflation Expectations", 5, "Breakeven inflation rates drive gold as an inflation hedge", (SWING, LONGTERM)),
        SubFactorTemplate("Fed Rate Expectations", 5, "Fed funds futures pricing for next meeting and forward path", (SWING, LONGTERM)),
        SubFactorTemplate("DXY Index", 4, "US Dollar Index inversely correlated with gold prices", (INTRADAY, SWING, LONGTERM)),
        SubFactorTemplate("Geopolitical Tensions", 1.5, "Global conflict index and geopolitical risk premium", (INTRADAY, SWING, LONGTERM)),
        SubFactorTemplate("Global Liquidity", 3, "Central bank balance sheet expansion supports gold", (LONGTERM,)),
        SubFactorTemplate("GDP Growth", 1.5, "Slowing GDP growth increases safe-haven appeal", (LONGTERM,)),
        SubFactorTemplate("Unemployment Rate", 1, "Rising unemployment signals economic weakness, bullish for gold", (LONGTERM,)),
        SubFactorTemplate("M2 Money Supply", 1, "Monetary expansion creates inflation risk, supports gold", (LONGTERM,)),
    )),
    CategoryTemplate("india_market", "India Market Pulse", "IndianRupee", (
        SubFactorTemplate("INR-USD Exchange Rate", 6, "Rupee depreciation directly boosts INR gold prices", (INTRADAY, SWING, LONGTERM)),
        SubFactorTemplate("RBI Policy Stance", 2, "RBI rate decisions and liquidity measures affect gold demand", (SWING, LONGTERM)),
        SubFactorTemplate("MCX-COMEX Basis", 3, "Premium/discount between MCX and COMEX gold futures", (INTRADAY, SWING)),
        SubFactorTemplate("Local Premium/Discount", 2, "India physical gold premium over international price", (INTRADAY, SWING)),
        SubFactorTemplate("Import Duty Effect", 1, "Changes in gold import duty impact domestic prices", (LONGTERM,)),
        SubFactorTemplate("Festival/Wedding Season", 1, "Seasonal demand spikes during Diwali, Akshaya Tritiya, wedding season", (SWING, LONGTERM)),
    )),
    CategoryTemplate("market_microstructure", "Market Microstructure & Flows", "BarChart3", (
        SubFactorTemplate("Open Interest Change", 3, "Rising OI with price confirms trend strength", (INTRADAY, SWING)),
        SubFactorTemplate("OI + Price Divergence", 3, "Divergence between OI and price signals potential reversal", (INTRADAY, SWING)),
        SubFactorTemplate("Volume Delta", 2.5, "Buy vs sell volume imbalance indicates directional pressure", (INTRADAY,)),
        SubFactorTemplate("Large Trader Positioning", 2.5, "Institutional order flow and block trade patterns", (INTRADAY, SWING)),
        SubFactorTemplate("VWAP Deviation", 1.5, "Price relative to VWAP signals intraday fair value", (INTRADAY,)),
        SubFactorTemplate("Bid-Ask Spread", 1.5, "Widening spreads indicate stress; tight spreads mean confidence", (INTRADAY,)),
        SubFactorTemplate("COT Net Speculative", 3, "CFTC Commitment of Traders speculative net positioning", (SWING, LONGTERM)),
        SubFactorTemplate("ETF Flows (GLD/IAU)", 3, "Gold ETF inflows/outflows signal institutional sentiment", (SWING, LONGTERM)),
    )),
    CategoryTemplate("technical", "Technical Indicators", "TrendingUp", (
        SubFactorTemplate("Moving Average Alignment", 4, "5/20/50-day MA crossovers and alignment direction", (INTRADAY, SWING, LONGTERM)),
        SubFactorTemplate("Support/Resistance", 3, "Key price levels from historical pivots and Fibonacci", (INTRADAY, SWING)),
        SubFactorTemplate("RSI (14-day)", 2, "Overbought >70, oversold <30 momentum oscillator", (INTRADAY, SWING)),
        SubFactorTemplate("ATR Volatility", 2, "Average True Range indicates current volatility regime", (INTRADAY, SWING)),
        SubFactorTemplate("Momentum (ROC)", 2, "Rate of change and momentum divergence signals", (INTRADAY, SWING)),
        SubFactorTemplate("Volume Trend", 2, "Volume confirming or diverging from price trend", (INTRADAY, SWING)),
    )),
    CategoryTemplate("volatility_risk", "Volatility & Risk", "Shield", (
        SubFactorTemplate("Implied Volatility", 3, "Gold options implied vol signals expected future moves", (INTRADAY, SWING)),
        SubFactorTemplate("Historical Volatility", 2, "Realized volatility over trailing 20/60 day windows", (SWING, LONGTERM)),
        SubFactorTemplate("Volatility Skew", 2, "Put/call skew indicates directional fear in options market", (SWING,)),
        SubFactorTemplate("Event Risk Premium", 3, "Elevated risk ahead of FOMC, NFP, CPI releases", (INTRADAY, SWING)),
    )),
    CategoryTemplate("behavioral_supply", "Behavioral & Physical Supply-Demand", "Scale", (
        SubFactorTemplate("COT Sentiment Reports", 1, "Commercial hedger vs speculator positioning extremes", (SWING, LONGTERM)),
        SubFactorTemplate("Retail Sentiment", 0.5, "Retail investor positioning as a contrarian indicator", (SWING,)),
        SubFactorTemplate("Central Bank Buying", 1, "Global central bank gold reserve accumulation trends", (LONGTERM,)),
        SubFactorTemplate("Jewelry Demand", 0.5, "Consumer jewelry demand from India, China, Middle East", (LONGTERM,)),
        SubFactorTemplate("Mine Production", 0.5, "Global gold mining output and all-in sustaining costs", (LONGTERM,)),
        SubFactorTemplate("Recycling Supply", 0.5, "Scrap gold supply increases when prices are high", (LONGTERM,)),
        SubFactorTemplate("China Demand", 1, "Shanghai Gold Exchange withdrawals and PBOC buying", (SWING, LONGTERM)),
    )),
)

CATEGORY_IDS: Tuple[str, ...] = tuple(t.id for t in CATALOG)
_BY_ID: Dict[str, CategoryTemplate] = {t.id: t for t in CATALOG}


def get_template(category_id: str) -> CategoryTemplate:
    try:
        return _BY_ID[category_id]
    except KeyError:
        raise ValueError(f"Unknown factor category {category_id!r}") from None


def default_category_weights() -> CategoryWeights:
    return {t.id: t.default_weight for t in CATALOG}


def default_sub_factor_weights() -> SubFactorWeights:
    return {t.id: {sf.name: float(sf.weight) for sf in t.sub_factors} for t in CATALOG}


# ═══════════════════════════════════════════════════════════════════════════
# Generator
# ═══════════════════════════════════════════════════════════════════════════

def draw_signal(sequence: SeededSequence) -> int:
    r = sequence.next()
    if r < SIGNALS["bullish_below"]:
        return 1
    if r < SIGNALS["neutral_below"]:
        return 0
    return -1


def category_signal(factor_score: float, total_weight: float) -> int:
    """Direction of a category once its score is normalized by its weight sum."""
    if total_weight <= 0:
        return 0
    normalized = factor_score / total_weight
    band = SIGNALS["category_band"]
    if normalized > band:
        return 1
    if normalized < -band:
        return -1
    return 0


def generate_factor_hierarchy(
    sequence: SeededSequence,
    category_weights: Optional[CategoryWeights] = None,
    sub_factor_weights: Optional[SubFactorWeights] = None,
) -> List[FactorCategory]:
    """
    Draw sub-factor signals and score each category.

    Category weights arrive in percentage points and come out as fractions;
    missing entries fall back to the catalog defaults.
    """
    category_weights = category_weights or {}
    sub_factor_weights = sub_factor_weights or {}
    categories: List[FactorCategory] = []

    for tmpl in CATALOG:
        weight = category_weights.get(tmpl.id, tmpl.default_weight) / 100
        custom = sub_factor_weights.get(tmpl.id, {})

        subs: List[SubParameter] = []
        for sf in tmpl.sub_factors:
            signal = draw_signal(sequence)
            subs.append(SubParameter(
                name=sf.name,
                signal=signal,
                weight=float(custom.get(sf.name, sf.weight)),
                detail=sf.detail,
                relevant_horizons=sf.horizons,
            ))

        factor_score = sum(sp.contribution for sp in subs)
        total_weight = sum(sp.weight for sp in subs)

        categories.append(FactorCategory(
            id=tmpl.id,
            name=tmpl.name,
            icon=tmpl.icon,
            weight=weight,
            signal=category_signal(factor_score, total_weight),
            factor_score=round_half_up(factor_score),
            sub_parameters=subs,
        ))

    logger.debug(
        f"Generated {len(categories)} categories from seed {sequence.seed}: "
        + ", ".join(f"{c.id}={c.factor_score:+.1f}" for c in categories)
    )
    return categories


def filter_by_horizon(category: FactorCategory, horizon: TimeHorizon) -> List[SubParameter]:
    """Sub-parameters that matter for the selected trading horizon."""
    return [sp for sp in category.sub_parameters if horizon in sp.relevant_horizons]
