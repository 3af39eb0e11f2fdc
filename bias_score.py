"""
Bias Score Calculator

Collapses the factor hierarchy into one bounded score and the labels
a trader reads off it.

    total      = clamp(Σ factor_score × category_weight, ±35)
    up %       = clamp(5, 95, (total + 35) / 70 × 90 + 5)
    confidence = clamp(30, 95, 40 + |total|/35 × 50 − min(vol/30, 0.3) × 30)

Market state and action share the same score bands; risk comes from
annualised volatility alone.
"""

import logging
from typing import List, Tuple

from config import BIAS, MARKET_STATE_BANDS, RISK
from models import (
    Action, BiasScoreData, FactorCategory, MarketState, RiskLevel,
    Statistics, clamp, round_half_up,
)

logger = logging.getLogger(__name__)


def classify_score(total_score: float) -> Tuple[MarketState, Action]:
    for bound, inclusive, state, action in MARKET_STATE_BANDS:
        if total_score > bound or (inclusive and total_score == bound):
            return MarketState(state), Action(action)
    return MarketState.STRONG_BEARISH, Action.STRONG_SELL


def classify_risk(volatility: float) -> RiskLevel:
    if volatility > RISK["high_volatility"]:
        return RiskLevel.HIGH
    if volatility > RISK["medium_volatility"]:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def up_probability(total_score: float) -> int:
    limit = BIAS["score_limit"]
    normalized = (total_score + limit) / (2 * limit)
    return int(round_half_up(
        clamp(normalized * 90 + 5, BIAS["probability_floor"], BIAS["probability_ceiling"]), 0
    ))


def confidence_for(total_score: float, volatility: float) -> int:
    score_factor = (abs(total_score) / BIAS["score_limit"]) * BIAS["confidence_score_span"]
    vol_penalty = min(volatility / BIAS["vol_penalty_divisor"], BIAS["vol_penalty_cap"]) * 30
    raw = BIAS["confidence_base"] + score_factor - vol_penalty
    return int(round_half_up(clamp(raw, BIAS["confidence_floor"], BIAS["confidence_ceiling"]), 0))


def compute_bias_score(categories: List[FactorCategory], statistics: Statistics) -> BiasScoreData:
    limit = BIAS["score_limit"]
    raw = sum(c.factor_score * c.weight for c in categories)
    total_score = round_half_up(clamp(raw, -limit, limit))

    up = up_probability(total_score)
    state, action = classify_score(total_score)
    volatility = statistics.volatility

    bias = BiasScoreData(
        total_score=total_score,
        up_probability=up,
        down_probability=100 - up,
        confidence=confidence_for(total_score, volatility),
        market_state=state,
        action=action,
        risk_level=classify_risk(volatility),
    )
    logger.debug(
        f"Bias {bias.total_score:+.2f} → {state.value} / {action.value} "
        f"(up {bias.up_probability}%, conf {bias.confidence}%, risk {bias.risk_level.value})"
    )
    return bias
