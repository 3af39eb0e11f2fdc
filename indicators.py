"""
Technical Indicator Engine

Stateless indicator suite over a close-only price series:
moving averages (5/20/50), simple RSI, simplified ATR, support/resistance
bands and a scaled momentum score.

Short histories never raise; each indicator degrades to its sentinel:
    moving average → None entries, RSI → 50, ATR → 0, momentum → 0

Simple interface:
    compute_technical_indicators(prices) -> TechnicalIndicators
"""

import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from config import INDICATORS
from models import PricePoint, TechnicalIndicators, clamp, round_half_up
from price_history import to_series

logger = logging.getLogger(__name__)


def compute_moving_average(prices: List[PricePoint], period: int) -> List[Optional[float]]:
    """Trailing simple moving average aligned to ``prices``; None until the window fills."""
    if period < 1:
        raise ValueError(f"Moving-average period must be positive, got {period}")
    close = to_series(prices)
    sma = close.rolling(period).mean()
    return [None if np.isnan(v) else round_half_up(float(v)) for v in sma.values]


def compute_rsi(prices: List[PricePoint], period: int = INDICATORS["rsi_period"]) -> float:
    """
    Simple-average RSI over the last ``period`` changes.

    Unlike Wilder smoothing this only looks at the trailing window, so a
    single call is independent of how long the full history is.
    """
    if len(prices) < period + 1:
        return INDICATORS["rsi_default"]

    window = np.array([p.price for p in prices[-(period + 1):]], dtype=float)
    delta = np.diff(window)
    gains = float(delta[delta > 0].sum())
    losses = float(-delta[delta < 0].sum())

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return round_half_up(100.0 - (100.0 / (1.0 + rs)))


def compute_atr(prices: List[PricePoint], period: int = INDICATORS["atr_period"]) -> float:
    """Mean absolute day-over-day change. No highs/lows here, so no true range."""
    if len(prices) < period + 1:
        return 0.0
    window = np.array([p.price for p in prices[-(period + 1):]], dtype=float)
    return round_half_up(float(np.abs(np.diff(window)).sum()) / period)


def compute_support_resistance(prices: List[PricePoint]) -> Tuple[float, float]:
    """Mean of the lowest / highest 10% (at least 3) of the last 60 closes."""
    recent = sorted(p.price for p in prices[-INDICATORS["sr_lookback"]:])
    if not recent:
        return 0.0, 0.0

    n = max(INDICATORS["sr_min_points"], math.floor(len(recent) * INDICATORS["sr_fraction"]))
    bottom = recent[:n]
    top = recent[-n:]
    support = sum(bottom) / len(bottom)
    resistance = sum(top) / len(top)
    return round_half_up(support), round_half_up(resistance)


def compute_momentum(prices: List[PricePoint], lookback: int = INDICATORS["momentum_lookback"]) -> int:
    """Percent change over ``lookback`` days × 20, clamped to ±100."""
    if len(prices) < lookback + 1:
        return 0
    current = prices[-1].price
    past = prices[-1 - lookback].price
    if past == 0:
        return 0

    pct_change = ((current - past) / past) * 100
    limit = INDICATORS["momentum_limit"]
    scaled = clamp(pct_change * INDICATORS["momentum_scale"], -limit, limit)
    return int(round_half_up(scaled, 0))


def compute_technical_indicators(prices: List[PricePoint]) -> TechnicalIndicators:
    """All indicators for one price series."""
    ma5, ma20, ma50 = (compute_moving_average(prices, p) for p in INDICATORS["ma_periods"])
    support, resistance = compute_support_resistance(prices)

    if len(prices) <= INDICATORS["rsi_period"]:
        logger.debug(f"Only {len(prices)} prices, RSI/ATR fall back to defaults")

    return TechnicalIndicators(
        ma5=ma5,
        ma20=ma20,
        ma50=ma50,
        rsi=compute_rsi(prices),
        atr=compute_atr(prices),
        support=support,
        resistance=resistance,
        momentum=compute_momentum(prices),
    )


def trend_label(indicators: TechnicalIndicators, price: float) -> str:
    """Price vs. the latest 20/50-day averages."""
    sma_20 = indicators.ma20[-1] if indicators.ma20 and indicators.ma20[-1] is not None else price
    sma_50 = indicators.ma50[-1] if indicators.ma50 and indicators.ma50[-1] is not None else price
    if price > sma_20 > sma_50:
        return "strong_uptrend"
    elif price > sma_20:
        return "uptrend"
    elif price < sma_20 < sma_50:
        return "strong_downtrend"
    elif price < sma_20:
        return "downtrend"
    return "sideways"
