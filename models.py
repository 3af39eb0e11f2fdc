"""Core data models — single source of truth (Ousterhout deep module)
Every entity the engine hands out is defined here, together with the rounding
helpers all calculators share, so derived values agree to the cent no matter
which module produced them.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict
from datetime import datetime

# category id -> percentage points (conventionally summing to 100)
CategoryWeights = Dict[str, float]
# category id -> sub-factor name -> percentage points (0..20 each)
SubFactorWeights = Dict[str, Dict[str, float]]


# ── Rounding ─────────────────────────────────────────────────────────────────

def round_half_up(value: float, decimals: int = 2) -> float:
    """Round half toward +inf, the way chart code rounds (not banker's rounding)."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def round_to_step(value: float, step: float) -> float:
    """Round half-up to the nearest multiple of ``step`` (e.g. 0.5 slider ticks)."""
    inverse = 1 / step
    return math.floor(value * inverse + 0.5) / inverse


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


# ── Enums ────────────────────────────────────────────────────────────────────

class TimeHorizon(Enum):
    INTRADAY = "intraday"
    SWING = "swing"
    LONGTERM = "longterm"


class Impact(Enum):
    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"

    @classmethod
    def from_signal(cls, signal: int) -> "Impact":
        if signal == 1:
            return cls.BULLISH
        if signal == -1:
            return cls.BEARISH
        return cls.NEUTRAL


class MarketState(Enum):
    STRONG_BULLISH = "Strong Bullish"
    BULLISH = "Bullish"
    SLIGHTLY_BULLISH = "Slightly Bullish"
    NEUTRAL = "Neutral"
    SLIGHTLY_BEARISH = "Slightly Bearish"
    BEARISH = "Bearish"
    STRONG_BEARISH = "Strong Bearish"


class Action(Enum):
    STRONG_BUY = "Strong Buy"
    BUY = "Buy"
    LEAN_BUY = "Lean Buy"
    HOLD = "Hold"
    LEAN_SELL = "Lean Sell"
    SELL = "Sell"
    STRONG_SELL = "Strong Sell"


class RiskLevel(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


# ── Price data ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PricePoint:
    date: str          # ISO calendar date, e.g. "2024-01-01"
    price: float


@dataclass(frozen=True)
class Statistics:
    """Summary of a price series. INR fields are per gram."""
    current_price: float
    daily_change: float
    daily_change_percent: float
    high: float
    low: float
    average: float
    volatility: float              # annualised, percent
    current_price_inr: float = 0.0
    daily_change_inr: float = 0.0
    high_inr: float = 0.0
    low_inr: float = 0.0
    average_inr: float = 0.0

    @property
    def is_positive_change(self) -> bool:
        return self.daily_change >= 0


@dataclass(frozen=True)
class TechnicalIndicators:
    ma5: List[Optional[float]]
    ma20: List[Optional[float]]
    ma50: List[Optional[float]]
    rsi: float
    atr: float
    support: float
    resistance: float
    momentum: int


@dataclass(frozen=True)
class PredictionPoint:
    date: str
    predicted: float
    upper_bound: float
    lower_bound: float

    @property
    def band_width(self) -> float:
        return round_half_up(self.upper_bound - self.lower_bound)


# ── Factor hierarchy ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SubParameter:
    name: str
    signal: int                    # -1, 0, +1
    weight: float                  # percentage points within the category
    detail: str = ""
    relevant_horizons: tuple = ()  # of TimeHorizon

    @property
    def impact(self) -> Impact:
        return Impact.from_signal(self.signal)

    @property
    def contribution(self) -> float:
        return self.signal * self.weight


@dataclass(frozen=True)
class FactorCategory:
    id: str
    name: str
    icon: str
    weight: float                  # fraction 0..1 of the total bias
    signal: int
    factor_score: float
    sub_parameters: List[SubParameter] = field(default_factory=list)

    @property
    def impact(self) -> Impact:
        return Impact.from_signal(self.signal)

    @property
    def weight_percent(self) -> int:
        return int(round_half_up(self.weight * 100, 0))


# ── Bias ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BiasScoreData:
    total_score: float             # -35 .. +35
    up_probability: int
    down_probability: int
    confidence: int                # 30 .. 95
    market_state: MarketState
    action: Action
    risk_level: RiskLevel

    @property
    def is_bullish(self) -> bool:
        return self.action in (Action.STRONG_BUY, Action.BUY, Action.LEAN_BUY)

    @property
    def is_bearish(self) -> bool:
        return self.action in (Action.STRONG_SELL, Action.SELL, Action.LEAN_SELL)


# ── Risk calendar ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RiskEvent:
    date: str
    title: str
    category: str
    impact: str                    # "high", "medium", "low"
    description: str


@dataclass(frozen=True)
class VolatilityPoint:
    date: str
    historical: float
    implied: float


# ── Dashboard snapshot ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class DashboardData:
    """Everything a front end needs for one render. Replaced wholesale on refresh."""
    filtered_data: List[PricePoint]
    statistics: Statistics
    bias_score: BiasScoreData
    factor_categories: List[FactorCategory]
    technical_indicators: TechnicalIndicators
    predictions: List[PredictionPoint]
    risk_events: List[RiskEvent]
    volatility_history: List[VolatilityPoint]
    refresh_count: int = 0
    last_updated: datetime = field(default_factory=datetime.now)
