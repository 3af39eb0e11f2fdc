"""
Configuration for the Gold Bias Engine
Following Ousterhout's principles: centralized configuration, easy to modify.

Key settings:
- Synthetic price series (seeded, deterministic)
- Indicator periods and forecast window
- Bias-score bands, confidence and risk thresholds
- Weight limits for the category / sub-factor hierarchy
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Base directories ────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).parent
LOGS_DIR = BASE_DIR / "logs"

# ── Synthetic price series ──────────────────────────────────────────────────
PRICE_HISTORY = {
    "length": 365,              # one point per calendar day
    "base_price": 1950.0,
    "start_date": "2024-01-01",
    "seed": 42,
    "drift": 0.15,              # slight upward drift per day
    "noise_scale": 20.0,        # noise spans ±10 around zero
    "noise_weight": 0.3,
    "seasonal_amplitude": 30.0,
    "seasonal_period": 180,     # days per full seasonal cycle
}

# Chart windows (trailing points)
TIME_RANGES = {
    "1W": 7,
    "1M": 30,
    "3M": 90,
    "6M": 180,
    "1Y": 365,
}
DEFAULT_TIME_RANGE = "6M"

# ── Secondary currency ──────────────────────────────────────────────────────
# INR per gram = USD per troy ounce / grams per ounce * USD-INR
CURRENCY = {
    "troy_ounce_grams": 31.1035,
    "usd_inr": 83.0,
}

# ── Technical Indicators ────────────────────────────────────────────────────
INDICATORS = {
    "ma_periods": [5, 20, 50],
    "rsi_period": 14,
    "rsi_default": 50.0,        # returned when history is too short
    "atr_period": 14,

    # Support / Resistance
    "sr_lookback": 60,
    "sr_fraction": 0.1,         # bottom / top 10% of sorted prices
    "sr_min_points": 3,

    # Momentum
    "momentum_lookback": 10,
    "momentum_scale": 20,       # 5% move = full scale
    "momentum_limit": 100,
}

# Annualised volatility
TRADING_DAYS_PER_YEAR = 252

# ── Forecast ────────────────────────────────────────────────────────────────
PREDICTION = {
    "window": 30,               # trailing points for the regression fit
    "min_points": 3,            # residual variance divides by n - 2
    "z_score": 1.96,
    "horizons": [7, 30, 90],
}
DEFAULT_PREDICTION_HORIZON = 30

# ── Factor signals ──────────────────────────────────────────────────────────
# Sub-factor draw partition: r < 0.35 bullish, r < 0.65 neutral, else bearish
SIGNALS = {
    "bullish_below": 0.35,
    "neutral_below": 0.65,
    "category_band": 0.15,      # normalized category score needed for a direction
}

# ── Bias score ──────────────────────────────────────────────────────────────
BIAS = {
    "score_limit": 35.0,
    "probability_floor": 5,
    "probability_ceiling": 95,
    "confidence_floor": 30,
    "confidence_ceiling": 95,
    "confidence_base": 40,
    "confidence_score_span": 50,
    "vol_penalty_divisor": 30,
    "vol_penalty_cap": 0.3,
}

# Market-state bands on the total score, checked top-down.
# (lower bound, inclusive, market state, action). First band the score clears
# wins; anything below the last band is Strong Bearish / Strong Sell.
MARKET_STATE_BANDS = [
    (20, False, "Strong Bullish", "Strong Buy"),
    (10, False, "Bullish", "Buy"),
    (3, False, "Slightly Bullish", "Lean Buy"),
    (-3, True, "Neutral", "Hold"),
    (-10, True, "Slightly Bearish", "Lean Sell"),
    (-20, True, "Bearish", "Sell"),
]

RISK = {
    "high_volatility": 20,
    "medium_volatility": 12,
}

# ── Weights ─────────────────────────────────────────────────────────────────
WEIGHTS = {
    "total": 100.0,             # category weights sum to this
    "category_max": 100.0,
    "sub_factor_max": 20.0,
    "sub_factor_step": 0.5,
    "category_tolerance": 0.5,  # documented drift allowed on the total
    "edit_threshold": 0.1,      # sub-factor sum must move this much to re-weight
}

DEFAULT_CATEGORY_WEIGHTS = {
    "global_macro": 35.0,
    "india_market": 15.0,
    "market_microstructure": 20.0,
    "technical": 15.0,
    "volatility_risk": 10.0,
    "behavioral_supply": 5.0,
}

# ── Refresh ─────────────────────────────────────────────────────────────────
UPDATE_INTERVAL = int(os.getenv("UPDATE_INTERVAL", "300"))   # 5 min between factor refreshes
POLL_INTERVAL = 1.0                                           # loop tick while waiting

# Factor signals are reseeded per refresh: seed = FACTOR_SEED_BASE + counter
FACTOR_SEED_BASE = int(os.getenv("FACTOR_SEED_BASE", "1000"))

# Volatility history gets its own stream so factor reseeding never shifts it
VOLATILITY_HISTORY = {
    "seed_base": 7,             # + refresh counter, like the factor seed
    "start_date": "2024-12-01",
    "length": 30,
    "historical_base": 12.0,
    "historical_span": 8.0,
    "implied_offset": 0.4,
    "implied_span": 5.0,
    "implied_floor": 5.0,
}

# ── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
