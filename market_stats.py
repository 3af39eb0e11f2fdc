"""
Statistics Calculator

Pure function of the price series: latest price, day-over-day change,
range, mean and annualised volatility, each mirrored into INR per gram.

Volatility uses simple daily returns with the sample variance (n - 1),
scaled by sqrt(252) and expressed in percent.
"""

import logging
import math
from typing import List

import numpy as np

from config import CURRENCY, TRADING_DAYS_PER_YEAR
from models import PricePoint, Statistics, round_half_up
from price_history import to_series

logger = logging.getLogger(__name__)


def to_inr_per_gram(usd_per_ounce: float) -> float:
    """Convert an already-rounded USD/oz figure to INR/g, rounded to paise."""
    return round_half_up(usd_per_ounce / CURRENCY["troy_ounce_grams"] * CURRENCY["usd_inr"])


def compute_statistics(prices: List[PricePoint]) -> Statistics:
    if not prices:
        logger.debug("No prices supplied, returning empty statistics")
        return Statistics(
            current_price=0.0, daily_change=0.0, daily_change_percent=0.0,
            high=0.0, low=0.0, average=0.0, volatility=0.0,
        )

    close = to_series(prices)
    current_price = float(close.iloc[-1])

    if len(close) >= 2:
        previous_price = float(close.iloc[-2])
        daily_change = round_half_up(current_price - previous_price)
        daily_change_percent = (
            round_half_up(daily_change / previous_price * 100)
            if previous_price else 0.0
        )
    else:
        daily_change = 0.0
        daily_change_percent = 0.0

    high = round_half_up(float(close.max()))
    low = round_half_up(float(close.min()))
    average = round_half_up(float(close.mean()))
    volatility = _annualized_volatility(close)

    return Statistics(
        current_price=current_price,
        daily_change=daily_change,
        daily_change_percent=daily_change_percent,
        high=high,
        low=low,
        average=average,
        volatility=volatility,
        current_price_inr=to_inr_per_gram(current_price),
        daily_change_inr=to_inr_per_gram(daily_change),
        high_inr=to_inr_per_gram(high),
        low_inr=to_inr_per_gram(low),
        average_inr=to_inr_per_gram(average),
    )


def _annualized_volatility(close) -> float:
    """Sample std of simple daily returns × sqrt(252), in percent."""
    returns = (close.diff() / close.shift()).iloc[1:]
    returns = returns.replace([np.inf, -np.inf], np.nan).dropna()
    if len(returns) < 2:
        return 0.0

    daily_vol = float(returns.std(ddof=1))
    if np.isnan(daily_vol):
        return 0.0
    return round_half_up(daily_vol * math.sqrt(TRADING_DAYS_PER_YEAR) * 100)
