"""
Price History Builder

Builds the synthetic daily gold series every other calculator treats as
ground truth: a drifting random walk plus a 180-day seasonal swing.

    price_i   = price_{i-1} + drift + noise_i * 0.3     noise_i ∈ [-10, 10)
    display_i = price_i + 30 * sin(2π i / 180)          rounded to cents

Simple interface:
    build_price_history(seed) -> List[PricePoint]
    filter_by_range(prices, "3M") -> trailing window
    to_series(prices) -> pd.Series for the pandas-based calculators
"""

import logging
import math
from datetime import date, timedelta
from typing import List, Optional

import pandas as pd

from config import PRICE_HISTORY, TIME_RANGES
from models import PricePoint, round_half_up
from sequence import SeededSequence

logger = logging.getLogger(__name__)


def build_price_history(
    seed: int = PRICE_HISTORY["seed"],
    length: int = PRICE_HISTORY["length"],
    base_price: float = PRICE_HISTORY["base_price"],
    start_date: str = PRICE_HISTORY["start_date"],
    sequence: Optional[SeededSequence] = None,
) -> List[PricePoint]:
    """
    Generate ``length`` consecutive daily points starting at ``start_date``.
    Pass ``sequence`` to draw from an existing stream instead of a fresh one.
    """
    rand = sequence if sequence is not None else SeededSequence(seed)
    start = date.fromisoformat(start_date)

    drift = PRICE_HISTORY["drift"]
    noise_scale = PRICE_HISTORY["noise_scale"]
    noise_weight = PRICE_HISTORY["noise_weight"]
    amplitude = PRICE_HISTORY["seasonal_amplitude"]
    period = PRICE_HISTORY["seasonal_period"]

    points: List[PricePoint] = []
    price = base_price
    for i in range(length):
        seasonal = amplitude * math.sin((2 * math.pi * i) / period)
        noise = (rand.next() - 0.5) * noise_scale

        price = price + drift + noise * noise_weight
        points.append(PricePoint(
            date=(start + timedelta(days=i)).isoformat(),
            price=round_half_up(price + seasonal),
        ))

    logger.debug(f"Built {len(points)} price points from seed {rand.seed}")
    return points


def filter_by_range(prices: List[PricePoint], time_range: str) -> List[PricePoint]:
    """Trailing window for a chart range key ("1W", "1M", "3M", "6M", "1Y")."""
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unknown time range {time_range!r}; expected one of {list(TIME_RANGES)}")
    days = TIME_RANGES[time_range]
    return prices[-days:]


def to_series(prices: List[PricePoint]) -> pd.Series:
    """Close prices indexed by date, in series order."""
    return pd.Series(
        [p.price for p in prices],
        index=pd.Index([p.date for p in prices], name="date"),
        name="Close",
        dtype="float64",
    )


def next_dates(last_date: str, days: int) -> List[str]:
    """ISO dates for the ``days`` calendar days after ``last_date``."""
    base = date.fromisoformat(last_date)
    return [(base + timedelta(days=i)).isoformat() for i in range(1, days + 1)]
