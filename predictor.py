"""
Prediction Engine

Least-squares line through the last 30 closes (x = 0..29), extended
``horizon`` days forward. The band is ±1.96 σ_resid · sqrt(days ahead):
a random-walk style widening, not a formal prediction interval.
"""

import logging
from typing import List, Tuple

import numpy as np

from config import PREDICTION
from models import PredictionPoint, PricePoint, round_half_up
from price_history import next_dates

logger = logging.getLogger(__name__)


def linear_regression(y: np.ndarray) -> Tuple[float, float]:
    """(slope, intercept) of y against its index."""
    n = len(y)
    x = np.arange(n, dtype=float)
    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_x2 = (x * x).sum()

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return 0.0, float(sum_y / n) if n else 0.0
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return float(slope), float(intercept)


def compute_predictions(prices: List[PricePoint], horizon: int) -> List[PredictionPoint]:
    """
    Forecast ``horizon`` daily points after the last price.

    Needs at least 3 points (the residual variance divides by n - 2);
    with fewer an empty forecast is returned.
    """
    if horizon < 1:
        return []

    window = prices[-PREDICTION["window"]:]
    n = len(window)
    if n < PREDICTION["min_points"]:
        logger.warning(f"Cannot forecast from {n} points, need at least {PREDICTION['min_points']}")
        return []

    y = np.array([p.price for p in window], dtype=float)
    slope, intercept = linear_regression(y)

    fitted = intercept + slope * np.arange(n, dtype=float)
    std_dev = float(np.sqrt(((y - fitted) ** 2).sum() / (n - 2)))
    last_index = n - 1

    predictions: List[PredictionPoint] = []
    for i, day in enumerate(next_dates(prices[-1].date, horizon), start=1):
        predicted = intercept + slope * (last_index + i)
        margin = PREDICTION["z_score"] * std_dev * np.sqrt(i)
        predictions.append(PredictionPoint(
            date=day,
            predicted=round_half_up(predicted),
            upper_bound=round_half_up(predicted + margin),
            lower_bound=round_half_up(predicted - margin),
        ))

    logger.debug(
        f"Forecast {horizon}d: slope={slope:+.3f}/day, σ={std_dev:.2f}, "
        f"final={predictions[-1].predicted:.2f}"
    )
    return predictions
