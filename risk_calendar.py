"""
Risk Calendar

Upcoming macro events, dated relative to the last price, and a short
historical-vs-implied volatility history drawn from its own sequence.
"""

import logging
from datetime import date, timedelta
from typing import List

from config import VOLATILITY_HISTORY
from models import RiskEvent, VolatilityPoint, round_half_up
from sequence import SeededSequence

logger = logging.getLogger(__name__)

# (days after last price, title, category, impact, description)
EVENT_SCHEDULE = [
    (2, "US CPI Release", "Economic", "high", "Consumer Price Index data — key inflation gauge for Fed policy"),
    (5, "Fed FOMC Minutes", "Monetary", "high", "Federal Reserve meeting minutes may signal rate path changes"),
    (7, "US Retail Sales", "Economic", "medium", "Monthly consumer spending report impacts growth outlook"),
    (10, "RBI Policy Decision", "Monetary", "high", "Reserve Bank of India rate decision affects INR gold prices"),
    (12, "China PMI Data", "Economic", "medium", "Manufacturing activity in world's largest gold consumer"),
    (14, "US PPI Release", "Economic", "medium", "Producer Price Index — upstream inflation indicator"),
    (18, "ECB Rate Decision", "Monetary", "high", "European Central Bank rate decision affects EUR/USD and gold"),
    (21, "US GDP (Q4)", "Economic", "high", "Quarterly GDP growth — broad economic health indicator"),
    (25, "BoJ Policy Meeting", "Monetary", "medium", "Bank of Japan policy — yen carry trade impact on gold"),
    (28, "US PCE Inflation", "Economic", "high", "Fed's preferred inflation measure — critical for rate expectations"),
    (30, "India Gold Import Data", "Supply", "low", "Monthly physical gold import figures from India"),
    (35, "OPEC+ Meeting", "Geopolitical", "medium", "Oil supply decisions indirectly affect inflation and gold demand"),
]


def generate_risk_events(last_date: str) -> List[RiskEvent]:
    base = date.fromisoformat(last_date)
    events = [
        RiskEvent(
            date=(base + timedelta(days=days)).isoformat(),
            title=title,
            category=category,
            impact=impact,
            description=description,
        )
        for days, title, category, impact, description in EVENT_SCHEDULE
    ]
    logger.debug(f"Scheduled {len(events)} risk events after {last_date}")
    return events


def generate_volatility_history(sequence: SeededSequence) -> List[VolatilityPoint]:
    """Daily historical / implied vol pairs; implied never drops below 5%."""
    cfg = VOLATILITY_HISTORY
    start = date.fromisoformat(cfg["start_date"])

    points = []
    for i in range(cfg["length"]):
        historical = cfg["historical_base"] + sequence.next() * cfg["historical_span"]
        implied = historical + (sequence.next() - cfg["implied_offset"]) * cfg["implied_span"]
        points.append(VolatilityPoint(
            date=(start + timedelta(days=i)).isoformat(),
            historical=round_half_up(historical),
            implied=round_half_up(max(cfg["implied_floor"], implied)),
        ))
    return points


def high_impact_events(events: List[RiskEvent], within_days: int, last_date: str) -> List[RiskEvent]:
    """High-impact events falling within ``within_days`` of ``last_date``."""
    cutoff = date.fromisoformat(last_date) + timedelta(days=within_days)
    return [e for e in events if e.impact == "high" and date.fromisoformat(e.date) <= cutoff]
