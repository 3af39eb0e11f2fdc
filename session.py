"""
Gold Bias Engine — Dashboard Session

One session owns:
- the price history (built once from its seed, never mutated)
- the two weight configurations (replaced wholesale on every edit)
- the refresh counter and its timer

Flow per refresh tick:
1. Counter increments, factor seed becomes FACTOR_SEED_BASE + counter
2. Factor signals are redrawn and rescored with the current weights
3. Bias score, forecast, risk calendar and volatility history are rebuilt
4. The new DashboardData replaces the old one in a single assignment

Weight edits rebuild the snapshot with the *current* seed: same draws,
new weights.
"""

import logging
import signal
import sys
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from config import (
    DEFAULT_PREDICTION_HORIZON, DEFAULT_TIME_RANGE, FACTOR_SEED_BASE,
    LOG_FORMAT, LOG_LEVEL, LOGS_DIR, POLL_INTERVAL, PREDICTION, PRICE_HISTORY,
    TIME_RANGES, UPDATE_INTERVAL, VOLATILITY_HISTORY,
)
from bias_score import compute_bias_score
from factors import default_sub_factor_weights, filter_by_horizon, generate_factor_hierarchy
from indicators import compute_technical_indicators, trend_label
from market_stats import compute_statistics
from models import DashboardData, SubParameter, TimeHorizon
from predictor import compute_predictions
from price_history import build_price_history, filter_by_range
from risk_calendar import generate_risk_events, generate_volatility_history, high_impact_events
from sequence import SeededSequence
from weights import (
    WeightConfig, apply_category_edit, apply_sub_factor_edit, reset_all,
    reset_category, weights_balanced,
)

logger = logging.getLogger(__name__)


class RefreshTimer:
    """
    Cooperative refresh handle. Nothing runs in the background: the owner
    polls ``is_due()`` from its own loop and calls ``mark()`` after acting.
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self._clock = clock
        self._next_due: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._next_due is not None

    def start(self):
        self._next_due = self._clock() + self.interval

    def stop(self):
        self._next_due = None

    def is_due(self) -> bool:
        return self.running and self._clock() >= self._next_due

    def mark(self):
        if self.running:
            self._next_due = self._clock() + self.interval

    def seconds_remaining(self) -> float:
        if not self.running:
            return 0.0
        return max(0.0, self._next_due - self._clock())


class DashboardSession:
    """
    Main orchestrator.

    Simple interface:
        session.snapshot                                  -> DashboardData
        session.set_category_weight("technical", 25)
        session.set_sub_factor_weight("technical", "RSI (14-day)", 4)
        session.refresh()
        session.poll()                                    -> True if it refreshed
    """

    def __init__(
        self,
        price_seed: int = PRICE_HISTORY["seed"],
        factor_seed_base: int = FACTOR_SEED_BASE,
        update_interval: float = UPDATE_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.factor_seed_base = factor_seed_base
        self.running = False
        self.refresh_count = 0

        self.prices = build_price_history(seed=price_seed)
        # the price history never changes within a session
        self.statistics = compute_statistics(self.prices)
        self.technical_indicators = compute_technical_indicators(self.prices)

        self.weights: WeightConfig = reset_all()
        self.sub_factor_defaults = default_sub_factor_weights()

        self.time_range = DEFAULT_TIME_RANGE
        self.prediction_horizon = DEFAULT_PREDICTION_HORIZON
        self.time_horizon = TimeHorizon.SWING

        self.timer = RefreshTimer(update_interval, clock=clock)
        self.snapshot: DashboardData = self._build_snapshot()

        logger.info(
            f"Session ready: {len(self.prices)} prices "
            f"({self.prices[0].date} → {self.prices[-1].date}), factor seed {self.factor_seed}"
        )

    # ── Seeds ────────────────────────────────────────────────────────────

    @property
    def factor_seed(self) -> int:
        return self.factor_seed_base + self.refresh_count

    @property
    def volatility_seed(self) -> int:
        return VOLATILITY_HISTORY["seed_base"] + self.refresh_count

    # ── Weight edits ─────────────────────────────────────────────────────

    def set_category_weight(self, category: str, value: float) -> DashboardData:
        self.weights = apply_category_edit(
            category, value,
            self.weights.category_weights, self.weights.sub_factor_weights,
            self.sub_factor_defaults,
        )
        return self._recompute()

    def set_sub_factor_weight(self, category: str, name: str, value: float) -> DashboardData:
        self.weights = apply_sub_factor_edit(
            category, name, value,
            self.weights.sub_factor_weights, self.weights.category_weights,
            self.sub_factor_defaults,
        )
        return self._recompute()

    def reset_category(self, category: str) -> DashboardData:
        self.weights = reset_category(
            category, self.weights.category_weights,
            self.weights.sub_factor_weights, self.sub_factor_defaults,
        )
        return self._recompute()

    def reset_all_weights(self) -> DashboardData:
        self.weights = reset_all()
        return self._recompute()

    # ── View settings ────────────────────────────────────────────────────

    def set_time_range(self, time_range: str) -> DashboardData:
        if time_range not in TIME_RANGES:
            raise ValueError(f"Unknown time range {time_range!r}")
        self.time_range = time_range
        return self._recompute()

    def set_prediction_horizon(self, days: int) -> DashboardData:
        if days not in PREDICTION["horizons"]:
            raise ValueError(f"Prediction horizon must be one of {PREDICTION['horizons']}, got {days}")
        self.prediction_horizon = days
        return self._recompute()

    def set_time_horizon(self, horizon: TimeHorizon):
        self.time_horizon = TimeHorizon(horizon)

    def relevant_factors(self) -> Dict[str, List[SubParameter]]:
        """Sub-parameters per category for the selected time horizon."""
        return {
            c.id: filter_by_horizon(c, self.time_horizon)
            for c in self.snapshot.factor_categories
        }

    # ── Refresh ──────────────────────────────────────────────────────────

    def refresh(self) -> DashboardData:
        """Redraw factor signals with the next seed."""
        self.refresh_count += 1
        logger.info(f"=== Refresh {self.refresh_count} (factor seed {self.factor_seed}) ===")
        snapshot = self._recompute()
        self._log_summary(snapshot)
        return snapshot

    def poll(self) -> bool:
        if not self.timer.is_due():
            return False
        self.timer.mark()
        self.refresh()
        return True

    def start(self):
        logger.info(f"Starting dashboard session (refresh every {self.timer.interval:g}s)")
        self.running = True
        self.timer.start()
        self._log_summary(self.snapshot)

    def stop(self):
        self.running = False
        self.timer.stop()
        logger.info("Dashboard session stopped")

    def run(self):
        """Blocking loop: poll the timer until stopped."""
        self.start()
        while self.running:
            try:
                self.poll()
                time.sleep(POLL_INTERVAL)
            except KeyboardInterrupt:
                break
            except Exception as e:
                logger.error(f"Error in refresh loop: {e}", exc_info=True)
                time.sleep(POLL_INTERVAL)
        self.stop()

    # ── Internals ────────────────────────────────────────────────────────

    def _recompute(self) -> DashboardData:
        self.snapshot = self._build_snapshot()
        return self.snapshot

    def _build_snapshot(self) -> DashboardData:
        categories = generate_factor_hierarchy(
            SeededSequence(self.factor_seed),
            self.weights.category_weights,
            self.weights.sub_factor_weights,
        )
        if not weights_balanced(self.weights.category_weights):
            logger.warning(
                f"Category weights total {sum(self.weights.category_weights.values()):.1f}, not 100"
            )

        return DashboardData(
            filtered_data=filter_by_range(self.prices, self.time_range),
            statistics=self.statistics,
            bias_score=compute_bias_score(categories, self.statistics),
            factor_categories=categories,
            technical_indicators=self.technical_indicators,
            predictions=compute_predictions(self.prices, self.prediction_horizon),
            risk_events=generate_risk_events(self.prices[-1].date),
            volatility_history=generate_volatility_history(SeededSequence(self.volatility_seed)),
            refresh_count=self.refresh_count,
            last_updated=datetime.now(),
        )

    def _log_summary(self, snapshot: DashboardData):
        stats = snapshot.statistics
        bias = snapshot.bias_score
        tech = snapshot.technical_indicators
        arrow = "▲" if stats.is_positive_change else "▼"
        if bias.is_bullish:
            lean = "LONG"
        elif bias.is_bearish:
            lean = "SHORT"
        else:
            lean = "FLAT"
        logger.info(
            f"  XAU ${stats.current_price:.2f} {arrow} ({stats.daily_change:+.2f}, "
            f"{stats.daily_change_percent:+.2f}%) ₹{stats.current_price_inr:,.2f}/g "
            f"vol={stats.volatility:.1f}% trend={trend_label(tech, stats.current_price)}"
        )
        logger.info(
            f"  [{lean}] Bias {bias.total_score:+.2f} {bias.market_state.value} → {bias.action.value} "
            f"(up {bias.up_probability}% / down {bias.down_probability}%, "
            f"conf {bias.confidence}%, risk {bias.risk_level.value})"
        )
        for cat in snapshot.factor_categories:
            logger.info(
                f"    {cat.name:38s} {cat.weight_percent:3d}%  "
                f"score {cat.factor_score:+6.1f}  {cat.impact.value}"
            )
        if snapshot.predictions:
            last = snapshot.predictions[-1]
            logger.info(
                f"  {self.prediction_horizon}d forecast {last.predicted:.2f} "
                f"[{last.lower_bound:.2f}, {last.upper_bound:.2f}] width {last.band_width:.2f}"
            )
        for event in high_impact_events(snapshot.risk_events, 14, self.prices[-1].date):
            logger.info(f"  ⚠ {event.date} {event.title}")


def main():
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=LOG_LEVEL,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(LOGS_DIR / f"session_{datetime.now().strftime('%Y%m%d')}.log"),
            logging.StreamHandler(),
        ],
    )

    try:
        session = DashboardSession()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

    def _signal_handler(signum, frame):
        logger.info("Shutdown signal received")
        session.running = False

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)
    session.run()


if __name__ == "__main__":
    main()
