"""
Wound Trend Analyzer - percent area change, trend classification, stalled wound detection.
Invoked directly against a stored series, outside the planner pipeline.
"""
import logging
import math
from datetime import datetime
from typing import List, Optional, Sequence

import numpy as np

from ..core.exceptions import EmptySeries, InvalidInput
from ..core.policy import STALLED_WEEKLY_RATE_CM2, ClinicalPolicy, default_policy
from ..models.wound import TrendClassification, TrendResult, WoundObservation

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


class WoundTrendAnalyzer:
    """
    Healing trend over serial wound measurements.
    Caller ordering is never trusted: observations are sorted by timestamp first.
    """

    def __init__(self, policy: Optional[ClinicalPolicy] = None):
        self.policy = policy or default_policy

    def analyze(self, series: Optional[Sequence[WoundObservation]]) -> TrendResult:
        """
        Compare the earliest and latest observation by time.
        Raises EmptySeries only when no series is supplied; an empty series is insufficient data.
        """
        if series is None:
            raise EmptySeries()

        observations = self._sorted(series)
        count = len(observations)
        if count < 2:
            message = (
                "No observations recorded" if count == 0
                else "Only one observation recorded; at least two are needed to judge a trend"
            )
            return TrendResult(
                classification=TrendClassification.INSUFFICIENT_DATA,
                observation_count=count,
                message=message,
                recommendations=self.policy.wound_recommendations["insufficientData"],
            )

        first, last = observations[0], observations[-1]
        first_area = first.effective_area
        last_area = last.effective_area
        if first_area <= 0:
            raise InvalidInput("observations[0].area_cm2", first_area, "earliest wound area > 0")

        # Cut-points apply to the exact change; only the reported figure is rounded
        raw_change = (last_area - first_area) * 100 / first_area
        percent_change = round(raw_change, 1)
        classification = self._classify(raw_change)

        elapsed = last.timestamp - first.timestamp
        days_elapsed = elapsed.days
        span_days = max(1, math.ceil(elapsed.total_seconds() / SECONDS_PER_DAY))

        weekly_rate = (first_area - last_area) / span_days * 7
        estimated_days = None
        if weekly_rate > 0 and last_area > 0:
            estimated_days = math.ceil(last_area / weekly_rate * 7)

        par = -raw_change
        is_stalled = (
            days_elapsed >= self.policy.stalled_wound_days
            and par < self.policy.stalled_wound_par_threshold
        )

        result = TrendResult(
            classification=classification,
            observation_count=count,
            message=f"Area changed {percent_change:+.1f}% over {days_elapsed} day(s)",
            percent_change=percent_change,
            first_area=first_area,
            last_area=last_area,
            days_elapsed=days_elapsed,
            weekly_healing_rate_cm2=round(weekly_rate, 2),
            estimated_healing_days=estimated_days,
            area_slope_cm2_per_week=self._area_slope(observations),
            is_stalled=is_stalled,
            recommendations=self._recommendations(classification, weekly_rate, is_stalled),
        )
        logger.debug(
            "Wound trend: %d observations, %.1f%% change, %s", count, percent_change, classification.value
        )
        return result

    def _sorted(self, series: Sequence[WoundObservation]) -> List[WoundObservation]:
        naive = None
        for i, obs in enumerate(series):
            if not isinstance(obs.timestamp, datetime):
                raise InvalidInput(f"observations[{i}].timestamp", obs.timestamp, "datetime timestamp")
            # Aware and naive datetimes cannot be ordered against each other
            is_naive = obs.timestamp.utcoffset() is None
            if naive is None:
                naive = is_naive
            elif is_naive != naive:
                raise InvalidInput(
                    f"observations[{i}].timestamp",
                    obs.timestamp.isoformat(),
                    "all timestamps timezone-aware or all naive",
                )
            for name in ("length_cm", "width_cm", "area_cm2"):
                value = getattr(obs, name)
                if value is not None and (not math.isfinite(value) or value < 0):
                    raise InvalidInput(f"observations[{i}].{name}", value, f"{name} >= 0")
        # Stable sort: observations sharing a timestamp keep their supplied order
        return sorted(series, key=lambda o: o.timestamp)

    def _classify(self, percent_change: float) -> TrendClassification:
        threshold = self.policy.wound_trend_threshold_pct
        if percent_change < -threshold:
            return TrendClassification.IMPROVING
        if percent_change > threshold:
            return TrendClassification.DETERIORATING
        return TrendClassification.STABLE

    def _area_slope(self, observations: Sequence[WoundObservation]) -> Optional[float]:
        """Least-squares area slope in cm2/week across every observation."""
        origin = observations[0].timestamp
        x = [(o.timestamp - origin).total_seconds() / SECONDS_PER_DAY for o in observations]
        if len(set(x)) < 2:
            return None
        y = [o.effective_area for o in observations]
        coeffs = np.polyfit(x, y, 1)
        return round(float(coeffs[0]) * 7, 3)

    def _recommendations(self, classification: TrendClassification, weekly_rate: float, is_stalled: bool):
        key = classification.value
        if classification != TrendClassification.DETERIORATING and (
            is_stalled
            or (classification == TrendClassification.STABLE and weekly_rate < STALLED_WEEKLY_RATE_CM2)
        ):
            key = "stalled"
        return self.policy.wound_recommendations[key]


wound_trend_analyzer = WoundTrendAnalyzer()
