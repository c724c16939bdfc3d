"""
Pressure-injury risk scale scorers: Braden, Waterlow, Norton and PUSH.

Each scorer validates its itemized sub-scores against the policy's closed ranges,
sums them, and maps the total onto the scale's fixed band table. Interpretation text
comes from the interpretation catalog, never from branches in this module.
"""
import logging
from dataclasses import fields
from numbers import Real
from typing import Iterable, Optional, Tuple

from ..core.exceptions import InvalidInput, OutOfRangeSubscore, PolicyConfigurationError
from ..core.policy import (
    BRADEN_DEFICIT_SUBSCORE,
    PUSH_AREA_MAX_SUBSCORE,
    SUBSCORE_LABELS,
    WATERLOW_AGE_BANDS,
    WATERLOW_BUILD_BANDS,
    WATERLOW_SEX_SUBSCORES,
    ClinicalPolicy,
    RiskBand,
    default_policy,
)
from ..models.patient import Comorbidity, Gender
from ..models.risk import (
    BradenInput,
    HealingTrend,
    NortonInput,
    PushInput,
    PushResult,
    RiskScale,
    RiskScaleResult,
    WaterlowInput,
)
from . import interpretations
from .metrics import round_half_up
from .safety_adjuster import safety_adjuster

logger = logging.getLogger(__name__)


# ── Item derivation helpers ──────────────────────────────────────────────────

def push_area_subscore(area_cm2: float, policy: Optional[ClinicalPolicy] = None) -> int:
    """PUSH 3.0 length x width sub-score (0-10) for a surface area in cm2."""
    policy = policy or default_policy
    if area_cm2 is None or area_cm2 < 0:
        raise InvalidInput("area_cm2", area_cm2, "area_cm2 >= 0")
    if area_cm2 == 0:
        return 0
    # Bands are defined at one-decimal resolution; an open wound never rounds to "closed"
    area = max(0.1, round_half_up(area_cm2, 1))
    for upper, score in policy.push_area_bands:
        if area <= upper:
            return score
    return PUSH_AREA_MAX_SUBSCORE


def waterlow_build_subscore(bmi_value: float) -> int:
    if bmi_value is None or bmi_value <= 0:
        raise InvalidInput("bmi", bmi_value, "bmi > 0")
    for upper, score in WATERLOW_BUILD_BANDS:
        if bmi_value < upper:
            return score
    return WATERLOW_BUILD_BANDS[-1][1]


def waterlow_age_subscore(age_years: float) -> int:
    # The Waterlow age item starts at 14
    if age_years is None or age_years < 14:
        raise InvalidInput("age_years", age_years, "age_years >= 14 for Waterlow scoring")
    for upper, score in WATERLOW_AGE_BANDS:
        if age_years < upper:
            return score
    return WATERLOW_AGE_BANDS[-1][1]


def waterlow_sex_subscore(gender: Gender) -> int:
    try:
        return WATERLOW_SEX_SUBSCORES[Gender(gender)]
    except (KeyError, ValueError):
        raise InvalidInput("gender", gender, f"one of {[g.value for g in WATERLOW_SEX_SUBSCORES]}")


# ── Scorer ───────────────────────────────────────────────────────────────────

class RiskScaleScorer:
    """
    Validated scoring for the pressure-injury scales.
    Results are immutable; comorbidity advisories are attached by the safety adjuster.
    """

    def __init__(self, policy: Optional[ClinicalPolicy] = None):
        self.policy = policy or default_policy

    def score_braden(self, inputs: BradenInput, comorbidities: Iterable[Comorbidity] = ()) -> RiskScaleResult:
        subscores = self._validated_subscores(RiskScale.BRADEN, inputs)
        total = sum(score for _, score in subscores)
        band = self._band_for(RiskScale.BRADEN, total)
        entry = self._catalog_entry(RiskScale.BRADEN, band.level.value)

        lowest = tuple(
            SUBSCORE_LABELS.get(name, name)
            for name, score in subscores
            if score <= BRADEN_DEFICIT_SUBSCORE
        )

        result = RiskScaleResult(
            scale=RiskScale.BRADEN,
            total_score=total,
            risk_level=band.level,
            severity_rank=self._severity_rank(RiskScale.BRADEN, band.level),
            interpretation=entry["interpretation"],
            subscores=subscores,
            interventions=tuple(entry.get("interventions", ())),
            turning_schedule=entry.get("turning_schedule"),
            support_surface=entry.get("support_surface"),
            lowest_subscores=lowest,
        )
        logger.debug("Braden total=%d level=%s", total, band.level.value)
        return safety_adjuster.adjust_risk(result, comorbidities, self.policy)

    def score_waterlow(self, inputs: WaterlowInput, comorbidities: Iterable[Comorbidity] = ()) -> RiskScaleResult:
        return self._score_banded(RiskScale.WATERLOW, inputs, comorbidities)

    def score_norton(self, inputs: NortonInput, comorbidities: Iterable[Comorbidity] = ()) -> RiskScaleResult:
        return self._score_banded(RiskScale.NORTON, inputs, comorbidities)

    def score_push(self, inputs: PushInput, prior_score: Optional[int] = None) -> PushResult:
        """
        PUSH total (0-17). PUSH has no risk level; with a prior total it yields a healing trend:
        lower than prior is healing, equal is stable, higher is deteriorating.
        """
        subscores = self._validated_subscores(RiskScale.PUSH, inputs)
        total = sum(score for _, score in subscores)

        trend = None
        if prior_score is not None:
            low, high = self.policy.score_range(RiskScale.PUSH)
            if not _is_whole(prior_score) or not low <= prior_score <= high:
                raise InvalidInput("prior_score", prior_score, f"integer {low} <= prior_score <= {high}")
            if total < prior_score:
                trend = HealingTrend.HEALING
            elif total == prior_score:
                trend = HealingTrend.STABLE
            else:
                trend = HealingTrend.DETERIORATING

        key = trend.value if trend else interpretations.PUSH_BASELINE_KEY
        entry = self._catalog_entry(RiskScale.PUSH, key)
        logger.debug("PUSH total=%d prior=%s trend=%s", total, prior_score, key)
        return PushResult(
            total_score=total,
            subscores=subscores,
            prior_score=prior_score,
            healing_trend=trend,
            interpretation=entry["interpretation"],
        )

    # ── internals ───────────────────────────────────────────────────────────

    def _score_banded(self, scale: RiskScale, inputs, comorbidities: Iterable[Comorbidity]) -> RiskScaleResult:
        subscores = self._validated_subscores(scale, inputs)
        total = sum(score for _, score in subscores)
        band = self._band_for(scale, total)
        entry = self._catalog_entry(scale, band.level.value)
        result = RiskScaleResult(
            scale=scale,
            total_score=total,
            risk_level=band.level,
            severity_rank=self._severity_rank(scale, band.level),
            interpretation=entry["interpretation"],
            subscores=subscores,
        )
        logger.debug("%s total=%d level=%s", scale.value, total, band.level.value)
        return safety_adjuster.adjust_risk(result, comorbidities, self.policy)

    def _validated_subscores(self, scale: RiskScale, inputs) -> Tuple[Tuple[str, int], ...]:
        ranges = self.policy.subscore_ranges[scale]
        declared = {f.name for f in fields(inputs)}
        if declared != set(ranges):
            raise PolicyConfigurationError(f"{scale.value} item ranges do not match {type(inputs).__name__}")

        validated = []
        for name, (low, high) in ranges.items():
            value = getattr(inputs, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise InvalidInput(name, value, f"numeric item score for {scale.value}")
            if not _is_whole(value) or not low <= value <= high:
                raise OutOfRangeSubscore(name, value, low, high)
            validated.append((name, int(value)))
        return tuple(validated)

    def _band_for(self, scale: RiskScale, total: int) -> RiskBand:
        for band in self.policy.risk_bands[scale]:
            if band.min_score <= total <= band.max_score:
                return band
        raise PolicyConfigurationError(f"No {scale.value} band covers total {total}")

    def _severity_rank(self, scale: RiskScale, level) -> int:
        return self.policy.risk_level_order[scale].index(level)

    def _catalog_entry(self, scale: RiskScale, key: str):
        return interpretations.lookup(scale, key, self.policy.interpretations_path)


def _is_whole(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and float(value).is_integer()


risk_scorer = RiskScaleScorer()
