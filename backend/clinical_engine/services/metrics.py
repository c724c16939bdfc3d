"""
Metric primitives: BMI, BMR (Mifflin-St Jeor), TDEE and caloric-deficit arithmetic.
Pure functions over metric inputs; every constant comes from the clinical policy.
"""
import logging
import math
from typing import Optional

from ..core.exceptions import InvalidInput
from ..core.policy import ClinicalPolicy, default_policy
from ..models.patient import Gender
from ..models.weight_plan import ActivityLevel, LossRatePolicy

logger = logging.getLogger(__name__)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positive values (clinical charts expect 2.5 -> 3)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))


def require_positive(field: str, value: float) -> None:
    if value is None or not math.isfinite(value) or value <= 0:
        raise InvalidInput(field, value, f"{field} > 0")


def require_age(age_years: float, policy: Optional[ClinicalPolicy] = None) -> None:
    policy = policy or default_policy
    if age_years is None or not (policy.min_age_years <= age_years <= policy.max_age_years):
        raise InvalidInput(
            "age_years",
            age_years,
            f"{policy.min_age_years} <= age_years <= {policy.max_age_years}",
        )


def bmi(weight_kg: float, height_cm: float) -> float:
    """weight / height(m)^2, unrounded."""
    require_positive("height_cm", height_cm)
    require_positive("weight_kg", weight_kg)
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def weight_at_bmi(target_bmi: float, height_cm: float) -> float:
    require_positive("height_cm", height_cm)
    height_m = height_cm / 100
    return target_bmi * height_m * height_m


def bmi_category(value: float, policy: Optional[ClinicalPolicy] = None) -> str:
    policy = policy or default_policy
    for upper, category in policy.bmi_categories:
        if value < upper:
            return category
    return policy.bmi_categories[-1][1]


def bmr(
    weight_kg: float,
    height_cm: float,
    age_years: float,
    gender: Gender,
    policy: Optional[ClinicalPolicy] = None,
) -> float:
    """
    Mifflin-St Jeor basal metabolic rate (kcal/day).
    10*W + 6.25*H - 5*A + offset, where the offset is a policy value per gender category.
    """
    policy = policy or default_policy
    require_positive("weight_kg", weight_kg)
    require_positive("height_cm", height_cm)
    require_age(age_years, policy)
    try:
        offset = policy.bmr_gender_offsets[Gender(gender)]
    except (KeyError, ValueError):
        raise InvalidInput(
            "gender",
            getattr(gender, "value", gender),
            f"one of {[g.value for g in policy.bmr_gender_offsets]}",
        )
    return 10 * weight_kg + 6.25 * height_cm - 5 * age_years + offset


def activity_factor(level: ActivityLevel, policy: Optional[ClinicalPolicy] = None) -> float:
    policy = policy or default_policy
    try:
        return policy.activity_factors[ActivityLevel(level)]
    except (KeyError, ValueError):
        raise InvalidInput("activity_level", level, f"one of {[a.value for a in ActivityLevel]}")


def loss_rate_kg_per_week(rate: LossRatePolicy, policy: Optional[ClinicalPolicy] = None) -> float:
    policy = policy or default_policy
    try:
        return policy.loss_rates[LossRatePolicy(rate)]
    except (KeyError, ValueError):
        raise InvalidInput("loss_rate", rate, f"one of {[p.value for p in LossRatePolicy]}")


def tdee(bmr_kcal: float, factor: float) -> float:
    return bmr_kcal * factor


def daily_deficit(weekly_loss_rate_kg: float, policy: Optional[ClinicalPolicy] = None) -> int:
    """round(rate * kcal-per-kg / 7)."""
    policy = policy or default_policy
    require_positive("weekly_loss_rate_kg", weekly_loss_rate_kg)
    return round_int(weekly_loss_rate_kg * policy.kcal_per_kg_adipose / 7)


def calorie_floor(gender: Gender, policy: Optional[ClinicalPolicy] = None) -> int:
    policy = policy or default_policy
    try:
        return policy.calorie_floors[Gender(gender)]
    except (KeyError, ValueError):
        raise InvalidInput(
            "gender",
            getattr(gender, "value", gender),
            f"one of {[g.value for g in policy.calorie_floors]}",
        )


def target_calories(
    tdee_kcal: float,
    deficit_kcal: float,
    gender: Gender,
    policy: Optional[ClinicalPolicy] = None,
) -> int:
    """
    max(round(tdee - deficit), gender floor).
    The floor is a hard clamp and wins even when it shrinks the requested deficit.
    """
    floor = calorie_floor(gender, policy)
    arithmetic = round_int(tdee_kcal - deficit_kcal)
    if arithmetic < floor:
        logger.info("Target calories %d below %s floor; clamped to %d", arithmetic, Gender(gender).value, floor)
        return floor
    return arithmetic
