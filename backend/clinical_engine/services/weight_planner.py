"""
Weight-Management Planner.
Composes the metric primitives with an activity factor and a loss-rate policy into a
calorie, protein and timeline plan with milestones and BMI-tiered recommendations.
"""
import logging
import math
from typing import Optional, Sequence, Tuple, TypeVar

from ..core.exceptions import InvalidGoal
from ..core.policy import HEALTHY_BMI_WARNING, TARGET_MILESTONE_LABEL, ClinicalPolicy, default_policy
from ..models.patient import PatientBaseline
from ..models.weight_plan import ActivityLevel, LossRatePolicy, Milestone, WeightPlanResult
from . import metrics
from .safety_adjuster import safety_adjuster

logger = logging.getLogger(__name__)

T = TypeVar("T")


def first_match(brackets: Sequence[Tuple[float, T]], value: float) -> Optional[T]:
    """Top-down evaluation of (inclusive lower bound, outcome) pairs; first match wins."""
    for lower, outcome in brackets:
        if value >= lower:
            return outcome
    return None


class WeightPlanner:
    """Loss-direction planner. Gain planning is a separate mode and is not handled here."""

    def __init__(self, policy: Optional[ClinicalPolicy] = None):
        self.policy = policy or default_policy

    def plan_weight_loss(
        self,
        baseline: PatientBaseline,
        target_weight_kg: float,
        activity_level: ActivityLevel,
        loss_rate: LossRatePolicy,
        current_weight_kg: Optional[float] = None,
    ) -> WeightPlanResult:
        """
        Build a complete loss plan.

        Args:
            baseline: Patient measurements and comorbidities (never mutated)
            target_weight_kg: Goal weight; must be below the current weight
            activity_level: Selects the TDEE multiplier
            loss_rate: Selects the target kg/week
            current_weight_kg: Defaults to the baseline weight

        Returns:
            WeightPlanResult with comorbidity and safety advisories already applied
        """
        policy = self.policy
        current = baseline.weight_kg if current_weight_kg is None else current_weight_kg
        metrics.require_positive("current_weight_kg", current)
        metrics.require_positive("target_weight_kg", target_weight_kg)
        metrics.require_positive("height_cm", baseline.height_cm)
        if target_weight_kg >= current:
            raise InvalidGoal(
                "target_weight_kg",
                target_weight_kg,
                f"target_weight_kg < current_weight_kg ({current})",
            )

        current_bmi = metrics.bmi(current, baseline.height_cm)
        target_bmi = metrics.bmi(target_weight_kg, baseline.height_cm)
        ideal_weight = metrics.weight_at_bmi(policy.reference_bmi, baseline.height_cm)

        # Energy needs are based on the current weight, not the goal
        bmr = metrics.bmr(current, baseline.height_cm, baseline.age_years, baseline.gender, policy)
        tdee = metrics.tdee(bmr, metrics.activity_factor(activity_level, policy))

        rate = metrics.loss_rate_kg_per_week(loss_rate, policy)
        weight_to_lose = metrics.round_half_up(current - target_weight_kg, 3)
        weeks_needed = math.ceil(weight_to_lose / rate)
        months_needed = metrics.round_int(weeks_needed / policy.weeks_per_month)

        deficit = metrics.daily_deficit(rate, policy)
        target_calories = metrics.target_calories(tdee, deficit, baseline.gender, policy)
        floor_applied = metrics.round_int(tdee - deficit) < metrics.calorie_floor(baseline.gender, policy)

        # Protein scales to the goal weight to preserve lean mass during the deficit
        protein = metrics.round_int(policy.protein_g_per_kg_target * target_weight_kg)

        exercise = tuple(first_match(policy.exercise_tiers, current_bmi) or ()) + tuple(policy.common_exercise)
        considerations = tuple(first_match(policy.bmi_medical_brackets, current_bmi) or ())
        warnings = (HEALTHY_BMI_WARNING,) if current_bmi < policy.healthy_bmi_ceiling else ()

        plan = WeightPlanResult(
            current_weight_kg=current,
            target_weight_kg=target_weight_kg,
            weight_to_lose_kg=weight_to_lose,
            weekly_rate_kg=rate,
            current_bmi=metrics.round_half_up(current_bmi, 1),
            target_bmi=metrics.round_half_up(target_bmi, 1),
            bmi_category=metrics.bmi_category(current_bmi, policy),
            ideal_weight=metrics.round_half_up(ideal_weight, 1),
            bmr=metrics.round_int(bmr),
            tdee=metrics.round_int(tdee),
            daily_deficit=deficit,
            target_calories=target_calories,
            calorie_floor_applied=floor_applied,
            protein_target_grams=protein,
            weeks_needed=weeks_needed,
            months_needed=months_needed,
            milestones=self.milestones(current, target_weight_kg),
            exercise_recommendations=exercise,
            dietary_suggestions=policy.dietary_suggestions,
            medical_considerations=considerations,
            warnings=warnings,
        )
        logger.debug(
            "Loss plan: bmi=%.1f tdee=%d deficit=%d target_kcal=%d weeks=%d",
            current_bmi, plan.tdee, deficit, target_calories, weeks_needed,
        )
        return safety_adjuster.adjust_weight_plan(plan, baseline.active_comorbidities, policy)

    def milestones(self, current_weight_kg: float, target_weight_kg: float) -> Tuple[Milestone, ...]:
        """
        5/10/15% milestones followed by the target. Percentage milestones below the target
        are dropped; the target is always last even if it equals a percentage milestone.
        """
        steps = [
            Milestone(weight_threshold=metrics.round_int(current_weight_kg * fraction), achievement_label=label)
            for fraction, label in self.policy.milestone_fractions
        ]
        kept = tuple(m for m in steps if m.weight_threshold >= target_weight_kg)
        return kept + (Milestone(target_weight_kg, TARGET_MILESTONE_LABEL, is_target=True),)


weight_planner = WeightPlanner()
