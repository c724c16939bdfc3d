"""
Comorbidity & Safety Adjuster.

Runs after the planner or a scorer has produced its base result. It consults the
active comorbidities and the numbers already computed, and appends advisory entries.
It never removes an entry, never touches a numeric field, and never adds an entry that
is already present, so applying it twice gives the same result as applying it once.
"""
import logging
from dataclasses import dataclass, replace
from typing import Callable, FrozenSet, Iterable, Optional, Tuple

from ..core.policy import ClinicalPolicy, default_policy
from ..models.patient import Comorbidity
from ..models.risk import RiskScaleResult
from ..models.weight_plan import WeightPlanResult

logger = logging.getLogger(__name__)

CONSIDERATIONS = "medical_considerations"
WARNINGS = "warnings"


@dataclass(frozen=True)
class PlanContext:
    plan: WeightPlanResult
    comorbidities: FrozenSet[Comorbidity]
    policy: ClinicalPolicy


@dataclass(frozen=True)
class PlanRule:
    target: str  # CONSIDERATIONS or WARNINGS
    applies: Callable[[PlanContext], bool]
    message: Callable[[PlanContext], str]


@dataclass(frozen=True)
class RiskRule:
    comorbidity: Comorbidity
    message: str


def _has(comorbidity: Comorbidity) -> Callable[[PlanContext], bool]:
    return lambda ctx: comorbidity in ctx.comorbidities


def _fixed(text: str) -> Callable[[PlanContext], str]:
    return lambda ctx: text


PLAN_RULES: Tuple[PlanRule, ...] = (
    PlanRule(
        CONSIDERATIONS,
        _has(Comorbidity.DIABETES),
        _fixed("Diabetes: Adjust medications as weight decreases. Monitor glucose closely."),
    ),
    PlanRule(
        CONSIDERATIONS,
        _has(Comorbidity.HYPERTENSION),
        _fixed("Hypertension: May need medication adjustments as weight decreases."),
    ),
    PlanRule(
        CONSIDERATIONS,
        _has(Comorbidity.CHRONIC_KIDNEY_DISEASE),
        _fixed("Chronic kidney disease: Review protein target with renal dietitian before starting."),
    ),
    PlanRule(
        CONSIDERATIONS,
        _has(Comorbidity.HEART_FAILURE),
        _fixed("Heart failure: Supervise exercise progression; fluid and sodium restriction take precedence."),
    ),
    PlanRule(
        CONSIDERATIONS,
        lambda ctx: ctx.plan.daily_deficit > ctx.policy.aggressive_deficit_kcal,
        _fixed("Aggressive deficit - Regular medical monitoring advised"),
    ),
    PlanRule(
        WARNINGS,
        lambda ctx: (
            Comorbidity.DIABETES in ctx.comorbidities
            and ctx.plan.daily_deficit > ctx.policy.diabetic_max_deficit_kcal
        ),
        lambda ctx: (
            f"Daily deficit of {ctx.plan.daily_deficit} kcal exceeds the "
            f"{ctx.policy.diabetic_max_deficit_kcal} kcal ceiling for diabetic patients - "
            "choose a slower loss rate to limit hypoglycaemia risk"
        ),
    ),
    PlanRule(
        WARNINGS,
        lambda ctx: ctx.plan.calorie_floor_applied,
        lambda ctx: (
            f"Calorie target raised to the {ctx.plan.target_calories} kcal safety floor; "
            f"effective deficit is {max(0, ctx.plan.tdee - ctx.plan.target_calories)} kcal/day, "
            f"so weekly loss will be slower than {ctx.plan.weekly_rate_kg} kg"
        ),
    ),
)

RISK_RULES: Tuple[RiskRule, ...] = (
    RiskRule(
        Comorbidity.DIABETES,
        "Diabetes: Inspect heels and feet every shift - neuropathy may mask pressure pain",
    ),
    RiskRule(
        Comorbidity.PERIPHERAL_VASCULAR_DISEASE,
        "Peripheral vascular disease: Vascular assessment before sharp debridement; offload heels completely",
    ),
)


def _append_unique(existing: Tuple[str, ...], additions: Iterable[str]) -> Tuple[str, ...]:
    merged = list(existing)
    for entry in additions:
        if entry not in merged:
            merged.append(entry)
    return tuple(merged)


class SafetyAdjuster:
    def __init__(self, plan_rules: Tuple[PlanRule, ...] = PLAN_RULES, risk_rules: Tuple[RiskRule, ...] = RISK_RULES):
        self.plan_rules = plan_rules
        self.risk_rules = risk_rules

    def adjust_weight_plan(
        self,
        plan: WeightPlanResult,
        comorbidities: Iterable[Comorbidity] = (),
        policy: Optional[ClinicalPolicy] = None,
    ) -> WeightPlanResult:
        """Return a copy of ``plan`` with comorbidity and safety advisories appended."""
        ctx = PlanContext(plan=plan, comorbidities=frozenset(comorbidities), policy=policy or default_policy)
        additions = {CONSIDERATIONS: [], WARNINGS: []}
        for rule in self.plan_rules:
            if rule.applies(ctx):
                additions[rule.target].append(rule.message(ctx))

        considerations = _append_unique(plan.medical_considerations, additions[CONSIDERATIONS])
        warnings = _append_unique(plan.warnings, additions[WARNINGS])
        if len(warnings) > len(plan.warnings):
            logger.warning("Weight plan flagged with %d safety warning(s)", len(warnings) - len(plan.warnings))

        if considerations == plan.medical_considerations and warnings == plan.warnings:
            return plan
        return replace(plan, medical_considerations=considerations, warnings=warnings)

    def adjust_risk(
        self,
        result: RiskScaleResult,
        comorbidities: Iterable[Comorbidity] = (),
        policy: Optional[ClinicalPolicy] = None,
    ) -> RiskScaleResult:
        """Attach comorbidity advisories once a scale reaches its advisory threshold."""
        policy = policy or default_policy
        active = frozenset(comorbidities)
        min_level = policy.advisory_min_level.get(result.scale)
        if min_level is None or not active:
            return result
        if result.severity_rank < policy.risk_level_order[result.scale].index(min_level):
            return result

        advisories = _append_unique(
            result.advisories,
            (rule.message for rule in self.risk_rules if rule.comorbidity in active),
        )
        if advisories == result.advisories:
            return result
        logger.debug("%s result given %d comorbidity advisories", result.scale.value, len(advisories))
        return replace(result, advisories=advisories)


safety_adjuster = SafetyAdjuster()
