"""
Clinical policy tables.

Every threshold, multiplier and cut-point the engine uses lives here as an explicit
ordered mapping. Adjusting a cut-point or adding a tier is a data edit in this module
(or an override passed through ``ClinicalPolicy``), never a change to algorithm code.
"""
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple

from .config import Settings, settings
from .exceptions import PolicyConfigurationError
from ..models.patient import Gender
from ..models.risk import BradenRisk, NortonRisk, RiskScale, WaterlowRisk
from ..models.weight_plan import ActivityLevel, DietarySuggestions, LossRatePolicy


class RiskBand(NamedTuple):
    min_score: int
    max_score: int
    level: Any


# ── Metabolic tables ─────────────────────────────────────────────────────────

ACTIVITY_FACTORS: Dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,      # little/no exercise
    ActivityLevel.LIGHT: 1.375,        # 1-3 days/week
    ActivityLevel.MODERATE: 1.55,      # 3-5 days/week
    ActivityLevel.ACTIVE: 1.725,       # 6-7 days/week
    ActivityLevel.VERY_ACTIVE: 1.9,    # twice/day
}

LOSS_RATES_KG_PER_WEEK: Dict[LossRatePolicy, float] = {
    LossRatePolicy.SLOW: 0.25,
    LossRatePolicy.MODERATE: 0.5,
    LossRatePolicy.FAST: 0.75,
    LossRatePolicy.AGGRESSIVE: 1.0,
}

# Mifflin-St Jeor constant term per gender category
BMR_GENDER_OFFSETS: Dict[Gender, float] = {
    Gender.MALE: 5.0,
    Gender.FEMALE: -161.0,
}

# (exclusive upper BMI, category), ascending
BMI_CATEGORIES: Tuple[Tuple[float, str], ...] = (
    (18.5, "Underweight"),
    (25.0, "Normal"),
    (30.0, "Overweight"),
    (35.0, "Obese I"),
    (40.0, "Obese II"),
    (float("inf"), "Obese III"),
)

# (inclusive lower BMI, exercise list); evaluated top-down, first match wins
EXERCISE_TIERS: Tuple[Tuple[float, Tuple[str, ...]], ...] = (
    (40.0, (
        "Start with low-impact activities (swimming, water aerobics)",
        "Walking: Start with 10 minutes, build to 30 minutes daily",
        "Chair exercises if mobility limited",
    )),
    (30.0, (
        "Walking: 30-45 minutes, 5 days/week",
        "Low-impact cardio: cycling, swimming",
        "Resistance training 2-3 times/week",
    )),
    (float("-inf"), (
        "Moderate cardio: 150-300 minutes/week",
        "HIIT: 2-3 sessions/week",
        "Strength training: 3-4 times/week",
    )),
)

COMMON_EXERCISE: Tuple[str, ...] = (
    "Daily target: 8,000-10,000 steps",
    "Include flexibility work (stretching, yoga)",
)

# (inclusive lower BMI, considerations); first match wins, no match adds nothing
BMI_MEDICAL_BRACKETS: Tuple[Tuple[float, Tuple[str, ...]], ...] = (
    (40.0, (
        "Class III Obesity - Consider bariatric surgery evaluation",
        "Screen for: Diabetes, hypertension, sleep apnea",
    )),
    (35.0, (
        "Class II Obesity - Medical supervision recommended",
        "Screen for metabolic syndrome",
    )),
)

MILESTONE_FRACTIONS: Tuple[Tuple[float, str], ...] = (
    (0.95, "5% loss - Metabolic improvements begin"),
    (0.90, "10% loss - Significant health benefits"),
    (0.85, "15% loss - Major risk reduction"),
)
TARGET_MILESTONE_LABEL = "Target reached!"

HEALTHY_BMI_WARNING = "BMI already in healthy range - weight loss may not be necessary"

DIETARY_SUGGESTIONS = DietarySuggestions(
    to_eat=(
        "Vegetables: Efo riro, edikaikong, vegetable soup (portion-controlled)",
        "Lean proteins: Grilled fish, chicken (skinless), turkey",
        "Complex carbs: Ofada rice, beans, unripe plantain (in moderation)",
        "Fruits: Oranges, pawpaw, watermelon, garden eggs",
        "Healthy fats: Groundnuts (small portions), avocado",
        "Protein-rich: Eggs, moi-moi (steamed, not fried)",
    ),
    to_limit=(
        "Fried foods: Puff-puff, akara, fried plantain",
        "White carbs: White rice, eba, pounded yam (reduce portions)",
        "Sugary drinks: Soft drinks, malt, sweetened zobo",
        "Palm oil: Use sparingly",
        "Fried meat/fish",
        "Snacks: Chin-chin, biscuits, cakes",
    ),
    meal_timing=(
        "Eat breakfast within 1-2 hours of waking",
        "Have largest meal at lunch if possible",
        "Light dinner, at least 3 hours before bed",
        "Avoid late-night eating",
        "Stay hydrated - 8-10 glasses of water daily",
    ),
)

# ── Risk scale tables ────────────────────────────────────────────────────────

SUBSCORE_RANGES: Dict[RiskScale, Dict[str, Tuple[int, int]]] = {
    RiskScale.BRADEN: {
        "sensory_perception": (1, 4),
        "moisture": (1, 4),
        "activity": (1, 4),
        "mobility": (1, 4),
        "nutrition": (1, 4),
        "friction_shear": (1, 3),
    },
    RiskScale.WATERLOW: {
        "build_bmi": (0, 3),
        "skin_type": (0, 2),
        "sex": (1, 2),
        "age": (1, 5),
        "continence": (0, 3),
        "mobility": (0, 5),
        "appetite": (0, 3),
        "tissue_malnutrition": (0, 8),
        "neurological_deficit": (0, 6),
        "surgery_trauma": (0, 8),
        "medication": (0, 4),
    },
    RiskScale.NORTON: {
        "physical_condition": (1, 4),
        "mental_condition": (1, 4),
        "activity": (1, 4),
        "mobility": (1, 4),
        "incontinence": (1, 4),
    },
    RiskScale.PUSH: {
        "length_times_width": (0, 10),
        "exudate_amount": (0, 3),
        "surface_type": (0, 4),
    },
}

SUBSCORE_LABELS: Dict[str, str] = {
    "sensory_perception": "Sensory Perception",
    "moisture": "Moisture",
    "activity": "Activity",
    "mobility": "Mobility",
    "nutrition": "Nutrition",
    "friction_shear": "Friction & Shear",
}

# Lowest Braden item score still flagged as a contributing deficit
BRADEN_DEFICIT_SUBSCORE = 2

RISK_BANDS: Dict[RiskScale, Tuple[RiskBand, ...]] = {
    RiskScale.BRADEN: (
        RiskBand(6, 9, BradenRisk.VERY_HIGH),
        RiskBand(10, 12, BradenRisk.HIGH),
        RiskBand(13, 14, BradenRisk.MODERATE),
        RiskBand(15, 18, BradenRisk.MILD),
        RiskBand(19, 23, BradenRisk.NO_RISK),
    ),
    RiskScale.WATERLOW: (
        RiskBand(2, 9, WaterlowRisk.NOT_AT_RISK),
        RiskBand(10, 14, WaterlowRisk.AT_RISK),
        RiskBand(15, 19, WaterlowRisk.HIGH_RISK),
        RiskBand(20, 49, WaterlowRisk.VERY_HIGH_RISK),
    ),
    RiskScale.NORTON: (
        RiskBand(5, 10, NortonRisk.VERY_HIGH),
        RiskBand(11, 14, NortonRisk.HIGH),
        RiskBand(15, 18, NortonRisk.MODERATE),
        RiskBand(19, 20, NortonRisk.LOW),
    ),
}

# Least severe first
RISK_LEVEL_ORDER: Dict[RiskScale, Tuple[Any, ...]] = {
    RiskScale.BRADEN: (
        BradenRisk.NO_RISK, BradenRisk.MILD, BradenRisk.MODERATE, BradenRisk.HIGH, BradenRisk.VERY_HIGH,
    ),
    RiskScale.WATERLOW: (
        WaterlowRisk.NOT_AT_RISK, WaterlowRisk.AT_RISK, WaterlowRisk.HIGH_RISK, WaterlowRisk.VERY_HIGH_RISK,
    ),
    RiskScale.NORTON: (
        NortonRisk.LOW, NortonRisk.MODERATE, NortonRisk.HIGH, NortonRisk.VERY_HIGH,
    ),
}

# Comorbidity advisories are attached from this level upwards
ADVISORY_MIN_LEVEL: Dict[RiskScale, Any] = {
    RiskScale.BRADEN: BradenRisk.MODERATE,
    RiskScale.WATERLOW: WaterlowRisk.AT_RISK,
    RiskScale.NORTON: NortonRisk.MODERATE,
}

# PUSH 3.0 length x width bands: (inclusive upper area in cm2 at one decimal, sub-score)
PUSH_AREA_BANDS: Tuple[Tuple[float, int], ...] = (
    (0.0, 0),
    (0.2, 1),    # < 0.3
    (0.6, 2),
    (1.0, 3),
    (2.0, 4),
    (3.0, 5),
    (4.0, 6),
    (8.0, 7),
    (12.0, 8),
    (24.0, 9),
)
PUSH_AREA_MAX_SUBSCORE = 10

# Waterlow item derivation
WATERLOW_BUILD_BANDS: Tuple[Tuple[float, int], ...] = (
    (20.0, 3),   # below average
    (25.0, 0),   # average
    (30.0, 1),   # above average
    (float("inf"), 2),  # obese
)
WATERLOW_AGE_BANDS: Tuple[Tuple[float, int], ...] = (
    (50.0, 1),
    (65.0, 2),
    (75.0, 3),
    (81.0, 4),
    (float("inf"), 5),
)
WATERLOW_SEX_SUBSCORES: Dict[Gender, int] = {
    Gender.MALE: 1,
    Gender.FEMALE: 2,
}

# ── Wound trend recommendations ──────────────────────────────────────────────

WOUND_RECOMMENDATIONS: Dict[str, Tuple[str, ...]] = {
    "insufficientData": (
        "Insufficient data - continue monitoring",
    ),
    "deteriorating": (
        "URGENT: Wound is deteriorating - review treatment plan",
        "Consider infection assessment and wound swab",
        "Evaluate patient nutrition and hydration status",
        "Review underlying conditions (diabetes, vascular disease)",
        "Consider specialist referral",
    ),
    "stalled": (
        "Wound healing is stalled - consider treatment modification",
        "Assess for barriers to healing",
        "Consider advanced wound therapies",
        "Review patient compliance with treatment",
    ),
    "stable": (
        "Continue current treatment protocol",
        "Reassess wound dimensions at next dressing change",
    ),
    "improving": (
        "Continue current treatment protocol",
        "Monitor for signs of infection",
        "Maintain optimal moisture balance",
    ),
}

# Weekly area reduction below which a "stable" wound is treated as stalled
STALLED_WEEKLY_RATE_CM2 = 1.0


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ClinicalPolicy:
    """
    Read-only bundle of every table and scalar the engine consults.
    Built once at import from ``Settings``; callers may construct their own to trial
    a policy change without editing algorithm code.
    """
    kcal_per_kg_adipose: float
    calorie_floors: Mapping[Gender, int]
    reference_bmi: float
    protein_g_per_kg_target: float
    weeks_per_month: float
    healthy_bmi_ceiling: float
    aggressive_deficit_kcal: int
    diabetic_max_deficit_kcal: int
    min_age_years: float
    max_age_years: float
    wound_trend_threshold_pct: float
    stalled_wound_par_threshold: float
    stalled_wound_days: int
    activity_factors: Mapping[ActivityLevel, float] = field(default_factory=lambda: ACTIVITY_FACTORS)
    loss_rates: Mapping[LossRatePolicy, float] = field(default_factory=lambda: LOSS_RATES_KG_PER_WEEK)
    bmr_gender_offsets: Mapping[Gender, float] = field(default_factory=lambda: BMR_GENDER_OFFSETS)
    bmi_categories: Tuple[Tuple[float, str], ...] = BMI_CATEGORIES
    exercise_tiers: Tuple[Tuple[float, Tuple[str, ...]], ...] = EXERCISE_TIERS
    common_exercise: Tuple[str, ...] = COMMON_EXERCISE
    bmi_medical_brackets: Tuple[Tuple[float, Tuple[str, ...]], ...] = BMI_MEDICAL_BRACKETS
    milestone_fractions: Tuple[Tuple[float, str], ...] = MILESTONE_FRACTIONS
    dietary_suggestions: DietarySuggestions = DIETARY_SUGGESTIONS
    subscore_ranges: Mapping[RiskScale, Mapping[str, Tuple[int, int]]] = field(
        default_factory=lambda: SUBSCORE_RANGES
    )
    risk_bands: Mapping[RiskScale, Tuple[RiskBand, ...]] = field(default_factory=lambda: RISK_BANDS)
    risk_level_order: Mapping[RiskScale, Tuple[Any, ...]] = field(default_factory=lambda: RISK_LEVEL_ORDER)
    advisory_min_level: Mapping[RiskScale, Any] = field(default_factory=lambda: ADVISORY_MIN_LEVEL)
    push_area_bands: Tuple[Tuple[float, int], ...] = PUSH_AREA_BANDS
    wound_recommendations: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: WOUND_RECOMMENDATIONS
    )
    interpretations_path: Optional[str] = None

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, dict):
                object.__setattr__(self, f.name, _freeze(value))
        object.__setattr__(
            self,
            "subscore_ranges",
            _freeze({scale: _freeze(items) for scale, items in self.subscore_ranges.items()}),
        )
        self._validate()

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None, **overrides) -> "ClinicalPolicy":
        s = s or settings
        values = dict(
            kcal_per_kg_adipose=s.KCAL_PER_KG_ADIPOSE,
            calorie_floors={Gender.MALE: s.MALE_CALORIE_FLOOR, Gender.FEMALE: s.FEMALE_CALORIE_FLOOR},
            reference_bmi=s.REFERENCE_BMI,
            protein_g_per_kg_target=s.PROTEIN_G_PER_KG_TARGET,
            weeks_per_month=s.WEEKS_PER_MONTH,
            healthy_bmi_ceiling=s.HEALTHY_BMI_CEILING,
            aggressive_deficit_kcal=s.AGGRESSIVE_DEFICIT_KCAL,
            diabetic_max_deficit_kcal=s.DIABETIC_MAX_DEFICIT_KCAL,
            min_age_years=s.MIN_AGE_YEARS,
            max_age_years=s.MAX_AGE_YEARS,
            wound_trend_threshold_pct=s.WOUND_TREND_THRESHOLD_PCT,
            stalled_wound_par_threshold=s.STALLED_WOUND_PAR_THRESHOLD,
            stalled_wound_days=s.STALLED_WOUND_DAYS,
            interpretations_path=s.INTERPRETATIONS_PATH,
        )
        values.update(overrides)
        return cls(**values)

    # ── validation ──────────────────────────────────────────────────────────

    def _validate(self) -> None:
        if set(self.activity_factors) != set(ActivityLevel):
            raise PolicyConfigurationError("activity_factors must define exactly one factor per activity level")
        for level, factor in self.activity_factors.items():
            if not 1.2 <= factor <= 1.9:
                raise PolicyConfigurationError(f"activity factor for {level.value} must lie in [1.2, 1.9], got {factor}")

        if set(self.loss_rates) != set(LossRatePolicy):
            raise PolicyConfigurationError("loss_rates must define exactly one rate per loss-rate policy")
        rates = [self.loss_rates[p] for p in LossRatePolicy]
        if any(b <= a for a, b in zip(rates, rates[1:])) or rates[0] <= 0:
            raise PolicyConfigurationError(f"loss_rates must be positive and strictly increasing, got {rates}")

        if self.kcal_per_kg_adipose <= 0:
            raise PolicyConfigurationError("kcal_per_kg_adipose must be positive")

        for scale, bands in self.risk_bands.items():
            low, high = self.score_range(scale)
            self._check_partition(scale, bands, low, high)
            if set(b.level for b in bands) != set(self.risk_level_order[scale]):
                raise PolicyConfigurationError(f"{scale.value} level order does not match its bands")

    @staticmethod
    def _check_partition(scale: RiskScale, bands: Tuple[RiskBand, ...], low: int, high: int) -> None:
        """Bands must cover [low, high] contiguously with no gap and no overlap."""
        expected = low
        for band in bands:
            if band.min_score != expected or band.max_score < band.min_score:
                raise PolicyConfigurationError(
                    f"{scale.value} band {band.level} starts at {band.min_score}, expected {expected}"
                )
            expected = band.max_score + 1
        if expected != high + 1:
            raise PolicyConfigurationError(f"{scale.value} bands end at {expected - 1}, expected {high}")

    # ── lookups ─────────────────────────────────────────────────────────────

    def score_range(self, scale: RiskScale) -> Tuple[int, int]:
        """Valid total range of a scale, derived from its item ranges."""
        items = self.subscore_ranges[scale].values()
        return sum(lo for lo, _ in items), sum(hi for _, hi in items)

    def describe(self) -> Dict[str, Any]:
        """JSON-friendly view of the active tables for external review."""
        return {
            "kcal_per_kg_adipose": self.kcal_per_kg_adipose,
            "calorie_floors": {g.value: v for g, v in self.calorie_floors.items()},
            "bmr_gender_offsets": {g.value: v for g, v in self.bmr_gender_offsets.items()},
            "reference_bmi": self.reference_bmi,
            "protein_g_per_kg_target": self.protein_g_per_kg_target,
            "aggressive_deficit_kcal": self.aggressive_deficit_kcal,
            "diabetic_max_deficit_kcal": self.diabetic_max_deficit_kcal,
            "activity_factors": {a.value: v for a, v in self.activity_factors.items()},
            "loss_rates_kg_per_week": {p.value: v for p, v in self.loss_rates.items()},
            "exercise_tier_lower_bmi": [lower for lower, _ in self.exercise_tiers if lower != float("-inf")],
            "medical_bracket_lower_bmi": [lower for lower, _ in self.bmi_medical_brackets],
            "risk_bands": {
                scale.value: [
                    {"min": b.min_score, "max": b.max_score, "level": b.level.value} for b in bands
                ]
                for scale, bands in self.risk_bands.items()
            },
            "wound_trend_threshold_pct": self.wound_trend_threshold_pct,
            "stalled_wound_par_threshold": self.stalled_wound_par_threshold,
            "stalled_wound_days": self.stalled_wound_days,
        }


default_policy = ClinicalPolicy.from_settings(settings)
