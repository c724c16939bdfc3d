"""Weight-management plan records."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class ActivityLevel(str, Enum):
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "veryActive"


class LossRatePolicy(str, Enum):
    SLOW = "slow"
    MODERATE = "moderate"
    FAST = "fast"
    AGGRESSIVE = "aggressive"


@dataclass(frozen=True)
class Milestone:
    weight_threshold: float
    achievement_label: str
    is_target: bool = False


@dataclass(frozen=True)
class DietarySuggestions:
    to_eat: Tuple[str, ...] = ()
    to_limit: Tuple[str, ...] = ()
    meal_timing: Tuple[str, ...] = ()


@dataclass(frozen=True)
class WeightPlanResult:
    """Value object produced once per calculation; never mutated afterwards."""
    current_weight_kg: float
    target_weight_kg: float
    weight_to_lose_kg: float
    weekly_rate_kg: float
    current_bmi: float
    target_bmi: float
    bmi_category: str
    ideal_weight: float
    bmr: int
    tdee: int
    daily_deficit: int
    target_calories: int
    calorie_floor_applied: bool
    protein_target_grams: int
    weeks_needed: int
    months_needed: int
    milestones: Tuple[Milestone, ...] = ()
    exercise_recommendations: Tuple[str, ...] = ()
    dietary_suggestions: DietarySuggestions = field(default_factory=DietarySuggestions)
    medical_considerations: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
