"""Pressure-injury risk scale inputs and results."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class RiskScale(str, Enum):
    BRADEN = "braden"
    WATERLOW = "waterlow"
    NORTON = "norton"
    PUSH = "push"


class BradenRisk(str, Enum):
    VERY_HIGH = "very_high"
    HIGH = "high"
    MODERATE = "moderate"
    MILD = "mild"
    NO_RISK = "no_risk"


class WaterlowRisk(str, Enum):
    NOT_AT_RISK = "not_at_risk"
    AT_RISK = "at_risk"
    HIGH_RISK = "high_risk"
    VERY_HIGH_RISK = "very_high_risk"


class NortonRisk(str, Enum):
    VERY_HIGH = "very_high"
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


class HealingTrend(str, Enum):
    HEALING = "healing"
    STABLE = "stable"
    DETERIORATING = "deteriorating"


RiskLevel = Union[BradenRisk, WaterlowRisk, NortonRisk]


@dataclass(frozen=True)
class BradenInput:
    sensory_perception: int  # 1 completely limited -> 4 no impairment
    moisture: int
    activity: int
    mobility: int
    nutrition: int
    friction_shear: int      # 1-3 only


@dataclass(frozen=True)
class WaterlowInput:
    build_bmi: int
    skin_type: int
    sex: int
    age: int
    continence: int
    mobility: int
    appetite: int
    tissue_malnutrition: int = 0
    neurological_deficit: int = 0
    surgery_trauma: int = 0
    medication: int = 0


@dataclass(frozen=True)
class NortonInput:
    physical_condition: int
    mental_condition: int
    activity: int
    mobility: int
    incontinence: int


@dataclass(frozen=True)
class PushInput:
    length_times_width: int  # area band 0-10
    exudate_amount: int      # none -> heavy
    surface_type: int        # closed -> necrotic


@dataclass(frozen=True)
class RiskScaleResult:
    scale: RiskScale
    total_score: int
    risk_level: RiskLevel
    severity_rank: int  # 0 = least severe level of the scale
    interpretation: str
    subscores: Tuple[Tuple[str, int], ...] = ()
    interventions: Tuple[str, ...] = ()
    turning_schedule: Optional[str] = None
    support_surface: Optional[str] = None
    lowest_subscores: Tuple[str, ...] = ()
    advisories: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PushResult:
    total_score: int
    subscores: Tuple[Tuple[str, int], ...]
    prior_score: Optional[int]
    healing_trend: Optional[HealingTrend]
    interpretation: str
