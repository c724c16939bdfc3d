"""Patient baseline supplied by the calling layer for a single calculation."""
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class Comorbidity(str, Enum):
    DIABETES = "diabetes"
    HYPERTENSION = "hypertension"
    CHRONIC_KIDNEY_DISEASE = "chronic_kidney_disease"
    HEART_FAILURE = "heart_failure"
    PERIPHERAL_VASCULAR_DISEASE = "peripheral_vascular_disease"


@dataclass(frozen=True)
class PatientBaseline:
    weight_kg: float
    height_cm: float
    age_years: float
    gender: Gender
    active_comorbidities: FrozenSet[Comorbidity] = field(default_factory=frozenset)

    def __post_init__(self):
        # Accept any iterable from callers but always store an immutable set
        object.__setattr__(self, "active_comorbidities", frozenset(self.active_comorbidities))
