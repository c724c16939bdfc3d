from typing import Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from ..core.exceptions import InvalidInput
from ..models.patient import Comorbidity, Gender
from ..models.risk import BradenInput, NortonInput, PushInput, RiskScaleResult, WaterlowInput
from ..services.risk_scales import (
    push_area_subscore,
    risk_scorer,
    waterlow_age_subscore,
    waterlow_build_subscore,
    waterlow_sex_subscore,
)

router = APIRouter(prefix="/risk", tags=["risk"])


class BradenRequest(BaseModel):
    sensory_perception: int
    moisture: int
    activity: int
    mobility: int
    nutrition: int
    friction_shear: int
    comorbidities: List[Comorbidity] = []


class WaterlowRequest(BaseModel):
    # build_bmi, age and sex may be derived from bmi, age_years and gender instead
    build_bmi: Optional[int] = None
    bmi: Optional[float] = None
    skin_type: int
    sex: Optional[int] = None
    gender: Optional[Gender] = None
    age: Optional[int] = None
    age_years: Optional[float] = None
    continence: int
    mobility: int
    appetite: int
    tissue_malnutrition: int = 0
    neurological_deficit: int = 0
    surgery_trauma: int = 0
    medication: int = 0
    comorbidities: List[Comorbidity] = []


class NortonRequest(BaseModel):
    physical_condition: int
    mental_condition: int
    activity: int
    mobility: int
    incontinence: int
    comorbidities: List[Comorbidity] = []


class PushRequest(BaseModel):
    # length_times_width may be derived from measured length_cm x width_cm
    length_times_width: Optional[int] = None
    length_cm: Optional[float] = None
    width_cm: Optional[float] = None
    exudate_amount: int
    surface_type: int
    prior_score: Optional[int] = None


class RiskResponse(BaseModel):
    scale: str
    total_score: int
    risk_level: str
    severity_rank: int
    interpretation: str
    subscores: Dict[str, int]
    interventions: List[str]
    turning_schedule: Optional[str]
    support_surface: Optional[str]
    lowest_subscores: List[str]
    advisories: List[str]


class PushResponse(BaseModel):
    total_score: int
    subscores: Dict[str, int]
    prior_score: Optional[int]
    healing_trend: Optional[str]
    interpretation: str


def _risk_response(result: RiskScaleResult) -> RiskResponse:
    return RiskResponse(
        scale=result.scale.value,
        total_score=result.total_score,
        risk_level=result.risk_level.value,
        severity_rank=result.severity_rank,
        interpretation=result.interpretation,
        subscores=dict(result.subscores),
        interventions=list(result.interventions),
        turning_schedule=result.turning_schedule,
        support_surface=result.support_surface,
        lowest_subscores=list(result.lowest_subscores),
        advisories=list(result.advisories),
    )


def _derive(item: str, value, source_name: str, source, derive):
    if value is not None:
        return value
    if source is None:
        raise InvalidInput(item, None, f"{item} or {source_name} is required")
    return derive(source)


@router.post("/braden", response_model=RiskResponse)
def score_braden(braden_in: BradenRequest):
    inputs = BradenInput(**braden_in.model_dump(exclude={"comorbidities"}))
    return _risk_response(risk_scorer.score_braden(inputs, braden_in.comorbidities))


@router.post("/waterlow", response_model=RiskResponse)
def score_waterlow(waterlow_in: WaterlowRequest):
    inputs = WaterlowInput(
        build_bmi=_derive("build_bmi", waterlow_in.build_bmi, "bmi", waterlow_in.bmi, waterlow_build_subscore),
        skin_type=waterlow_in.skin_type,
        sex=_derive("sex", waterlow_in.sex, "gender", waterlow_in.gender, waterlow_sex_subscore),
        age=_derive("age", waterlow_in.age, "age_years", waterlow_in.age_years, waterlow_age_subscore),
        continence=waterlow_in.continence,
        mobility=waterlow_in.mobility,
        appetite=waterlow_in.appetite,
        tissue_malnutrition=waterlow_in.tissue_malnutrition,
        neurological_deficit=waterlow_in.neurological_deficit,
        surgery_trauma=waterlow_in.surgery_trauma,
        medication=waterlow_in.medication,
    )
    return _risk_response(risk_scorer.score_waterlow(inputs, waterlow_in.comorbidities))


@router.post("/norton", response_model=RiskResponse)
def score_norton(norton_in: NortonRequest):
    inputs = NortonInput(**norton_in.model_dump(exclude={"comorbidities"}))
    return _risk_response(risk_scorer.score_norton(inputs, norton_in.comorbidities))


@router.post("/push", response_model=PushResponse)
def score_push(push_in: PushRequest):
    area = None
    if push_in.length_cm is not None and push_in.width_cm is not None:
        area = push_in.length_cm * push_in.width_cm
    inputs = PushInput(
        length_times_width=_derive(
            "length_times_width", push_in.length_times_width, "length_cm and width_cm", area, push_area_subscore
        ),
        exudate_amount=push_in.exudate_amount,
        surface_type=push_in.surface_type,
    )
    result = risk_scorer.score_push(inputs, prior_score=push_in.prior_score)
    return PushResponse(
        total_score=result.total_score,
        subscores=dict(result.subscores),
        prior_score=result.prior_score,
        healing_trend=result.healing_trend.value if result.healing_trend else None,
        interpretation=result.interpretation,
    )
