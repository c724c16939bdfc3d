from dataclasses import asdict
from typing import List

from fastapi import APIRouter
from pydantic import BaseModel

from ..models.patient import Comorbidity, Gender, PatientBaseline
from ..models.weight_plan import ActivityLevel, LossRatePolicy
from ..services.weight_planner import weight_planner

router = APIRouter(prefix="/weight", tags=["weight"])


class LossPlanRequest(BaseModel):
    weight_kg: float
    height_cm: float
    age_years: float
    gender: Gender
    comorbidities: List[Comorbidity] = []
    target_weight_kg: float
    activity_level: ActivityLevel = ActivityLevel.SEDENTARY
    loss_rate: LossRatePolicy = LossRatePolicy.MODERATE


class MilestoneResponse(BaseModel):
    weight_threshold: float
    achievement_label: str
    is_target: bool


class DietarySuggestionsResponse(BaseModel):
    to_eat: List[str]
    to_limit: List[str]
    meal_timing: List[str]


class LossPlanResponse(BaseModel):
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
    milestones: List[MilestoneResponse]
    exercise_recommendations: List[str]
    dietary_suggestions: DietarySuggestionsResponse
    medical_considerations: List[str]
    warnings: List[str]


@router.post("/loss-plan", response_model=LossPlanResponse)
def create_loss_plan(plan_in: LossPlanRequest):
    """Calorie, protein and timeline plan for a weight-loss goal."""
    baseline = PatientBaseline(
        weight_kg=plan_in.weight_kg,
        height_cm=plan_in.height_cm,
        age_years=plan_in.age_years,
        gender=plan_in.gender,
        active_comorbidities=frozenset(plan_in.comorbidities),
    )
    plan = weight_planner.plan_weight_loss(
        baseline,
        target_weight_kg=plan_in.target_weight_kg,
        activity_level=plan_in.activity_level,
        loss_rate=plan_in.loss_rate,
    )
    return LossPlanResponse.model_validate(asdict(plan))
