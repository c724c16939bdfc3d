from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from ..models.wound import WoundObservation
from ..services.wound_trend import wound_trend_analyzer

router = APIRouter(prefix="/wounds", tags=["wounds"])


class ObservationIn(BaseModel):
    timestamp: datetime
    length_cm: float
    width_cm: float
    depth_cm: Optional[float] = None
    area_cm2: Optional[float] = None


class TrendRequest(BaseModel):
    observations: Optional[List[ObservationIn]] = None


class TrendResponse(BaseModel):
    classification: str
    observation_count: int
    message: str
    percent_change: Optional[float]
    first_area: Optional[float]
    last_area: Optional[float]
    days_elapsed: Optional[int]
    weekly_healing_rate_cm2: Optional[float]
    estimated_healing_days: Optional[int]
    area_slope_cm2_per_week: Optional[float]
    is_stalled: bool
    recommendations: List[str]


@router.post("/trend", response_model=TrendResponse)
def get_wound_trend(trend_in: TrendRequest):
    """
    Healing trend for one wound's serial measurements.
    Observations may arrive in any order; they are sorted by timestamp.
    """
    series = None
    if trend_in.observations is not None:
        series = [WoundObservation(**o.model_dump()) for o in trend_in.observations]

    trend = wound_trend_analyzer.analyze(series)

    return TrendResponse(
        classification=trend.classification.value,
        observation_count=trend.observation_count,
        message=trend.message,
        percent_change=trend.percent_change,
        first_area=trend.first_area,
        last_area=trend.last_area,
        days_elapsed=trend.days_elapsed,
        weekly_healing_rate_cm2=trend.weekly_healing_rate_cm2,
        estimated_healing_days=trend.estimated_healing_days,
        area_slope_cm2_per_week=trend.area_slope_cm2_per_week,
        is_stalled=trend.is_stalled,
        recommendations=list(trend.recommendations),
    )
