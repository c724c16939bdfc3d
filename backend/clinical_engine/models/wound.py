"""Serial wound measurements and the trend derived from them."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class TrendClassification(str, Enum):
    INSUFFICIENT_DATA = "insufficientData"
    IMPROVING = "improving"
    STABLE = "stable"
    DETERIORATING = "deteriorating"


@dataclass(frozen=True)
class WoundObservation:
    timestamp: datetime
    length_cm: float
    width_cm: float
    depth_cm: Optional[float] = None
    area_cm2: Optional[float] = None

    @property
    def effective_area(self) -> float:
        """Explicit area when recorded, otherwise length x width. Depth never contributes."""
        if self.area_cm2 is not None:
            return self.area_cm2
        return self.length_cm * self.width_cm


@dataclass(frozen=True)
class TrendResult:
    classification: TrendClassification
    observation_count: int
    message: str
    percent_change: Optional[float] = None
    first_area: Optional[float] = None
    last_area: Optional[float] = None
    days_elapsed: Optional[int] = None
    weekly_healing_rate_cm2: Optional[float] = None
    estimated_healing_days: Optional[int] = None
    area_slope_cm2_per_week: Optional[float] = None
    is_stalled: bool = False
    recommendations: Tuple[str, ...] = ()
