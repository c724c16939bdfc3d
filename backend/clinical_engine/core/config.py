from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    APP_NAME: str = "Clinical Derivation Engine"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Energy balance
    KCAL_PER_KG_ADIPOSE: float = 7700.0  # approx. energy density of adipose tissue
    MALE_CALORIE_FLOOR: int = 1500
    FEMALE_CALORIE_FLOOR: int = 1200

    # Weight planning
    REFERENCE_BMI: float = 22.0          # BMI used for "ideal weight"
    PROTEIN_G_PER_KG_TARGET: float = 1.8
    WEEKS_PER_MONTH: float = 4.3
    HEALTHY_BMI_CEILING: float = 25.0

    # Safety thresholds
    AGGRESSIVE_DEFICIT_KCAL: int = 750
    DIABETIC_MAX_DEFICIT_KCAL: int = 500

    # Physiological input limits
    MIN_AGE_YEARS: float = 1
    MAX_AGE_YEARS: float = 130

    # Wound healing thresholds
    WOUND_TREND_THRESHOLD_PCT: float = 10.0
    STALLED_WOUND_PAR_THRESHOLD: float = 20.0  # <20% area reduction in 4 weeks = stalled
    STALLED_WOUND_DAYS: int = 28

    # Replacement interpretation catalog (JSON); bundled catalog used when unset
    INTERPRETATIONS_PATH: Optional[str] = None

    class Config:
        env_file = ".env"


settings = Settings()
