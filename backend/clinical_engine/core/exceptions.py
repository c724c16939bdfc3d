"""
Structured validation failures raised by the derivation engine.
Every error names the offending field, the value supplied and the constraint it broke,
so the calling layer can tell the user exactly what to correct.
"""
from typing import Any, Dict, Optional


class ClinicalDerivationError(ValueError):
    """Base class for all engine validation failures."""

    kind = "clinical_derivation_error"

    def __init__(self, field: str, value: Any, constraint: str, message: Optional[str] = None):
        self.field = field
        self.value = value
        self.constraint = constraint
        super().__init__(message or f"{field}={value!r} violates constraint: {constraint}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.kind,
            "field": self.field,
            "value": self.value,
            "constraint": self.constraint,
            "message": str(self),
        }


class InvalidInput(ClinicalDerivationError):
    """Non-physical measurement (non-positive height/weight, age out of range, unknown category)."""

    kind = "invalid_input"


class InvalidGoal(ClinicalDerivationError):
    """Target weight is not below current weight for a loss plan."""

    kind = "invalid_goal"


class OutOfRangeSubscore(ClinicalDerivationError):
    """A risk-scale item lies outside its declared closed range."""

    kind = "out_of_range_subscore"

    def __init__(self, field: str, value: Any, minimum: int, maximum: int):
        if value < minimum:
            self.bound = "min"
            detail = f"min bound {minimum}"
        elif value > maximum:
            self.bound = "max"
            detail = f"max bound {maximum}"
        else:
            # Inside the range but not one of its whole-number points
            self.bound = "integer"
            detail = "item scores are whole numbers"
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            field,
            value,
            f"integer {minimum} <= {field} <= {maximum}",
            message=f"{field}={value} is outside {minimum}-{maximum} ({detail})",
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["bound"] = self.bound
        return payload


class EmptySeries(ClinicalDerivationError):
    """Trend analysis was requested without any series at all."""

    kind = "empty_series"

    def __init__(self, field: str = "observations"):
        super().__init__(field, None, "series must be supplied (an empty list is allowed)")


class PolicyConfigurationError(Exception):
    """A policy table or interpretation catalog is malformed."""
