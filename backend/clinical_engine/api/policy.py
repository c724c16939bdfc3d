from fastapi import APIRouter

from ..core.policy import default_policy

router = APIRouter(prefix="/policy", tags=["policy"])


@router.get("")
def get_policy():
    """Active clinical policy tables, for review by the clinical governance team."""
    return default_policy.describe()
