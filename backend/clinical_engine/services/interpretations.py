"""
Interpretation catalog loader.

Interpretation text is clinical content, not control flow: it lives in a JSON catalog
that can be reviewed and replaced without touching the scorers. The catalog is read
once per path and treated as immutable afterwards.
"""
import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..core.exceptions import PolicyConfigurationError
from ..core.policy import RISK_LEVEL_ORDER
from ..models.risk import HealingTrend, RiskScale

logger = logging.getLogger(__name__)

BUNDLED_CATALOG = Path(__file__).resolve().parents[1] / "data" / "risk_interpretations.json"

PUSH_BASELINE_KEY = "baseline"
BRADEN_REQUIRED_KEYS = ("interpretation", "turning_schedule", "support_surface", "interventions")


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise PolicyConfigurationError(f"Missing interpretation catalog: {path}")
    except json.JSONDecodeError as e:
        raise PolicyConfigurationError(f"Invalid interpretation catalog: {path}\n{e}")


def _validate(catalog: Dict[str, Any], path: Path) -> None:
    """Every level of every scale must have an entry."""
    for scale, levels in RISK_LEVEL_ORDER.items():
        section = catalog.get(scale.value)
        if not isinstance(section, dict):
            raise PolicyConfigurationError(f"{path}: missing section '{scale.value}'")
        for level in levels:
            entry = section.get(level.value)
            if not isinstance(entry, dict) or not entry.get("interpretation"):
                raise PolicyConfigurationError(f"{path}: no interpretation for {scale.value}/{level.value}")
            if scale == RiskScale.BRADEN:
                missing = [k for k in BRADEN_REQUIRED_KEYS if k not in entry]
                if missing:
                    raise PolicyConfigurationError(f"{path}: braden/{level.value} missing {missing}")

    push = catalog.get(RiskScale.PUSH.value, {})
    for key in [PUSH_BASELINE_KEY] + [t.value for t in HealingTrend]:
        if not push.get(key, {}).get("interpretation"):
            raise PolicyConfigurationError(f"{path}: no interpretation for push/{key}")


@lru_cache(maxsize=None)
def load_catalog(path: Optional[str] = None) -> Mapping[str, Any]:
    """Load and validate a catalog; the bundled one is used when ``path`` is None."""
    catalog_path = Path(path) if path else BUNDLED_CATALOG
    catalog = _read_json(catalog_path)
    _validate(catalog, catalog_path)
    logger.info("Loaded interpretation catalog %s (version %s)", catalog_path, catalog.get("meta", {}).get("version"))
    return MappingProxyType(catalog)


def lookup(scale: RiskScale, key: str, path: Optional[str] = None) -> Mapping[str, Any]:
    """Catalog entry for a scale level (or PUSH trend key)."""
    return load_catalog(path)[scale.value][key]
