import json
import math
import os
from pathlib import Path
from dotenv import load_dotenv
from config.paths import CONSTANTS_PATH as DEFAULT_CONSTANTS_PATH
from core.models import ComplianceThresholds

"""
Loads regulatory constants from config/constants.json and exposes them as module-level variables.
Edit constants.json to change values; import from utils.constants to use in code.

Every key can be overridden with an environment variable of the same name (a .env file is honoured),
and COMPLIANCE_CONSTANTS_PATH can point at a different JSON file altogether.
"""

load_dotenv()

CONSTANTS_PATH = Path(os.getenv("COMPLIANCE_CONSTANTS_PATH", DEFAULT_CONSTANTS_PATH))

with open(CONSTANTS_PATH, "r", encoding="utf-8") as f:
    _constants = json.load(f)


def _get(name: str):
    """Return the env override for `name` if set, cast to the JSON value's type."""
    value = _constants[name]
    override = os.getenv(name)
    if override is None or override == "":
        return value
    if not isinstance(value, (int, float)):
        return override

    number = float(override)
    if not math.isfinite(number):
        raise ValueError(f"{name}={override!r} must be a finite number")
    if isinstance(value, int):
        if not number.is_integer():
            raise ValueError(f"{name}={override!r} must be a whole number")
        return int(number)
    return number


# Expose constants as variables
REQUIRED_TOTAL_HOURS = _get("REQUIRED_TOTAL_HOURS")
SIMULATION_CAP_HOURS = _get("SIMULATION_CAP_HOURS")
SIMULATION_CAP_PERCENT = _get("SIMULATION_CAP_PERCENT")
SIMULATION_WARNING_HOURS = _get("SIMULATION_WARNING_HOURS")

AT_RISK_HOURS_THRESHOLD = _get("AT_RISK_HOURS_THRESHOLD")
BEHIND_HOURS_THRESHOLD = _get("BEHIND_HOURS_THRESHOLD")
NEAR_COMPLETION_PROGRESS = _get("NEAR_COMPLETION_PROGRESS")

DEFAULT_CLINICAL_SHIFT_HOURS = _get("DEFAULT_CLINICAL_SHIFT_HOURS")
DEFAULT_CLASSROOM_SHIFT_HOURS = _get("DEFAULT_CLASSROOM_SHIFT_HOURS")
MAKEUP_DUE_DAYS = _get("MAKEUP_DUE_DAYS")

DEFAULT_THRESHOLDS = ComplianceThresholds(
    required_total_hours=REQUIRED_TOTAL_HOURS,
    simulation_cap_hours=SIMULATION_CAP_HOURS,
    simulation_cap_percent=SIMULATION_CAP_PERCENT,
    simulation_warning_hours=SIMULATION_WARNING_HOURS,
    at_risk_hours_threshold=AT_RISK_HOURS_THRESHOLD,
    behind_hours_threshold=BEHIND_HOURS_THRESHOLD,
    near_completion_progress=NEAR_COMPLETION_PROGRESS,
    default_clinical_shift_hours=DEFAULT_CLINICAL_SHIFT_HOURS,
    default_classroom_shift_hours=DEFAULT_CLASSROOM_SHIFT_HOURS,
    makeup_due_days=MAKEUP_DUE_DAYS,
)
