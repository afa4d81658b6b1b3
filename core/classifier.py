from typing import List, Optional
from core.models import ComplianceStatus, ComplianceThresholds, HoursBreakdown, StudentFlag
from utils.constants import DEFAULT_THRESHOLDS

SIM_SAFE = "Safe"
SIM_WARNING = "Warning"
SIM_OVER_CAP = "Over Cap"

ALERT_SAFE = "safe"
ALERT_WARNING = "warning"
ALERT_OVER_CAP = "over_cap"

COMPLIANCE_RISK = "COMPLIANCE RISK"
BEHIND = "Behind"
NEAR_COMPLETION = "Near Completion"
ON_TRACK = "On Track"


def sim_status(sim_hours: float, thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS) -> str:
    """Safe below the warning band, Warning up to and including the cap, Over Cap above it."""
    if sim_hours > thresholds.simulation_cap_hours:
        return SIM_OVER_CAP
    if sim_hours >= thresholds.simulation_warning_hours:
        return SIM_WARNING
    return SIM_SAFE


def alert_level(sim_hours: float, thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS) -> str:
    return {
        SIM_SAFE: ALERT_SAFE,
        SIM_WARNING: ALERT_WARNING,
        SIM_OVER_CAP: ALERT_OVER_CAP,
    }[sim_status(sim_hours, thresholds)]


def is_compliant(
    sim_hours: float,
    sim_percentage: float,
    thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Both the absolute and the percentage simulation caps must hold."""
    return (
        sim_hours <= thresholds.simulation_cap_hours
        and sim_percentage <= thresholds.simulation_cap_percent
    )


def progress(total_hours: float, required_hours: float) -> float:
    if required_hours <= 0:
        return 1.0
    return total_hours / required_hours


def progress_status(
    total_hours: float,
    sim_hours: float,
    required_hours: Optional[float] = None,
    thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS,
) -> str:
    """
    Progress label, evaluated in precedence order; the first match wins.

    1. Simulation hours over the cap -> "COMPLIANCE RISK". A cap breach is the
       regulatory violation of record and overrides any progress label.
    2. Total hours under the behind threshold -> "Behind".
    3. Progress at or above the near-completion fraction -> "Near Completion".
    4. Otherwise -> "On Track".
    """
    if required_hours is None:
        required_hours = thresholds.required_total_hours

    if sim_hours > thresholds.simulation_cap_hours:
        return COMPLIANCE_RISK
    if total_hours < thresholds.behind_hours_threshold:
        return BEHIND
    if progress(total_hours, required_hours) >= thresholds.near_completion_progress:
        return NEAR_COMPLETION
    return ON_TRACK


def is_at_risk(total_hours: float, thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS) -> bool:
    return total_hours < thresholds.at_risk_hours_threshold


def student_flags(
    breakdown: HoursBreakdown,
    required_hours: float,
    thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS,
) -> List[StudentFlag]:
    """Alerts surfaced on the student view, most specific first."""
    flags = []
    total = breakdown.total_hours

    if not is_compliant(breakdown.sim_hours, breakdown.sim_percentage, thresholds):
        flags.append(
            StudentFlag(
                type="simulation_over",
                severity="critical",
                message="Simulation hours exceed the compliance cap",
                details=(
                    f"{breakdown.sim_hours:g}h simulation ({breakdown.sim_percentage}% of total); "
                    f"cap is {thresholds.simulation_cap_hours:g}h / {thresholds.simulation_cap_percent:g}%"
                ),
            )
        )
    if is_at_risk(total, thresholds):
        flags.append(
            StudentFlag(
                type="at_risk",
                severity="critical",
                message=f"Fewer than {thresholds.at_risk_hours_threshold:g} clinical hours",
                details=f"{total:g}/{required_hours:g} hours completed",
            )
        )
    if total < thresholds.behind_hours_threshold:
        flags.append(
            StudentFlag(
                type="clinical_behind",
                severity="warning",
                message="Behind on clinical hours",
                details=f"{total:g}/{required_hours:g} hours completed",
            )
        )
    return flags


def classify(
    breakdown: HoursBreakdown,
    required_hours: Optional[float] = None,
    thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS,
) -> ComplianceStatus:
    """Apply every threshold to an aggregated breakdown. Pure; no I/O."""
    if required_hours is None:
        required_hours = thresholds.required_total_hours

    return ComplianceStatus(
        sim_status=sim_status(breakdown.sim_hours, thresholds),
        alert_level=alert_level(breakdown.sim_hours, thresholds),
        is_compliant=is_compliant(breakdown.sim_hours, breakdown.sim_percentage, thresholds),
        progress=progress(breakdown.total_hours, required_hours),
        progress_status=progress_status(
            breakdown.total_hours, breakdown.sim_hours, required_hours, thresholds
        ),
        is_at_risk=is_at_risk(breakdown.total_hours, thresholds),
        flags=student_flags(breakdown, required_hours, thresholds),
    )
