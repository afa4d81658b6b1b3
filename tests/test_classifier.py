"""
Tests for the compliance classifier.

Run: pytest tests/test_classifier.py -v
"""

import pytest

from core.aggregator import aggregate_hours
from core.classifier import (
    alert_level,
    classify,
    is_at_risk,
    is_compliant,
    progress_status,
    sim_status,
)
from core.models import ComplianceThresholds, HoursBreakdown


class TestSimStatus:
    """Simulation bands: Safe < 80 <= Warning <= 100 < Over Cap"""

    @pytest.mark.parametrize("hours,expected", [
        (0, "Safe"),
        (79.9, "Safe"),
        (80, "Warning"),
        (100, "Warning"),
        (100.5, "Over Cap"),
    ])
    def test_bands(self, hours, expected):
        assert sim_status(hours) == expected

    def test_alert_level_mirrors_status(self):
        assert alert_level(10) == "safe"
        assert alert_level(90) == "warning"
        assert alert_level(101) == "over_cap"


class TestIsCompliant:
    """Both the hour cap and the percentage cap must hold"""

    def test_within_both_caps(self):
        assert is_compliant(100, 25) is True

    def test_hour_cap_breach(self):
        assert is_compliant(101, 20) is False

    def test_percentage_cap_breach(self):
        assert is_compliant(60, 26) is False


class TestProgressStatus:
    """First matching rule wins"""

    def test_sim_breach_overrides_progress_label(self):
        assert progress_status(total_hours=250, sim_hours=120) == "COMPLIANCE RISK"

    def test_sim_breach_overrides_behind_threshold(self):
        assert progress_status(total_hours=150, sim_hours=120) == "COMPLIANCE RISK"

    def test_behind(self):
        assert progress_status(total_hours=199, sim_hours=10) == "Behind"

    def test_near_completion_at_ninety_percent(self):
        assert progress_status(total_hours=360, sim_hours=50) == "Near Completion"

    def test_on_track(self):
        assert progress_status(total_hours=359, sim_hours=50) == "On Track"

    def test_uses_student_required_hours(self):
        assert progress_status(total_hours=400, sim_hours=50, required_hours=500) == "On Track"
        assert progress_status(total_hours=450, sim_hours=50, required_hours=500) == "Near Completion"


class TestClassify:
    """Composed classification over aggregated hours"""

    def test_scenario_over_cap_regardless_of_progress(self, make_log):
        """300 direct + 90 and 20 simulation hours: over the cap, non-compliant, compliance risk"""
        entries = [make_log(100), make_log(100), make_log(100),
                   make_log(90, sim=True), make_log(20, sim=True)]
        breakdown = aggregate_hours(entries)
        assert breakdown.sim_hours == 110
        assert breakdown.total_hours == 410

        status = classify(breakdown)
        assert status.sim_status == "Over Cap"
        assert status.alert_level == "over_cap"
        assert status.is_compliant is False
        assert status.progress_status == "COMPLIANCE RISK"
        assert any(f.type == "simulation_over" for f in status.flags)

    def test_at_risk_and_behind_flags(self):
        status = classify(HoursBreakdown(total_hours=150, direct_hours=150))
        assert status.is_at_risk is True
        assert status.progress_status == "Behind"
        assert {f.type for f in status.flags} == {"at_risk", "clinical_behind"}

    def test_healthy_student_has_no_flags(self):
        status = classify(HoursBreakdown(total_hours=380, direct_hours=330, sim_hours=50, sim_percentage=13))
        assert status.is_compliant is True
        assert status.is_at_risk is False
        assert status.progress == pytest.approx(0.95)
        assert status.flags == []

    def test_custom_thresholds(self):
        strict = ComplianceThresholds(simulation_cap_hours=50, simulation_warning_hours=40)
        assert sim_status(45, strict) == "Warning"
        assert sim_status(51, strict) == "Over Cap"
        assert progress_status(300, 51, thresholds=strict) == "COMPLIANCE RISK"
        assert is_at_risk(250, ComplianceThresholds(at_risk_hours_threshold=200)) is False
