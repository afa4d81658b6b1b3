"""
Shared fixtures for the compliance engine tests.

Run:
    pytest tests/ -v
"""

from datetime import date, datetime, timezone

import pytest

from core.engine import ComplianceEngine
from core.models import ClinicalLogEntry, LogStatus, Student
from core.store import InMemoryRecordStore


NOW = datetime(2025, 9, 15, 12, 0, tzinfo=timezone.utc)
DAY = date(2025, 9, 15)


def fixed_clock():
    return NOW


@pytest.fixture
def students():
    return [
        Student(id="S001", first_name="Ada", last_name="Okafor", cohort="2026"),
        Student(id="S002", first_name="Ben", last_name="Ruiz", cohort="2026"),
        Student(id="S003", first_name="Cleo", last_name="Haddad", cohort="2026"),
        Student(id="S004", first_name="Dev", last_name="Patel", cohort="2026", clinical_hours_required=500),
    ]


@pytest.fixture
def store(students):
    return InMemoryRecordStore(students)


@pytest.fixture
def engine(store):
    return ComplianceEngine(store, clock=fixed_clock)


@pytest.fixture
def make_log():
    """
    Factory for clinical-log entries.

    Usage:
        def test_something(make_log):
            entry = make_log(8, site="General", sim=True)
    """
    counter = {"n": 0}

    def factory(hours, site="General Hospital", sim=False, makeup=False,
                status=LogStatus.APPROVED, student_id="S001", entry_id=None):
        counter["n"] += 1
        return ClinicalLogEntry(
            id=entry_id or f"LOG-{counter['n']:04d}",
            student_id=student_id,
            date=DAY,
            site_name=site,
            hours=hours,
            is_simulation=sim,
            is_makeup=makeup,
            status=status,
        )
    return factory
