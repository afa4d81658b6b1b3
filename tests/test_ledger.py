"""
Tests for the makeup-hours ledger.

Run: pytest tests/test_ledger.py -v
"""

import random
from datetime import date

import pytest

from core.attendance import AttendanceEntry
from core.ledger import MakeupHoursLedger
from core.models import AttendanceStatus, AttendanceType, MakeupHoursRecord, MakeupStatus
from exceptions.custom_errors import (
    BalanceError,
    ConcurrentUpdateError,
    NotFoundError,
    ValidationError,
)

DAY = date(2025, 9, 15)


@pytest.fixture
def absence(engine):
    """An 8-hour obligation derived from a clinical absence."""
    result = engine.record_attendance_day(
        DAY, AttendanceType.CLINICAL,
        [AttendanceEntry("S001", AttendanceStatus.ABSENT)],
    )
    return result.derived_obligations[0]


class TestLogHours:

    def test_logging_full_balance_completes(self, engine, absence):
        record = engine.log_makeup_hours(absence.id, 8)
        assert record.hours_completed == 8
        assert record.status == MakeupStatus.COMPLETED
        assert record.completion_date == date(2025, 9, 15)

    def test_partial_logging_is_in_progress(self, engine, absence):
        record = engine.log_makeup_hours(absence.id, 3)
        assert record.hours_completed == 3
        assert record.status == MakeupStatus.IN_PROGRESS
        assert record.completion_date is None

        record = engine.log_makeup_hours(absence.id, 5)
        assert record.status == MakeupStatus.COMPLETED

    def test_exceeding_balance_is_rejected(self, engine, store, absence):
        engine.log_makeup_hours(absence.id, 6)
        with pytest.raises(BalanceError) as exc:
            engine.log_makeup_hours(absence.id, 3)

        assert exc.value.remaining == 2
        assert store.get_makeup_hours(absence.id).hours_completed == 6

    def test_completed_record_accepts_nothing(self, engine, absence):
        engine.log_makeup_hours(absence.id, 8)
        with pytest.raises(BalanceError):
            engine.log_makeup_hours(absence.id, 0.5)

    @pytest.mark.parametrize("hours", [0, -2, float("nan"), float("inf")])
    def test_non_positive_hours_rejected(self, engine, store, absence, hours):
        with pytest.raises(ValidationError):
            engine.log_makeup_hours(absence.id, hours)
        assert store.get_makeup_hours(absence.id).hours_completed == 0

    def test_unknown_record(self, engine):
        with pytest.raises(NotFoundError):
            engine.log_makeup_hours("MKP-missing", 1)

    def test_stale_write_is_rejected(self, store, absence):
        """Compare-and-set: a write based on an old version must not apply"""
        stale = store.get_makeup_hours(absence.id)
        MakeupHoursLedger(store).log_hours(absence.id, 2)

        with pytest.raises(ConcurrentUpdateError):
            store.upsert_makeup_hours(stale, expected_version=stale.version)
        assert store.get_makeup_hours(absence.id).hours_completed == 2


class TestBalanceInvariant:
    """0 <= completed <= owed, and completed status iff completed >= owed"""

    def test_random_log_sequences(self, engine, store, absence):
        rng = random.Random(11)
        for _ in range(40):
            try:
                engine.log_makeup_hours(absence.id, rng.choice([0.5, 1, 2, 3, 10]))
            except BalanceError:
                pass
            record = store.get_makeup_hours(absence.id)
            assert 0 <= record.hours_completed <= record.hours_owed
            assert (record.status == MakeupStatus.COMPLETED) == (record.hours_completed >= record.hours_owed)
            assert (record.completion_date is not None) == (record.status == MakeupStatus.COMPLETED)

    def test_record_rejects_invalid_balance(self):
        with pytest.raises(ValueError):
            MakeupHoursRecord(id="M", student_id="S001", hours_owed=4, hours_completed=5)
        with pytest.raises(ValueError):
            MakeupHoursRecord(id="M", student_id="S001", hours_owed=0)


class TestSummaries:

    def test_student_summary(self, engine, absence):
        engine.add_makeup_hours("S001", 4, reason="Missed orientation")
        engine.log_makeup_hours(absence.id, 3)

        summary = engine.get_makeup_hours_summary("S001")
        assert summary.total_hours_owed == 12
        assert summary.total_hours_completed == 3
        assert summary.balance_remaining == 9
        assert len(summary.records) == 2

    def test_student_without_records(self, engine):
        summary = engine.get_makeup_hours_summary("S002")
        assert summary.balance_remaining == 0
        assert summary.records == []

    def test_unknown_student(self, engine):
        with pytest.raises(NotFoundError):
            engine.get_makeup_hours_summary("NOPE")

    def test_all_summaries_largest_balance_first(self, engine, absence):
        engine.add_makeup_hours("S002", 2)
        engine.add_makeup_hours("S003", 20)

        summaries = engine.get_all_makeup_summaries()
        assert [s.student_id for s in summaries] == ["S003", "S001", "S002"]


class TestDeleteAndManual:

    def test_delete(self, engine, store, absence):
        engine.delete_makeup_hours(absence.id)
        assert store.get_makeup_hours(absence.id) is None

    def test_delete_unknown(self, engine):
        with pytest.raises(NotFoundError):
            engine.delete_makeup_hours("MKP-missing")

    def test_manual_obligation(self, engine):
        record = engine.add_makeup_hours("S002", 6, reason="Skills lab", due_date=date(2025, 12, 1))
        assert record.original_absence_id is None
        assert record.status == MakeupStatus.PENDING
        assert record.version == 1

    @pytest.mark.parametrize("hours", [0, float("nan")])
    def test_manual_obligation_requires_positive_hours(self, engine, store, hours):
        with pytest.raises(ValidationError):
            engine.add_makeup_hours("S002", hours)
        assert store.list_makeup_hours() == []

    def test_manual_obligation_unknown_student(self, engine):
        with pytest.raises(NotFoundError):
            engine.add_makeup_hours("NOPE", 2)
