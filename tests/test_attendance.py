"""
Tests for the attendance recorder.

Run: pytest tests/test_attendance.py -v
"""

from datetime import date

import pytest

from core.attendance import AttendanceEntry, summarize_attendance
from core.models import AttendanceRecord, AttendanceStatus, AttendanceType
from exceptions.custom_errors import NotFoundError, ValidationError

DAY = date(2025, 9, 15)
CLINICAL = AttendanceType.CLINICAL
CLASSROOM = AttendanceType.CLASSROOM


def entry(student_id, status, **kwargs):
    return AttendanceEntry(student_id=student_id, status=AttendanceStatus(status), **kwargs)


class TestRecordDay:
    """Persisting a day's attendance"""

    def test_ids_are_deterministic(self, engine):
        result = engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Present")])
        assert result.saved[0].id == "ATT-S001-2025-09-15-clinical"

    def test_default_hours_required_by_type(self, engine):
        clinical = engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Present")])
        classroom = engine.record_attendance_day(DAY, CLASSROOM, [entry("S001", "Present")])
        assert clinical.saved[0].hours_required == 8
        assert classroom.saved[0].hours_required == 4

    def test_resubmission_replaces_prior_records(self, engine, store):
        engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Absent"), entry("S002", "Present")])
        engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Present"), entry("S002", "Present")])

        records = store.list_attendance(DAY, CLINICAL)
        assert len(records) == 2
        assert {r.status for r in records} == {AttendanceStatus.PRESENT}

    def test_prior_hours_required_is_kept(self, engine):
        engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Present", hours_required=12)])
        result = engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Absent")])
        assert result.saved[0].hours_required == 12
        assert result.derived_obligations[0].hours_owed == 12

    def test_classroom_never_derives_makeup(self, engine, store):
        result = engine.record_attendance_day(DAY, CLASSROOM, [entry("S001", "Absent")])
        assert result.derived_obligations == []
        assert store.list_makeup_hours() == []

    def test_clinical_and_classroom_are_separate_keys(self, engine, store):
        engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Present")])
        engine.record_attendance_day(DAY, CLASSROOM, [entry("S001", "Absent")])
        assert len(store.list_attendance(DAY)) == 2


class TestValidation:
    """Any invalid entry rejects the whole day before anything is written"""

    @pytest.mark.parametrize("bad", [
        entry("S002", "Partial"),
        entry("S002", "Partial", hours_attended=9),
        entry("S002", "Partial", hours_attended=-1),
        entry("S002", "Present", hours_attended=8),
        entry("S002", "Absent", hours_attended=0),
        entry("S002", "Present", hours_required=0),
        entry("S002", "Absent", hours_required=float("nan")),
        entry("S002", "Partial", hours_attended=float("nan")),
    ])
    def test_invalid_entry_rejects_batch(self, engine, store, bad):
        with pytest.raises(ValidationError) as exc:
            engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Absent"), bad])

        assert exc.value.index == 1
        assert exc.value.student_id == "S002"
        assert store.list_attendance(DAY) == []
        assert store.list_makeup_hours() == []

    def test_unknown_status(self, engine):
        with pytest.raises(ValidationError):
            engine.record_attendance_day(DAY, CLINICAL, [AttendanceEntry("S001", "Sleeping")])

    def test_duplicate_student_in_batch(self, engine, store):
        with pytest.raises(ValidationError):
            engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Present"), entry("S001", "Absent")])
        assert store.list_attendance(DAY) == []

    def test_unknown_student(self, engine, store):
        with pytest.raises(NotFoundError):
            engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Present"), entry("NOPE", "Present")])
        assert store.list_attendance(DAY) == []

    def test_partial_boundaries_are_valid(self, engine):
        result = engine.record_attendance_day(DAY, CLINICAL, [
            entry("S001", "Partial", hours_attended=0),
            entry("S002", "Partial", hours_attended=8),
        ])
        assert [r.hours_attended for r in result.saved] == [0, 8]

    def test_failed_resubmission_keeps_previous_day(self, engine, store):
        engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Absent")])
        with pytest.raises(ValidationError):
            engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Present"), entry("S002", "Partial")])

        records = store.list_attendance(DAY, CLINICAL)
        assert [r.status for r in records] == [AttendanceStatus.ABSENT]
        assert len(store.list_makeup_hours("S001")) == 1


class TestAttendanceSummary:
    """Counting outcomes per student"""

    def _record(self, student_id, day, kind, status):
        return AttendanceRecord(
            id=f"ATT-{student_id}-{day}-{kind}",
            student_id=student_id,
            date=day,
            attendance_type=AttendanceType(kind),
            status=AttendanceStatus(status),
            hours_required=8,
        )

    def test_counts_by_status_and_type(self):
        records = [
            self._record("S001", date(2025, 9, 1), "clinical", "Absent"),
            self._record("S001", date(2025, 9, 2), "classroom", "Absent"),
            self._record("S001", date(2025, 9, 3), "classroom", "Tardy"),
            self._record("S001", date(2025, 9, 4), "clinical", "Present"),
            self._record("S002", date(2025, 9, 1), "clinical", "Present"),
        ]
        summaries = summarize_attendance(records)

        assert [s.student_id for s in summaries] == ["S001", "S002"]
        s001 = summaries[0]
        assert s001.total_absences == 2
        assert s001.total_tardies == 1
        assert s001.total_present == 1
        assert s001.clinical_absences == 1
        assert s001.classroom_absences == 1
        assert s001.classroom_tardies == 1
        assert s001.clinical_tardies == 0
        assert summaries[1].total_absences == 0

    def test_empty(self):
        assert summarize_attendance([]) == []

    def test_engine_issues_filter(self, engine):
        engine.record_attendance_day(DAY, CLINICAL, [entry("S001", "Absent"), entry("S002", "Present")])
        engine.record_attendance_day(date(2025, 9, 16), CLASSROOM, [entry("S001", "Absent"), entry("S003", "Absent")])

        issues = engine.get_students_with_attendance_issues(min_absences=1)
        assert [(s.student_id, s.total_absences) for s in issues] == [("S001", 2), ("S003", 1)]

    def test_engine_summary_for_student_without_records(self, engine):
        summary = engine.get_attendance_summary("S004")
        assert summary.student_id == "S004"
        assert summary.total_absences == 0
