import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import singledispatchmethod
from typing import Callable, List, Optional
from core.aggregator import aggregate_hours
from core.attendance import AttendanceEntry, AttendanceRecorder, summarize_attendance, utc_now
from core.classifier import classify
from core.deriver import MakeupHoursDeriver
from core.ledger import MakeupHoursLedger
from core.models import (
    AttendanceDayResult,
    AttendanceRecord,
    AttendanceSummary,
    AttendanceType,
    ClinicalLogEntry,
    ComplianceThresholds,
    LogStatus,
    MakeupHoursRecord,
    MakeupHoursSummary,
    Student,
    StudentHoursSummary,
)
from core.store import RecordStore
from exceptions.custom_errors import NotFoundError, ValidationError
from utils.constants import DEFAULT_THRESHOLDS

logger = logging.getLogger(__name__)


# Commands accepted by ComplianceEngine.dispatch
@dataclass
class RecordAttendanceDay:
    date: date
    attendance_type: AttendanceType
    entries: List[AttendanceEntry] = field(default_factory=list)


@dataclass
class LogMakeupHours:
    record_id: str
    hours: float


@dataclass
class DeleteMakeupHours:
    record_id: str


@dataclass
class AddMakeupHours:
    student_id: str
    hours_owed: float
    reason: Optional[str] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None


class ComplianceEngine:
    """
    Entry point for the view/report layer.

    Wires the aggregator, classifier, attendance recorder, makeup deriver and
    ledger over one record store. Holds no mutable state of its own; every
    summary is recomputed from the store on request.
    """

    def __init__(
        self,
        store: RecordStore,
        thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.thresholds = thresholds
        self.ledger = MakeupHoursLedger(store, clock=clock)
        self.deriver = MakeupHoursDeriver(store, thresholds=thresholds, clock=clock)
        self.recorder = AttendanceRecorder(
            store, deriver=self.deriver, thresholds=thresholds, clock=clock
        )

    def _student(self, student_id: str) -> Student:
        student = self.store.get_student(student_id)
        if student is None:
            raise NotFoundError(f"Student {student_id!r} not found", kind="student", key=student_id)
        return student

    # hours
    def get_student_hours_summary(
        self, student_id: str, include_pending: bool = False
    ) -> StudentHoursSummary:
        """
        Aggregate a student's clinical logs and classify them.

        Only approved entries count by default. `include_pending` adds entries
        still awaiting review; rejected entries never count.
        Never reads makeup obligations.
        """
        student = self._student(student_id)
        counted = {LogStatus.APPROVED, LogStatus.PENDING} if include_pending else {LogStatus.APPROVED}
        entries = [
            e for e in self.store.list_clinical_logs(student_id) if LogStatus(e.status) in counted
        ]

        required = student.clinical_hours_required or self.thresholds.required_total_hours
        breakdown = aggregate_hours(entries)
        status = classify(breakdown, required, self.thresholds)

        return StudentHoursSummary(
            student_id=student_id,
            total_hours=breakdown.total_hours,
            direct_hours=breakdown.direct_hours,
            sim_hours=breakdown.sim_hours,
            makeup_hours=breakdown.makeup_hours,
            sim_percentage=breakdown.sim_percentage,
            is_compliant=status.is_compliant,
            hours_by_site=breakdown.hours_by_site,
            sim_status=status.sim_status,
            alert_level=status.alert_level,
            progress=status.progress,
            progress_status=status.progress_status,
            is_at_risk=status.is_at_risk,
            flags=status.flags,
            skipped_entry_ids=breakdown.skipped_entry_ids,
        )

    def add_clinical_log(self, entry: ClinicalLogEntry) -> ClinicalLogEntry:
        self._student(entry.student_id)
        if entry.hours is None or not math.isfinite(entry.hours) or entry.hours <= 0:
            raise ValidationError(
                f"Clinical log {entry.id!r}: hours must be positive, got {entry.hours}",
                student_id=entry.student_id,
            )
        self.store.add_clinical_log(entry)
        logger.info(
            "Logged %g %s hours for %s at %s",
            entry.hours, "simulation" if entry.is_simulation else "direct",
            entry.student_id, entry.site_name,
        )
        return entry

    # attendance
    def record_attendance_day(
        self,
        day: date,
        attendance_type: AttendanceType,
        entries: List[AttendanceEntry],
    ) -> AttendanceDayResult:
        return self.recorder.record_day(day, attendance_type, entries)

    def get_attendance_for_date(
        self, day: date, attendance_type: Optional[AttendanceType] = None
    ) -> List[AttendanceRecord]:
        records = self.store.list_attendance(day, attendance_type)
        return sorted(records, key=lambda r: (r.student_id, AttendanceType(r.attendance_type).value))

    def get_attendance_summary(self, student_id: str) -> AttendanceSummary:
        self._student(student_id)
        summaries = summarize_attendance(self.store.list_student_attendance(student_id))
        return summaries[0] if summaries else AttendanceSummary(student_id=student_id)

    def get_students_with_attendance_issues(self, min_absences: int = 1) -> List[AttendanceSummary]:
        records = []
        for student in self.store.list_students():
            records.extend(self.store.list_student_attendance(student.id))
        return [s for s in summarize_attendance(records) if s.total_absences >= min_absences]

    # makeup hours
    def get_makeup_hours_summary(self, student_id: str) -> MakeupHoursSummary:
        return self.ledger.summarize(student_id)

    def get_all_makeup_summaries(self) -> List[MakeupHoursSummary]:
        return self.ledger.all_summaries()

    def log_makeup_hours(self, record_id: str, hours: float) -> MakeupHoursRecord:
        return self.ledger.log_hours(record_id, hours)

    def delete_makeup_hours(self, record_id: str) -> None:
        self.ledger.delete(record_id)

    def add_makeup_hours(
        self,
        student_id: str,
        hours_owed: float,
        reason: Optional[str] = None,
        due_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> MakeupHoursRecord:
        return self.ledger.add_obligation(student_id, hours_owed, reason, due_date, notes)

    # command dispatch
    @singledispatchmethod
    def dispatch(self, command):
        raise TypeError(f"Unsupported command: {type(command).__name__}")

    @dispatch.register
    def _(self, command: RecordAttendanceDay) -> AttendanceDayResult:
        return self.record_attendance_day(command.date, command.attendance_type, command.entries)

    @dispatch.register
    def _(self, command: LogMakeupHours) -> MakeupHoursRecord:
        return self.log_makeup_hours(command.record_id, command.hours)

    @dispatch.register
    def _(self, command: DeleteMakeupHours) -> None:
        return self.delete_makeup_hours(command.record_id)

    @dispatch.register
    def _(self, command: AddMakeupHours) -> MakeupHoursRecord:
        return self.add_makeup_hours(
            command.student_id, command.hours_owed, command.reason, command.due_date, command.notes
        )
