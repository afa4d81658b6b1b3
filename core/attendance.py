import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional
import pandas as pd
from core.models import (
    AttendanceDayResult,
    AttendanceRecord,
    AttendanceStatus,
    AttendanceSummary,
    AttendanceType,
    ComplianceThresholds,
    attendance_id,
)
from core.store import RecordStore
from exceptions.custom_errors import NotFoundError, ValidationError
from utils.constants import DEFAULT_THRESHOLDS

logger = logging.getLogger(__name__)


@dataclass
class AttendanceEntry:
    """One row of a "take attendance" submission."""

    student_id: str
    status: AttendanceStatus
    hours_attended: Optional[float] = None
    hours_required: Optional[float] = None
    notes: Optional[str] = None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AttendanceRecorder:
    """
    Validates and persists one day's attendance for a cohort.

    A submission is all or nothing: every entry is validated before anything
    is written. Saved clinical records are then passed to the makeup-hours
    deriver inside the same store transaction, so a failure while deriving
    leaves the day exactly as it was.
    """

    def __init__(
        self,
        store: RecordStore,
        deriver=None,
        thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.deriver = deriver
        self.thresholds = thresholds
        self.clock = clock

    def build_records(
        self,
        day: date,
        attendance_type: AttendanceType,
        entries: Iterable[AttendanceEntry],
    ) -> List[AttendanceRecord]:
        """
        Validate a submission and turn it into AttendanceRecords. No writes.

        hours_required is taken from the entry if given, else from the record
        already stored for the same (student, date, type), else from the
        default shift length for the attendance type.

        Raises:
            ValidationError: on the first malformed entry, identifying it.
            NotFoundError: if an entry refers to an unknown student.
        """
        try:
            attendance_type = AttendanceType(attendance_type)
        except ValueError:
            raise ValidationError(f"Unknown attendance type {attendance_type!r}")

        prior: Dict[str, AttendanceRecord] = {
            r.id: r for r in self.store.list_attendance(day, attendance_type)
        }
        recorded_at = self.clock()
        seen = set()
        records = []

        for index, entry in enumerate(entries):
            student_id = entry.student_id
            where = f"entry {index} (student {student_id!r})"

            if student_id in seen:
                raise ValidationError(
                    f"{where}: student appears more than once in the submission",
                    index=index,
                    student_id=student_id,
                )
            seen.add(student_id)

            if self.store.get_student(student_id) is None:
                raise NotFoundError(
                    f"{where}: unknown student", kind="student", key=student_id
                )

            try:
                status = AttendanceStatus(entry.status)
            except ValueError:
                raise ValidationError(
                    f"{where}: unknown status {entry.status!r}",
                    index=index,
                    student_id=student_id,
                )

            record_id = attendance_id(student_id, day, attendance_type)
            if entry.hours_required is not None:
                hours_required = float(entry.hours_required)
            elif record_id in prior:
                hours_required = prior[record_id].hours_required
            else:
                hours_required = float(self.thresholds.default_shift_hours(attendance_type))

            if not math.isfinite(hours_required) or hours_required <= 0:
                raise ValidationError(
                    f"{where}: hours required must be positive, got {hours_required:g}",
                    index=index,
                    student_id=student_id,
                )

            if status == AttendanceStatus.PARTIAL:
                if entry.hours_attended is None:
                    raise ValidationError(
                        f"{where}: partial attendance requires hours attended",
                        index=index,
                        student_id=student_id,
                    )
                hours_attended = float(entry.hours_attended)
                if not 0 <= hours_attended <= hours_required:
                    raise ValidationError(
                        f"{where}: hours attended {hours_attended:g} outside [0, {hours_required:g}]",
                        index=index,
                        student_id=student_id,
                    )
            else:
                if entry.hours_attended is not None:
                    raise ValidationError(
                        f"{where}: hours attended is only allowed for Partial, not {status.value}",
                        index=index,
                        student_id=student_id,
                    )
                hours_attended = None

            records.append(
                AttendanceRecord(
                    id=record_id,
                    student_id=student_id,
                    date=day,
                    attendance_type=attendance_type,
                    status=status,
                    hours_required=hours_required,
                    hours_attended=hours_attended,
                    notes=entry.notes or None,
                    recorded_at=recorded_at,
                )
            )

        return records

    def record_day(
        self,
        day: date,
        attendance_type: AttendanceType,
        entries: Iterable[AttendanceEntry],
    ) -> AttendanceDayResult:
        """Validate, persist, then derive makeup obligations for clinical days."""
        records = self.build_records(day, attendance_type, list(entries))
        attendance_type = AttendanceType(attendance_type)

        derived, removed = [], []
        with self.store.transaction():
            self.store.upsert_attendance_batch(records)
            if attendance_type == AttendanceType.CLINICAL and self.deriver is not None:
                derived, removed = self.deriver.derive(records)

        counts = pd.Series([r.status.value for r in records], dtype="object").value_counts()
        logger.info(
            "Recorded %s attendance for %s: %d records (%s), %d obligations derived, %d removed",
            attendance_type.value,
            day.isoformat(),
            len(records),
            ", ".join(f"{n} {s.lower()}" for s, n in counts.items()) or "empty",
            len(derived),
            len(removed),
        )
        return AttendanceDayResult(
            saved=records, derived_obligations=derived, removed_obligation_ids=removed
        )


def summarize_attendance(records: Iterable[AttendanceRecord]) -> List[AttendanceSummary]:
    """
    Count attendance outcomes per student, split by attendance type.

    Returns one summary per student, most absences first, then by student id.
    """
    df = pd.DataFrame(
        [
            {
                "student_id": r.student_id,
                "attendance_type": AttendanceType(r.attendance_type).value,
                "status": AttendanceStatus(r.status).value,
            }
            for r in records
        ],
        columns=["student_id", "attendance_type", "status"],
    )
    if df.empty:
        return []

    totals = pd.crosstab(df["student_id"], df["status"])
    by_type = pd.crosstab(df["student_id"], [df["attendance_type"], df["status"]])

    def count(table, key, student_id):
        return int(table[key].get(student_id, 0)) if key in table.columns else 0

    summaries = [
        AttendanceSummary(
            student_id=student_id,
            total_present=count(totals, "Present", student_id),
            total_absences=count(totals, "Absent", student_id),
            total_tardies=count(totals, "Tardy", student_id),
            total_excused=count(totals, "Excused", student_id),
            total_partial=count(totals, "Partial", student_id),
            classroom_absences=count(by_type, ("classroom", "Absent"), student_id),
            classroom_tardies=count(by_type, ("classroom", "Tardy"), student_id),
            clinical_absences=count(by_type, ("clinical", "Absent"), student_id),
            clinical_tardies=count(by_type, ("clinical", "Tardy"), student_id),
        )
        for student_id in totals.index
    ]
    summaries.sort(key=lambda s: (-s.total_absences, s.student_id))
    return summaries
