import logging
import math
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, List, Optional
from core.attendance import utc_now
from core.models import MakeupHoursRecord, MakeupHoursSummary, MakeupStatus
from core.store import RecordStore
from exceptions.custom_errors import BalanceError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def settle(record: MakeupHoursRecord, today: date) -> MakeupHoursRecord:
    """Keep completion_date consistent with the balance: set iff completed."""
    if record.status == MakeupStatus.COMPLETED:
        return replace(record, completion_date=record.completion_date or today)
    return replace(record, completion_date=None)


def summarize_records(student_id: str, records: List[MakeupHoursRecord]) -> MakeupHoursSummary:
    owed = math.fsum(r.hours_owed for r in records)
    completed = math.fsum(r.hours_completed for r in records)
    return MakeupHoursSummary(
        student_id=student_id,
        total_hours_owed=owed,
        total_hours_completed=completed,
        balance_remaining=owed - completed,
        records=records,
    )


class MakeupHoursLedger:
    """
    Balance tracking for makeup-hour obligations.

    Progress only moves forward: hours are added, never subtracted, and can
    never exceed what is owed. Every write is a compare-and-set against the
    version that was read, so two concurrent log_hours calls against the same
    obligation cannot both apply.
    """

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def get(self, record_id: str) -> MakeupHoursRecord:
        record = self.store.get_makeup_hours(record_id)
        if record is None:
            raise NotFoundError(
                f"Makeup record {record_id!r} not found", kind="makeup_hours", key=record_id
            )
        return record

    def log_hours(self, record_id: str, hours_to_add: float) -> MakeupHoursRecord:
        """
        Add completed hours to an obligation.

        Raises:
            ValidationError: hours_to_add is not positive.
            BalanceError: hours_to_add exceeds the remaining balance.
            NotFoundError: unknown record id.
            ConcurrentUpdateError: the record changed since it was read.
        """
        if hours_to_add is None or not math.isfinite(hours_to_add) or hours_to_add <= 0:
            raise ValidationError(f"Hours to log must be positive, got {hours_to_add}")

        record = self.get(record_id)
        remaining = record.balance
        if hours_to_add > remaining:
            logger.warning(
                "Rejected logging %g hours on %s: only %g remaining",
                hours_to_add, record_id, remaining,
            )
            raise BalanceError(
                f"Cannot log {hours_to_add:g} hours on {record_id!r}: "
                f"only {remaining:g} hours remaining",
                record_id,
                remaining,
            )

        now = self.clock()
        updated = settle(
            replace(
                record,
                hours_completed=min(record.hours_completed + hours_to_add, record.hours_owed),
                updated_at=now,
            ),
            now.date(),
        )
        stored = self.store.upsert_makeup_hours(updated, expected_version=record.version)
        logger.info(
            "Logged %g makeup hours on %s: %g/%g (%s)",
            hours_to_add, record_id, stored.hours_completed, stored.hours_owed, stored.status.value,
        )
        return stored

    def add_obligation(
        self,
        student_id: str,
        hours_owed: float,
        reason: Optional[str] = None,
        due_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> MakeupHoursRecord:
        """Manually entered obligation, not tied to an attendance record."""
        if self.store.get_student(student_id) is None:
            raise NotFoundError(f"Student {student_id!r} not found", kind="student", key=student_id)
        if hours_owed is None or not math.isfinite(hours_owed) or hours_owed <= 0:
            raise ValidationError(
                f"Hours owed must be positive, got {hours_owed}", student_id=student_id
            )

        now = self.clock()
        record = MakeupHoursRecord(
            id=f"MKP-{uuid.uuid4()}",
            student_id=student_id,
            hours_owed=float(hours_owed),
            reason=reason,
            due_date=due_date,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        stored = self.store.upsert_makeup_hours(record, expected_version=0)
        logger.info("Added manual makeup obligation %s: %g hours for %s", stored.id, hours_owed, student_id)
        return stored

    def delete(self, record_id: str) -> None:
        """
        Instructor override. Removes the obligation outright; re-deriving the
        originating attendance record will create it again.
        """
        self.get(record_id)
        self.store.delete_makeup_hours(record_id)
        logger.info("Deleted makeup obligation %s", record_id)

    def list_records(self, student_id: str) -> List[MakeupHoursRecord]:
        records = self.store.list_makeup_hours(student_id)
        return sorted(records, key=lambda r: (r.created_at is not None, r.created_at, r.id), reverse=True)

    def summarize(self, student_id: str) -> MakeupHoursSummary:
        if self.store.get_student(student_id) is None:
            raise NotFoundError(f"Student {student_id!r} not found", kind="student", key=student_id)
        return summarize_records(student_id, self.list_records(student_id))

    def all_summaries(self) -> List[MakeupHoursSummary]:
        """Every student with at least one obligation, largest balance first."""
        by_student = {}
        for record in self.store.list_makeup_hours():
            by_student.setdefault(record.student_id, []).append(record)
        summaries = [
            summarize_records(student_id, self.list_records(student_id))
            for student_id in sorted(by_student)
        ]
        summaries.sort(key=lambda s: s.balance_remaining, reverse=True)
        return summaries
