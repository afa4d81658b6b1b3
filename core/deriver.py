import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple
from core.attendance import utc_now
from core.ledger import settle
from core.models import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceType,
    ComplianceThresholds,
    MakeupHoursRecord,
)
from core.store import RecordStore
from utils.constants import DEFAULT_THRESHOLDS

logger = logging.getLogger(__name__)

ABSENCE_REASON = "Clinical absence"


def makeup_id_for(attendance_id: str) -> str:
    return f"MKP-{attendance_id}"


def shortfall(record: AttendanceRecord) -> float:
    """Hours missed on a clinical day; 0 for outcomes that owe nothing."""
    status = AttendanceStatus(record.status)
    if status == AttendanceStatus.ABSENT:
        return record.hours_required
    if status == AttendanceStatus.PARTIAL:
        return record.hours_required - (record.hours_attended or 0.0)
    return 0.0


def default_reason(record: AttendanceRecord) -> str:
    if record.notes:
        return record.notes
    if AttendanceStatus(record.status) == AttendanceStatus.PARTIAL:
        return f"Partial attendance - {record.hours_attended:g}/{record.hours_required:g} hours"
    return ABSENCE_REASON


class MakeupHoursDeriver:
    """
    Turns saved clinical attendance into makeup-hour obligations.

    Obligations are keyed by the attendance record they came from, so running
    the deriver again on the same records converges on the same obligations:
    an existing one is updated in place, one that is no longer owed is
    removed, and manually added obligations are never touched.
    """

    def __init__(
        self,
        store: RecordStore,
        thresholds: ComplianceThresholds = DEFAULT_THRESHOLDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.thresholds = thresholds
        self.clock = clock

    def derive(
        self, records: Iterable[AttendanceRecord]
    ) -> Tuple[List[MakeupHoursRecord], List[str]]:
        """
        Reconcile obligations with the given attendance records.

        Returns:
            (obligations now owed for these records, ids of removed obligations)
        """
        derived, removed = [], []
        for record in records:
            if AttendanceType(record.attendance_type) != AttendanceType.CLINICAL:
                continue
            obligation = self.derive_one(record)
            if obligation is None:
                removed_id = self.remove_stale(record)
                if removed_id:
                    removed.append(removed_id)
            else:
                derived.append(obligation)
        return derived, removed

    def derive_one(self, record: AttendanceRecord) -> Optional[MakeupHoursRecord]:
        owed = shortfall(record)
        if owed <= 0:
            return None

        now = self.clock()
        reason = default_reason(record)
        due_date = record.date + timedelta(days=self.thresholds.makeup_due_days)
        existing = self.store.find_makeup_by_absence(record.id)

        if existing is None:
            created = MakeupHoursRecord(
                id=makeup_id_for(record.id),
                student_id=record.student_id,
                original_absence_id=record.id,
                hours_owed=owed,
                hours_completed=0.0,
                reason=reason,
                due_date=due_date,
                created_at=now,
                updated_at=now,
            )
            stored = self.store.upsert_makeup_hours(created, expected_version=0)
            logger.info(
                "Created makeup obligation %s: %g hours for %s (%s)",
                stored.id, owed, record.student_id, reason,
            )
            return stored

        if (
            existing.hours_owed == owed
            and existing.reason == reason
            and existing.due_date == due_date
        ):
            return existing

        updated = settle(
            replace(
                existing,
                hours_owed=owed,
                hours_completed=min(existing.hours_completed, owed),
                reason=reason,
                due_date=due_date,
                updated_at=now,
            ),
            now.date(),
        )
        stored = self.store.upsert_makeup_hours(updated, expected_version=existing.version)
        logger.info(
            "Updated makeup obligation %s: %g -> %g hours owed",
            stored.id, existing.hours_owed, owed,
        )
        return stored

    def remove_stale(self, record: AttendanceRecord) -> Optional[str]:
        existing = self.store.find_makeup_by_absence(record.id)
        if existing is None:
            return None
        self.store.delete_makeup_hours(existing.id)
        logger.info(
            "Removed makeup obligation %s: %s is now %s",
            existing.id, record.id, AttendanceStatus(record.status).value,
        )
        return existing.id
