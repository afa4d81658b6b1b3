import copy
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from datetime import date
from typing import Dict, Iterator, List, Optional
from core.models import (
    AttendanceRecord,
    AttendanceType,
    ClinicalLogEntry,
    MakeupHoursRecord,
    Student,
)
from exceptions.custom_errors import ConcurrentUpdateError, DuplicateRecordError, NotFoundError


class RecordStore(ABC):
    """
    Read/write contract between the engine and the persistent record store.

    Implementations own persistence; the engine only reads and writes plain
    records through these methods.
    """

    # students
    @abstractmethod
    def get_student(self, student_id: str) -> Optional[Student]: ...

    @abstractmethod
    def list_students(self) -> List[Student]: ...

    # clinical logs
    @abstractmethod
    def list_clinical_logs(self, student_id: str) -> List[ClinicalLogEntry]: ...

    @abstractmethod
    def add_clinical_log(self, entry: ClinicalLogEntry) -> None:
        """Insert a new entry; DuplicateRecordError if its id is already stored."""

    # attendance
    @abstractmethod
    def list_attendance(
        self, day: date, attendance_type: Optional[AttendanceType] = None
    ) -> List[AttendanceRecord]: ...

    @abstractmethod
    def list_student_attendance(self, student_id: str) -> List[AttendanceRecord]: ...

    @abstractmethod
    def upsert_attendance_batch(self, records: List[AttendanceRecord]) -> None: ...

    # makeup hours
    @abstractmethod
    def list_makeup_hours(self, student_id: Optional[str] = None) -> List[MakeupHoursRecord]: ...

    @abstractmethod
    def get_makeup_hours(self, record_id: str) -> Optional[MakeupHoursRecord]: ...

    @abstractmethod
    def find_makeup_by_absence(self, attendance_id: str) -> Optional[MakeupHoursRecord]: ...

    @abstractmethod
    def upsert_makeup_hours(
        self, record: MakeupHoursRecord, expected_version: Optional[int] = None
    ) -> MakeupHoursRecord:
        """
        Insert or replace a makeup record and return the stored copy.

        If `expected_version` is given the write only succeeds when the stored
        version still equals it (0 meaning "must not exist yet"); otherwise
        ConcurrentUpdateError is raised. The stored copy carries version + 1.
        """

    @abstractmethod
    def delete_makeup_hours(self, record_id: str) -> None: ...

    @abstractmethod
    def transaction(self):
        """Context manager; every write inside it is applied or none is."""


class InMemoryRecordStore(RecordStore):
    """
    Dict-backed store used for tests, local runs and as a reference for real
    backends. Reads return copies so callers can never mutate stored state.
    """

    def __init__(self, students: Optional[List[Student]] = None):
        self._lock = threading.RLock()
        self._students: Dict[str, Student] = {}
        self._logs: Dict[str, ClinicalLogEntry] = {}
        self._attendance: Dict[str, AttendanceRecord] = {}
        self._makeup: Dict[str, MakeupHoursRecord] = {}
        for student in students or []:
            self.add_student(student)

    def add_student(self, student: Student) -> None:
        with self._lock:
            self._students[student.id] = copy.deepcopy(student)

    def get_student(self, student_id):
        with self._lock:
            student = self._students.get(student_id)
            return copy.deepcopy(student) if student else None

    def list_students(self):
        with self._lock:
            return [copy.deepcopy(s) for s in self._students.values()]

    def list_clinical_logs(self, student_id):
        with self._lock:
            return [copy.deepcopy(e) for e in self._logs.values() if e.student_id == student_id]

    def add_clinical_log(self, entry):
        with self._lock:
            if entry.id in self._logs:
                raise DuplicateRecordError(
                    f"Clinical log {entry.id!r} already exists", kind="clinical_log", key=entry.id
                )
            self._logs[entry.id] = copy.deepcopy(entry)

    def list_attendance(self, day, attendance_type=None):
        with self._lock:
            return [
                copy.deepcopy(r)
                for r in self._attendance.values()
                if r.date == day and (attendance_type is None or r.attendance_type == attendance_type)
            ]

    def list_student_attendance(self, student_id):
        with self._lock:
            records = [copy.deepcopy(r) for r in self._attendance.values() if r.student_id == student_id]
        return sorted(records, key=lambda r: r.date, reverse=True)

    def upsert_attendance_batch(self, records):
        with self._lock:
            for record in records:
                self._attendance[record.id] = copy.deepcopy(record)

    def list_makeup_hours(self, student_id=None):
        with self._lock:
            return [
                copy.deepcopy(r)
                for r in self._makeup.values()
                if student_id is None or r.student_id == student_id
            ]

    def get_makeup_hours(self, record_id):
        with self._lock:
            record = self._makeup.get(record_id)
            return copy.deepcopy(record) if record else None

    def find_makeup_by_absence(self, attendance_id):
        with self._lock:
            for record in self._makeup.values():
                if record.original_absence_id == attendance_id:
                    return copy.deepcopy(record)
        return None

    def upsert_makeup_hours(self, record, expected_version=None):
        with self._lock:
            current = self._makeup.get(record.id)
            actual_version = current.version if current else 0
            if expected_version is not None and expected_version != actual_version:
                raise ConcurrentUpdateError(
                    f"Makeup record {record.id!r} changed concurrently "
                    f"(expected version {expected_version}, found {actual_version})",
                    record.id,
                    expected_version,
                    actual_version,
                )
            stored = replace(record, version=actual_version + 1)
            self._makeup[record.id] = stored
            return copy.deepcopy(stored)

    def delete_makeup_hours(self, record_id):
        with self._lock:
            if record_id not in self._makeup:
                raise NotFoundError(
                    f"Makeup record {record_id!r} not found", kind="makeup_hours", key=record_id
                )
            del self._makeup[record_id]

    @contextmanager
    def transaction(self) -> Iterator["InMemoryRecordStore"]:
        """
        Hold the store lock for the whole block and restore the previous state
        if the block raises. Nested transactions join the outer one.
        """
        with self._lock:
            snapshot = (
                copy.deepcopy(self._logs),
                copy.deepcopy(self._attendance),
                copy.deepcopy(self._makeup),
            )
            try:
                yield self
            except BaseException:
                self._logs, self._attendance, self._makeup = snapshot
                raise
