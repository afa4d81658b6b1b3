from datetime import date
from typing import Optional, Literal
from fastapi import APIRouter, Depends
from core.attendance import AttendanceEntry
from core.engine import ComplianceEngine
from core.models import AttendanceType
from api.deps import get_engine, to_http_error
from docs.attendance.record_day import record_day_description
from exceptions.custom_errors import CUSTOM_ERRORS
from schemas.attendance.record_day import RecordDayRequest
from utils.helpers.serialize import to_json

router = APIRouter(tags=["Attendance"])


# take attendance
@router.post(
    "/attendance/record-day",
    response_model=dict,
    description=record_day_description,
    summary="Record Attendance Day",
)
def record_day(request: RecordDayRequest, engine: ComplianceEngine = Depends(get_engine)):
    entries = [
        AttendanceEntry(
            student_id=e.studentId,
            status=e.status,
            hours_attended=e.hoursAttended,
            hours_required=e.hoursRequired,
            notes=e.notes,
        )
        for e in request.entries
    ]
    try:
        result = engine.record_attendance_day(
            request.date, AttendanceType(request.attendanceType), entries
        )
    except tuple(CUSTOM_ERRORS) as e:
        raise to_http_error(e)
    return to_json(result)


# students with absences; declared before /attendance/{day} so "issues" is not parsed as a date
@router.get("/attendance/issues", response_model=list, summary="Students With Attendance Issues")
def attendance_issues(minAbsences: int = 1, engine: ComplianceEngine = Depends(get_engine)):
    return to_json(engine.get_students_with_attendance_issues(minAbsences))


@router.get("/attendance/{day}", response_model=list, summary="Attendance For Date")
def attendance_for_date(
    day: date,
    attendanceType: Optional[Literal["classroom", "clinical"]] = None,
    engine: ComplianceEngine = Depends(get_engine),
):
    kind = AttendanceType(attendanceType) if attendanceType else None
    return to_json(engine.get_attendance_for_date(day, kind))


@router.get(
    "/students/{student_id}/attendance-summary",
    response_model=dict,
    summary="Student Attendance Summary",
)
def attendance_summary(student_id: str, engine: ComplianceEngine = Depends(get_engine)):
    try:
        summary = engine.get_attendance_summary(student_id)
    except tuple(CUSTOM_ERRORS) as e:
        raise to_http_error(e)
    return to_json(summary)
