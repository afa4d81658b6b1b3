from fastapi import APIRouter, Depends
from core.engine import ComplianceEngine
from api.deps import get_engine, to_http_error
from docs.makeup.log_hours import log_hours_description
from exceptions.custom_errors import CUSTOM_ERRORS
from schemas.makeup.hours import AddMakeupRequest, LogHoursRequest
from utils.helpers.serialize import to_json

router = APIRouter(tags=["Makeup Hours"])


@router.get(
    "/students/{student_id}/makeup-summary",
    response_model=dict,
    summary="Student Makeup Hours Summary",
)
def makeup_summary(student_id: str, engine: ComplianceEngine = Depends(get_engine)):
    try:
        summary = engine.get_makeup_hours_summary(student_id)
    except tuple(CUSTOM_ERRORS) as e:
        raise to_http_error(e)
    return to_json(summary)


@router.get("/makeup/summaries", response_model=list, summary="All Makeup Hours Summaries")
def all_summaries(engine: ComplianceEngine = Depends(get_engine)):
    return to_json(engine.get_all_makeup_summaries())


@router.post("/makeup", response_model=dict, status_code=201, summary="Add Makeup Hours")
def add_makeup(request: AddMakeupRequest, engine: ComplianceEngine = Depends(get_engine)):
    try:
        record = engine.add_makeup_hours(
            request.studentId, request.hoursOwed, request.reason, request.dueDate, request.notes
        )
    except tuple(CUSTOM_ERRORS) as e:
        raise to_http_error(e)
    return to_json(record)


@router.post(
    "/makeup/{record_id}/log-hours",
    response_model=dict,
    description=log_hours_description,
    summary="Log Makeup Hours",
)
def log_hours(record_id: str, request: LogHoursRequest, engine: ComplianceEngine = Depends(get_engine)):
    try:
        record = engine.log_makeup_hours(record_id, request.hours)
    except tuple(CUSTOM_ERRORS) as e:
        raise to_http_error(e)
    return to_json(record)


@router.delete("/makeup/{record_id}", status_code=204, summary="Delete Makeup Hours")
def delete_makeup(record_id: str, engine: ComplianceEngine = Depends(get_engine)):
    try:
        engine.delete_makeup_hours(record_id)
    except tuple(CUSTOM_ERRORS) as e:
        raise to_http_error(e)
