from fastapi import APIRouter, Depends
from core.engine import ComplianceEngine
from core.models import ClinicalLogEntry, LogStatus
from api.deps import get_engine, to_http_error
from docs.hours.summary import hours_summary_description
from exceptions.custom_errors import CUSTOM_ERRORS
from schemas.hours.clinical_log import ClinicalLogIn
from utils.helpers.serialize import to_json

router = APIRouter(prefix="/students", tags=["Clinical Hours"])


@router.get(
    "/{student_id}/hours-summary",
    response_model=dict,
    description=hours_summary_description,
    summary="Student Hours Summary",
)
def get_hours_summary(
    student_id: str,
    includePending: bool = False,
    engine: ComplianceEngine = Depends(get_engine),
):
    try:
        summary = engine.get_student_hours_summary(student_id, include_pending=includePending)
    except tuple(CUSTOM_ERRORS) as e:
        raise to_http_error(e)
    return to_json(summary)


@router.post("/{student_id}/clinical-logs", response_model=dict, summary="Add Clinical Log")
def add_clinical_log(
    student_id: str,
    log: ClinicalLogIn,
    engine: ComplianceEngine = Depends(get_engine),
):
    entry = ClinicalLogEntry(
        id=log.id,
        student_id=student_id,
        date=log.date,
        site_name=log.siteName,
        hours=log.hours,
        is_simulation=log.isSimulation,
        is_makeup=log.isMakeup,
        status=LogStatus(log.status),
    )
    try:
        engine.add_clinical_log(entry)
    except tuple(CUSTOM_ERRORS) as e:
        raise to_http_error(e)
    return to_json(entry)
