from fastapi import HTTPException, Request
from core.engine import ComplianceEngine
from exceptions.custom_errors import CUSTOM_ERRORS


def get_engine(request: Request) -> ComplianceEngine:
    """The engine instance the app was created with."""
    return request.app.state.engine


def to_http_error(e: Exception) -> HTTPException:
    """Map an engine error to the HTTP status registered in CUSTOM_ERRORS."""
    return HTTPException(
        status_code=CUSTOM_ERRORS[type(e)],
        detail={"error": type(e).__name__, "message": str(e), **e.context},
    )
