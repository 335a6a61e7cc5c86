"""Conversion of handled errors into JSON responses."""

from fastapi.responses import JSONResponse

from medtech_api.errors import BadRequest, MedTechError
from medtech_api.schemas import ErrorResponse


def bad_request(message: str) -> JSONResponse:
    """400 response carrying only the error message."""
    return JSONResponse(status_code=400, content={"error": message})


def error_response(exc: MedTechError, error: str) -> JSONResponse:
    """Render a handled failure.

    Args:
        exc: The handled error
        error: Human-readable summary of the failed operation
    """
    if isinstance(exc, BadRequest):
        return bad_request(exc.message)
    body = ErrorResponse(error=error, details=exc.message, category=exc.category)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())
