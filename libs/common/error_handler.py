"""Exception handlers producing the ``{"error": ...}`` response body."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from starlette.exceptions import HTTPException

from libs.common.exceptions import ConcurrencyConflict, ServiceError
from libs.common.logging import get_logger

logger = get_logger(__name__)


def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    content = {"error": message}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Service error",
            extra={"extra_fields": {"error": exc.message, "type": type(exc).__name__}},
        )
    return _error_response(exc.status_code, exc.message, **exc.details)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    response = _error_response(exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Invalid request"
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg"),
        }
        for err in errors
    ]
    return JSONResponse(status_code=400, content={"error": message, "details": details})


async def stale_data_handler(request: Request, exc: StaleDataError) -> JSONResponse:
    logger.warning("Concurrent modification detected: %s", exc)
    return _error_response(409, ConcurrencyConflict.default_message)


async def database_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.exception("Database error")
    return _error_response(500, "Database error")


def add_exception_handlers(app: FastAPI) -> None:
    """Register every handler on ``app``."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StaleDataError, stale_data_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
