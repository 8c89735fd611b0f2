from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from app.moduz.core.context import trace_id_of
from app.moduz.core.error_catalog import AppError, ErrorCatalog, ErrorDefinition
from app.moduz.core.metrics import metrics
from app.moduz.db.errors import is_lock_timeout


_HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def _set_error_context(request: Request, code: str, exc: Exception | None = None) -> None:
    request.state.error_code = code
    if exc is not None:
        request.state.error_class = exc.__class__.__name__


def _validation_error_details(exc: RequestValidationError) -> dict:
    errors = []
    for error in exc.errors():
        loc = list(error.get("loc", []))
        field = ".".join(str(item) for item in loc if item not in {"body", "query", "path", "header"}) or None
        errors.append(
            {
                "field": field,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "validation_error"),
                "loc": loc,
            }
        )
    return {"errors": errors}


def error_response(code: str, message: str, details: object, trace_id: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "code": code,
            "message": message,
            "details": details,
            "trace_id": trace_id,
        },
    )


def _catalog_response(request: Request, error: ErrorDefinition, details: object, exc: Exception) -> JSONResponse:
    _set_error_context(request, error.code, exc)
    return error_response(error.code, error.message, details, trace_id_of(request), error.status_code)


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return _catalog_response(request, exc.error, exc.details, exc)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        code = _HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        _set_error_context(request, code, exc)
        message = str(exc.detail) if exc.detail is not None else "HTTP error"
        return error_response(code, message, None, trace_id_of(request), exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _catalog_response(request, ErrorCatalog.VALIDATION_ERROR, _validation_error_details(exc), exc)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        details = {"type": exc.__class__.__name__}
        if is_lock_timeout(exc):
            metrics.increment_lock_wait_timeout()
            return _catalog_response(request, ErrorCatalog.LOCK_TIMEOUT, details, exc)
        if isinstance(exc, OperationalError):
            return _catalog_response(request, ErrorCatalog.STORAGE_UNAVAILABLE, details, exc)
        return _catalog_response(request, ErrorCatalog.INTERNAL_ERROR, details, exc)
