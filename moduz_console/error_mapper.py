from __future__ import annotations

from typing import Mapping

from moduz_catalog.modules import MANDATORY_MODULE_CANNOT_BE_DISABLED, MODULE_NOT_IMPLEMENTED, MODULE_UNKNOWN
from moduz_console.exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    GuardrailError,
    NotFoundError,
    PermissionError,
    ServerError,
    ValidationError,
)

GUARDRAIL_CODES = frozenset({MODULE_UNKNOWN, MODULE_NOT_IMPLEMENTED, MANDATORY_MODULE_CANNOT_BE_DISABLED})
RETRYABLE_CODES = frozenset({"STORAGE_UNAVAILABLE", "LOCK_TIMEOUT", "TRANSPORT_ERROR"})

_BY_STATUS: dict[int, type[ApiError]] = {
    400: ValidationError,
    401: AuthError,
    403: PermissionError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def is_retryable(error: ApiError) -> bool:
    return error.code in RETRYABLE_CODES


def map_error(status_code: int, payload: Mapping[str, object] | None, trace_id: str | None) -> ApiError:
    payload = payload or {}
    code = str(payload.get("code") or "HTTP_ERROR")
    payload_trace_id = payload.get("trace_id")
    # Server-side guardrail rejections read the same as the local ones.
    if code in GUARDRAIL_CODES:
        mapped: type[ApiError] = GuardrailError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = _BY_STATUS.get(status_code, ApiError)
    return mapped(
        code=code,
        message=str(payload.get("message") or "Request failed"),
        details=payload.get("details"),
        trace_id=str(payload_trace_id) if payload_trace_id else trace_id,
        status_code=status_code,
        raw_payload=dict(payload),
    )
