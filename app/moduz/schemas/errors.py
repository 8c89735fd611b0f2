from pydantic import BaseModel


class ApiErrorResponse(BaseModel):
    code: str
    message: str
    details: dict | None = None
    trace_id: str | None = None


class ApiValidationErrorItem(BaseModel):
    field: str | None = None
    message: str
    type: str
    loc: list[str | int] | None = None


class ApiValidationErrorDetails(BaseModel):
    errors: list[ApiValidationErrorItem]


class ApiValidationErrorResponse(ApiErrorResponse):
    details: ApiValidationErrorDetails | dict | None = None


AUTHZ_ERROR_RESPONSES = {
    401: {"model": ApiErrorResponse, "description": "AUTHENTICATION_MISSING or INVALID_TOKEN"},
    403: {"model": ApiErrorResponse, "description": "NO_MEMBERSHIP or NOT_ADMIN"},
    422: {"model": ApiValidationErrorResponse, "description": "VALIDATION_ERROR"},
    503: {"model": ApiErrorResponse, "description": "STORAGE_UNAVAILABLE"},
}
