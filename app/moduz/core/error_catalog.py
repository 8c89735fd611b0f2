from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int
    retryable: bool = False


class ErrorCatalog:
    AUTHENTICATION_MISSING = ErrorDefinition(
        "AUTHENTICATION_MISSING",
        "Authentication required",
        status.HTTP_401_UNAUTHORIZED,
    )
    INVALID_TOKEN = ErrorDefinition("INVALID_TOKEN", "Invalid token", status.HTTP_401_UNAUTHORIZED)
    TENANT_ID_REQUIRED = ErrorDefinition(
        "TENANT_ID_REQUIRED",
        "A valid tenant id header is required",
        status.HTTP_400_BAD_REQUEST,
    )
    NO_MEMBERSHIP = ErrorDefinition(
        "NO_MEMBERSHIP",
        "No active membership for this tenant",
        status.HTTP_403_FORBIDDEN,
    )
    NOT_ADMIN = ErrorDefinition(
        "NOT_ADMIN",
        "Admin role required",
        status.HTTP_403_FORBIDDEN,
    )
    MODULE_UNKNOWN = ErrorDefinition(
        "MODULE_UNKNOWN",
        "Module is not part of the catalog",
        status.HTTP_404_NOT_FOUND,
    )
    MODULE_NOT_IMPLEMENTED = ErrorDefinition(
        "MODULE_NOT_IMPLEMENTED",
        "Module is not implemented yet",
        status.HTTP_409_CONFLICT,
    )
    MANDATORY_MODULE_CANNOT_BE_DISABLED = ErrorDefinition(
        "MANDATORY_MODULE_CANNOT_BE_DISABLED",
        "Mandatory module cannot be disabled",
        status.HTTP_409_CONFLICT,
    )
    TENANT_NOT_FOUND = ErrorDefinition(
        "TENANT_NOT_FOUND",
        "Tenant not found",
        status.HTTP_404_NOT_FOUND,
    )
    MEMBERSHIP_EXISTS = ErrorDefinition(
        "MEMBERSHIP_EXISTS",
        "Principal already has a membership in this tenant",
        status.HTTP_409_CONFLICT,
    )
    MEMBERSHIP_NOT_FOUND = ErrorDefinition(
        "MEMBERSHIP_NOT_FOUND",
        "Membership not found",
        status.HTTP_404_NOT_FOUND,
    )
    LAST_ADMIN_REQUIRED = ErrorDefinition(
        "LAST_ADMIN_REQUIRED",
        "Tenant must keep at least one active admin",
        status.HTTP_409_CONFLICT,
    )
    NO_CHANGES = ErrorDefinition(
        "NO_CHANGES",
        "No changes to apply",
        status.HTTP_400_BAD_REQUEST,
    )
    STORAGE_UNAVAILABLE = ErrorDefinition(
        "STORAGE_UNAVAILABLE",
        "Storage unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
        retryable=True,
    )
    # Soft failure: reported next to a successful result, never as the response status.
    AUDIT_WRITE_FAILED = ErrorDefinition(
        "AUDIT_WRITE_FAILED",
        "Audit event could not be recorded",
        status.HTTP_200_OK,
    )
    LOCK_TIMEOUT = ErrorDefinition(
        "LOCK_TIMEOUT",
        "Lock wait timeout",
        status.HTTP_409_CONFLICT,
        retryable=True,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)
