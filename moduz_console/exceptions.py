from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: object | None
    trace_id: str | None
    status_code: int
    raw_payload: object | None = None

    def __str__(self) -> str:
        trace = f" trace_id={self.trace_id}" if self.trace_id else ""
        return f"[{self.status_code}] {self.code}: {self.message}{trace}"


class AuthError(ApiError):
    """Missing or invalid bearer token."""


class PermissionError(ApiError):
    """Denied by the membership gate (NO_MEMBERSHIP, NOT_ADMIN)."""


class NotFoundError(ApiError):
    pass


class ValidationError(ApiError):
    pass


class ConflictError(ApiError):
    """409 responses: guardrail rejections and lock timeouts."""


class ServerError(ApiError):
    """5xx failures, STORAGE_UNAVAILABLE included."""


class TransportError(ApiError):
    """Network failure before a response, or a request dropped by a tenant switch."""


class GuardrailError(ApiError):
    """Toggle rejected by the catalog guardrails, locally or by the server."""


class TenantNotAllowedError(ApiError):
    """Tenant is not among the principal's memberships."""
