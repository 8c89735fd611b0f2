from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.moduz.core.config import settings


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Copies the requested tenant onto ``request.state`` for request logs.

    The value is unverified here; routes resolve and check it through the
    authorization gate.
    """

    async def dispatch(self, request: Request, call_next):
        request.state.tenant_id = request.headers.get(settings.TENANT_HEADER)
        request.state.principal_id = None
        return await call_next(request)
