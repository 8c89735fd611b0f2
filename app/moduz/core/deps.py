import uuid
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError

from app.moduz.core.config import settings
from app.moduz.core.context import Principal, RequestContext, trace_id_of
from app.moduz.core.error_catalog import AppError, ErrorCatalog
from app.moduz.core.result import unwrap
from app.moduz.core.security import TokenData, bearer_scheme, decode_token
from app.moduz.db.models import Membership
from app.moduz.db.session import get_db
from app.moduz.services.authorization import AuthorizationGate


@dataclass(frozen=True)
class MemberContext:
    context: RequestContext
    membership: Membership

    @property
    def tenant_id(self) -> uuid.UUID:
        return self.membership.tenant_id

    @property
    def principal_id(self) -> str:
        return self.context.principal.id

    @property
    def trace_id(self) -> str:
        return self.context.trace_id


def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AppError(ErrorCatalog.AUTHENTICATION_MISSING)
    try:
        token_data = TokenData(**decode_token(credentials.credentials))
    except (JWTError, ValidationError, TypeError) as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc
    if not token_data.sub.strip():
        raise AppError(ErrorCatalog.INVALID_TOKEN)
    # Only for request logs; never read back for authorization.
    request.state.principal_id = token_data.sub
    return Principal(id=token_data.sub, email=token_data.email)


def get_tenant_id(request: Request) -> uuid.UUID:
    raw = request.headers.get(settings.TENANT_HEADER)
    if not raw:
        raise AppError(ErrorCatalog.TENANT_ID_REQUIRED, details={"header": settings.TENANT_HEADER})
    try:
        return uuid.UUID(raw.strip())
    except ValueError as exc:
        raise AppError(ErrorCatalog.TENANT_ID_REQUIRED, details={"header": settings.TENANT_HEADER}) from exc


def require_request_context(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    tenant_id: uuid.UUID = Depends(get_tenant_id),
) -> RequestContext:
    return RequestContext(principal=principal, tenant_id=str(tenant_id), trace_id=trace_id_of(request))


def require_member(
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
) -> MemberContext:
    membership = unwrap(AuthorizationGate(db).assert_active_member(context.principal.id, uuid.UUID(context.tenant_id)))
    return MemberContext(context=context, membership=membership)


def require_admin(
    context: RequestContext = Depends(require_request_context),
    db=Depends(get_db),
) -> MemberContext:
    membership = unwrap(AuthorizationGate(db).assert_admin(context.principal.id, uuid.UUID(context.tenant_id)))
    return MemberContext(context=context, membership=membership)


__all__ = [
    "MemberContext",
    "get_current_principal",
    "get_tenant_id",
    "require_request_context",
    "require_member",
    "require_admin",
]
