from fastapi import APIRouter, Depends, Request

from app.moduz.core.context import Principal, trace_id_of
from app.moduz.core.deps import get_current_principal
from app.moduz.core.result import unwrap
from app.moduz.db.session import get_db
from app.moduz.schemas.context import ContextResponse, MembershipSummary, PrincipalOut
from app.moduz.schemas.errors import AUTHZ_ERROR_RESPONSES
from app.moduz.services.identity import IdentityResolver

router = APIRouter()


@router.get("/context", response_model=ContextResponse, responses=AUTHZ_ERROR_RESPONSES)
def get_context(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db=Depends(get_db),
):
    identity = unwrap(IdentityResolver(db).resolve_context(principal))
    return ContextResponse(
        principal=PrincipalOut(id=principal.id, email=principal.email),
        memberships=[
            MembershipSummary(
                membership_id=str(item.membership_id),
                tenant_id=str(item.tenant_id),
                tenant_name=item.tenant_name,
                tenant_active=item.tenant_active,
                role=item.role,
                is_admin=item.role == "admin",
                display_name=item.display_name,
                created_at=item.created_at,
            )
            for item in identity.memberships
        ],
        default_tenant_id=str(identity.default_tenant_id) if identity.default_tenant_id else None,
        trace_id=trace_id_of(request),
    )
