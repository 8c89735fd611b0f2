from datetime import datetime

from fastapi import APIRouter, Depends, Query

from app.moduz.core.deps import MemberContext, require_member
from app.moduz.core.result import unwrap
from app.moduz.db.models import AuditEvent
from app.moduz.db.session import get_db
from app.moduz.schemas.audit import AuditEventOut, AuditListResponse
from app.moduz.schemas.errors import AUTHZ_ERROR_RESPONSES
from app.moduz.services.audit import AuditTrail

router = APIRouter()


def audit_event_out(event: AuditEvent) -> AuditEventOut:
    return AuditEventOut(
        id=str(event.id),
        tenant_id=str(event.tenant_id),
        actor_principal_id=event.actor_principal_id,
        actor_membership_id=str(event.actor_membership_id) if event.actor_membership_id else None,
        action=event.action,
        entity_type=event.entity_type,
        entity_id=event.entity_id,
        payload=event.payload,
        trace_id=event.trace_id,
        created_at=event.created_at,
    )


@router.get("/audit", response_model=AuditListResponse, responses=AUTHZ_ERROR_RESPONSES)
def list_audit(
    limit: int | None = Query(default=None),
    cursor: datetime | None = Query(default=None),
    member: MemberContext = Depends(require_member),
    db=Depends(get_db),
):
    page = unwrap(AuditTrail(db).list(member.tenant_id, limit=limit, cursor=cursor))
    return AuditListResponse(
        events=[audit_event_out(event) for event in page.events],
        next_cursor=page.next_cursor,
        trace_id=member.trace_id,
    )
