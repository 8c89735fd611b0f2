from datetime import datetime

from pydantic import BaseModel


class AuditEventOut(BaseModel):
    id: str
    tenant_id: str
    actor_principal_id: str
    actor_membership_id: str | None = None
    action: str
    entity_type: str | None = None
    entity_id: str | None = None
    payload: dict | None = None
    trace_id: str | None = None
    created_at: datetime


class AuditListResponse(BaseModel):
    events: list[AuditEventOut]
    next_cursor: datetime | None = None
    trace_id: str
