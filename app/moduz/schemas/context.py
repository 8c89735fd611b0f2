from datetime import datetime

from pydantic import BaseModel


class PrincipalOut(BaseModel):
    id: str
    email: str | None = None


class MembershipSummary(BaseModel):
    membership_id: str
    tenant_id: str
    tenant_name: str
    tenant_active: bool
    role: str
    is_admin: bool
    display_name: str | None = None
    created_at: datetime


class ContextResponse(BaseModel):
    principal: PrincipalOut
    memberships: list[MembershipSummary]
    default_tenant_id: str | None = None
    trace_id: str
