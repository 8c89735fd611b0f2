from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

MembershipRole = Literal["admin", "internal", "external"]


class TenantSettingsOut(BaseModel):
    tenant_id: str
    timezone: str
    locale: str
    currency: str
    extras: dict
    updated_at: datetime


class TenantSettingsResponse(BaseModel):
    settings: TenantSettingsOut
    trace_id: str


class TenantSettingsPatchRequest(BaseModel):
    timezone: str | None = Field(default=None, min_length=1, max_length=64)
    locale: str | None = Field(default=None, min_length=2, max_length=16)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    extras: dict | None = None


class TenantSettingsWriteResponse(TenantSettingsResponse):
    audit_recorded: bool
    audit_error: str | None = None


class MembershipOut(BaseModel):
    id: str
    tenant_id: str
    principal_id: str
    role: str
    is_active: bool
    display_name: str | None = None
    email: str | None = None
    created_at: datetime
    updated_at: datetime


class MembershipListResponse(BaseModel):
    memberships: list[MembershipOut]
    trace_id: str


class MembershipCreateRequest(BaseModel):
    principal_id: str = Field(..., min_length=1, max_length=255)
    role: MembershipRole = "internal"
    display_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)


class MembershipPatchRequest(BaseModel):
    role: MembershipRole | None = None
    is_active: bool | None = None
    display_name: str | None = Field(default=None, max_length=255)


class MembershipWriteResponse(BaseModel):
    membership: MembershipOut
    audit_recorded: bool
    audit_error: str | None = None
    trace_id: str
