import uuid

from fastapi import APIRouter, Depends, status

from app.moduz.core.deps import MemberContext, require_admin, require_member
from app.moduz.core.result import Err, Result, unwrap
from app.moduz.db.models import Membership, TenantSettings
from app.moduz.db.session import get_db
from app.moduz.schemas.admin import (
    MembershipCreateRequest,
    MembershipListResponse,
    MembershipOut,
    MembershipPatchRequest,
    MembershipWriteResponse,
    TenantSettingsOut,
    TenantSettingsPatchRequest,
    TenantSettingsResponse,
    TenantSettingsWriteResponse,
)
from app.moduz.schemas.errors import AUTHZ_ERROR_RESPONSES, ApiErrorResponse
from app.moduz.services.audit import AuditAction, AuditEventPayload, AuditTrail
from app.moduz.services.settings import TenantSettingsService
from app.moduz.services.tenancy import TenancyService, membership_snapshot

router = APIRouter()

WRITE_ERROR_RESPONSES = {
    **AUTHZ_ERROR_RESPONSES,
    400: {"model": ApiErrorResponse, "description": "NO_CHANGES"},
    404: {"model": ApiErrorResponse, "description": "MEMBERSHIP_NOT_FOUND"},
    409: {"model": ApiErrorResponse, "description": "MEMBERSHIP_EXISTS or LAST_ADMIN_REQUIRED"},
}


def _settings_out(tenant_settings: TenantSettings) -> TenantSettingsOut:
    return TenantSettingsOut(
        tenant_id=str(tenant_settings.tenant_id),
        timezone=tenant_settings.timezone,
        locale=tenant_settings.locale,
        currency=tenant_settings.currency,
        extras=dict(tenant_settings.extras or {}),
        updated_at=tenant_settings.updated_at,
    )


def _membership_out(membership: Membership) -> MembershipOut:
    return MembershipOut(
        id=str(membership.id),
        tenant_id=str(membership.tenant_id),
        principal_id=membership.principal_id,
        role=membership.role,
        is_active=membership.is_active,
        display_name=membership.display_name,
        email=membership.email,
        created_at=membership.created_at,
        updated_at=membership.updated_at,
    )


def _audit(db, member: MemberContext, action: AuditAction, entity_type: str, entity_id: str, payload: dict) -> Result:
    return AuditTrail(db).record(
        AuditEventPayload(
            tenant_id=member.tenant_id,
            actor_principal_id=member.principal_id,
            actor_membership_id=member.membership.id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            trace_id=member.trace_id,
            payload=payload,
        )
    )


def _audit_fields(audit: Result) -> dict:
    if isinstance(audit, Err):
        return {"audit_recorded": False, "audit_error": audit.code}
    return {"audit_recorded": True, "audit_error": None}


@router.get("/settings", response_model=TenantSettingsResponse, responses=AUTHZ_ERROR_RESPONSES)
def get_settings(member: MemberContext = Depends(require_member), db=Depends(get_db)):
    tenant_settings = unwrap(TenantSettingsService(db).get_or_create(member.tenant_id))
    return TenantSettingsResponse(settings=_settings_out(tenant_settings), trace_id=member.trace_id)


@router.patch("/settings", response_model=TenantSettingsWriteResponse, responses=WRITE_ERROR_RESPONSES)
def patch_settings(
    payload: TenantSettingsPatchRequest,
    member: MemberContext = Depends(require_admin),
    db=Depends(get_db),
):
    change = unwrap(TenantSettingsService(db).update(member.tenant_id, payload.model_dump(exclude_unset=True)))
    audit = _audit(
        db,
        member,
        AuditAction.SETTINGS_UPDATED,
        "tenant_settings",
        str(member.tenant_id),
        {"before": change.before, "after": change.after},
    )
    return TenantSettingsWriteResponse(
        settings=_settings_out(change.settings),
        trace_id=member.trace_id,
        **_audit_fields(audit),
    )


@router.get("/memberships", response_model=MembershipListResponse, responses=AUTHZ_ERROR_RESPONSES)
def list_memberships(member: MemberContext = Depends(require_member), db=Depends(get_db)):
    memberships = unwrap(TenancyService(db).list_memberships(member.tenant_id))
    return MembershipListResponse(
        memberships=[_membership_out(item) for item in memberships],
        trace_id=member.trace_id,
    )


@router.post(
    "/memberships",
    response_model=MembershipWriteResponse,
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_ERROR_RESPONSES,
)
def create_membership(
    payload: MembershipCreateRequest,
    member: MemberContext = Depends(require_admin),
    db=Depends(get_db),
):
    created = unwrap(
        TenancyService(db).add_membership(
            member.tenant_id,
            payload.principal_id.strip(),
            role=payload.role,
            display_name=payload.display_name,
            email=payload.email,
        )
    )
    audit = _audit(
        db,
        member,
        AuditAction.MEMBERSHIP_CREATED,
        "membership",
        str(created.id),
        {"principal_id": created.principal_id, **membership_snapshot(created)},
    )
    return MembershipWriteResponse(membership=_membership_out(created), trace_id=member.trace_id, **_audit_fields(audit))


@router.patch("/memberships/{membership_id}", response_model=MembershipWriteResponse, responses=WRITE_ERROR_RESPONSES)
def patch_membership(
    membership_id: uuid.UUID,
    payload: MembershipPatchRequest,
    member: MemberContext = Depends(require_admin),
    db=Depends(get_db),
):
    change = unwrap(
        TenancyService(db).update_membership(
            member.tenant_id,
            membership_id,
            role=payload.role,
            is_active=payload.is_active,
            display_name=payload.display_name,
        )
    )
    audit = _audit(
        db,
        member,
        AuditAction.MEMBERSHIP_UPDATED,
        "membership",
        str(change.membership.id),
        {"principal_id": change.membership.principal_id, "before": change.before, "after": change.after},
    )
    return MembershipWriteResponse(
        membership=_membership_out(change.membership),
        trace_id=member.trace_id,
        **_audit_fields(audit),
    )
