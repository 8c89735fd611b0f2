from fastapi import APIRouter, Depends, Request

from moduz_catalog import modules
from app.moduz.core.context import Principal, trace_id_of
from app.moduz.core.deps import MemberContext, get_current_principal, require_admin, require_member
from app.moduz.core.result import Err, unwrap
from app.moduz.db.models import ModuleFlag
from app.moduz.db.session import get_db
from app.moduz.schemas.errors import AUTHZ_ERROR_RESPONSES, ApiErrorResponse
from app.moduz.schemas.modules import (
    ModuleCatalogResponse,
    ModuleDescriptorOut,
    ModuleFlagOut,
    ModuleListResponse,
    ModuleToggleRequest,
    ModuleToggleResponse,
)
from app.moduz.services.audit import AuditAction, AuditEventPayload, AuditTrail
from app.moduz.services.module_flags import ModuleFlagService

router = APIRouter()

TOGGLE_ERROR_RESPONSES = {
    **AUTHZ_ERROR_RESPONSES,
    404: {"model": ApiErrorResponse, "description": "MODULE_UNKNOWN"},
    409: {
        "model": ApiErrorResponse,
        "description": "MODULE_NOT_IMPLEMENTED, MANDATORY_MODULE_CANNOT_BE_DISABLED or LOCK_TIMEOUT",
    },
}


def flag_out(flag: ModuleFlag) -> ModuleFlagOut:
    descriptor = modules.get_descriptor(flag.module_key)
    return ModuleFlagOut(
        module_key=flag.module_key,
        enabled=flag.enabled,
        enabled_at=flag.enabled_at,
        updated_at=flag.updated_at,
        implemented=bool(descriptor and descriptor.implemented),
        mandatory=bool(descriptor and descriptor.mandatory),
    )


@router.get("/modules/catalog", response_model=ModuleCatalogResponse, responses=AUTHZ_ERROR_RESPONSES)
async def get_catalog(request: Request, _principal: Principal = Depends(get_current_principal)):
    return ModuleCatalogResponse(
        modules=[
            ModuleDescriptorOut(
                key=descriptor.key,
                title=descriptor.title,
                description=descriptor.description,
                implemented=descriptor.implemented,
                mandatory=descriptor.mandatory,
                route=descriptor.route,
            )
            for descriptor in modules.descriptors()
        ],
        mandatory_module=modules.mandatory_module_key(),
        trace_id=trace_id_of(request),
    )


@router.get("/modules", response_model=ModuleListResponse, responses=AUTHZ_ERROR_RESPONSES)
def list_modules(member: MemberContext = Depends(require_member), db=Depends(get_db)):
    flags = unwrap(ModuleFlagService(db).list(member.tenant_id))
    return ModuleListResponse(
        tenant_id=str(member.tenant_id),
        modules=[flag_out(flag) for flag in flags],
        trace_id=member.trace_id,
    )


@router.post("/modules/toggle", response_model=ModuleToggleResponse, responses=TOGGLE_ERROR_RESPONSES)
def toggle_module(
    payload: ModuleToggleRequest,
    member: MemberContext = Depends(require_admin),
    db=Depends(get_db),
):
    outcome = unwrap(ModuleFlagService(db).toggle(member.tenant_id, payload.module_key, payload.enabled))
    flag = outcome.flag
    audit = AuditTrail(db).record(
        AuditEventPayload(
            tenant_id=member.tenant_id,
            actor_principal_id=member.principal_id,
            actor_membership_id=member.membership.id,
            action=AuditAction.MODULE_TOGGLED,
            entity_type="module_flag",
            entity_id=flag.module_key,
            trace_id=member.trace_id,
            payload={
                "module_key": flag.module_key,
                "enabled": flag.enabled,
                "previous_enabled": outcome.previous_enabled,
            },
        )
    )
    return ModuleToggleResponse(
        module=flag_out(flag),
        audit_recorded=not isinstance(audit, Err),
        audit_error=audit.code if isinstance(audit, Err) else None,
        trace_id=member.trace_id,
    )
