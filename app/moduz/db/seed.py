import logging

from app.moduz.core.config import settings
from app.moduz.core.logging import log_json
from app.moduz.core.result import unwrap
from app.moduz.services.audit import AuditAction, AuditEventPayload, AuditTrail
from app.moduz.services.tenancy import TenancyService, membership_snapshot

logger = logging.getLogger(__name__)


def provision_tenant(db, name: str, admin_principal_id: str, admin_email: str | None = None, *, actor: str = "system"):
    """Create (or reuse) a tenant, seed its modules and make sure it has an admin.

    Idempotent: re-running with the same arguments changes nothing.
    """
    service = TenancyService(db)
    trail = AuditTrail(db)
    created = service.tenants.get_by_name(name.strip()) is None
    tenant = unwrap(service.create_tenant(name))
    if created:
        trail.record(
            AuditEventPayload(
                tenant_id=tenant.id,
                actor_principal_id=actor,
                action=AuditAction.TENANT_CREATED,
                entity_type="tenant",
                entity_id=str(tenant.id),
                payload={"name": tenant.name},
            )
        )
        log_json(logger, {"event": "tenant_provisioned", "tenant_id": tenant.id, "name": tenant.name})

    membership = service.memberships.get_for_principal(tenant.id, admin_principal_id)
    if membership is None:
        membership = unwrap(
            service.add_membership(
                tenant.id,
                admin_principal_id,
                role="admin",
                display_name=admin_email,
                email=admin_email,
            )
        )
        trail.record(
            AuditEventPayload(
                tenant_id=tenant.id,
                actor_principal_id=actor,
                action=AuditAction.MEMBERSHIP_CREATED,
                entity_type="membership",
                entity_id=str(membership.id),
                payload={"principal_id": admin_principal_id, **membership_snapshot(membership)},
            )
        )
    return tenant, membership


def run_seed(db):
    return provision_tenant(
        db,
        settings.DEFAULT_TENANT_NAME,
        settings.BOOTSTRAP_ADMIN_PRINCIPAL_ID,
        settings.BOOTSTRAP_ADMIN_EMAIL,
    )
