import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.moduz.core.error_catalog import ErrorCatalog
from app.moduz.core.logging import log_json
from app.moduz.core.result import Err, Ok, Result
from app.moduz.db.errors import storage_error
from app.moduz.db.models import MEMBERSHIP_ROLES, Membership, Tenant
from app.moduz.repos.memberships import MembershipRepository
from app.moduz.repos.tenants import TenantRepository
from app.moduz.services.module_flags import ModuleFlagService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MembershipChange:
    membership: Membership
    before: dict
    after: dict


def membership_snapshot(membership: Membership) -> dict:
    return {
        "role": membership.role,
        "is_active": membership.is_active,
        "display_name": membership.display_name,
    }


class TenancyService:
    """Tenant provisioning and membership management."""

    def __init__(self, db):
        self.db = db
        self.tenants = TenantRepository(db)
        self.memberships = MembershipRepository(db)

    def create_tenant(self, name: str) -> Result[Tenant]:
        name = name.strip()
        try:
            existing = self.tenants.get_by_name(name)
            if existing is not None:
                return Ok(existing)
            tenant = self.tenants.create(Tenant(name=name, is_active=True))
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
        # New tenants get their module rows right away; List still self-heals if this fails.
        seeded = ModuleFlagService(self.db).seed(tenant.id)
        if isinstance(seeded, Err):
            log_json(logger, {"event": "tenant_seed_deferred", "tenant_id": tenant.id, "code": seeded.code})
        return Ok(tenant)

    def add_membership(
        self,
        tenant_id,
        principal_id: str,
        *,
        role: str = "internal",
        display_name: str | None = None,
        email: str | None = None,
    ) -> Result[Membership]:
        if role not in MEMBERSHIP_ROLES:
            return Err(ErrorCatalog.VALIDATION_ERROR, details={"field": "role", "allowed": list(MEMBERSHIP_ROLES)})
        try:
            if self.tenants.get_by_id(tenant_id) is None:
                return Err(ErrorCatalog.TENANT_NOT_FOUND)
            if self.memberships.get_for_principal(tenant_id, principal_id) is not None:
                return Err(ErrorCatalog.MEMBERSHIP_EXISTS, details={"principal_id": principal_id})
            now = datetime.utcnow()
            membership = self.memberships.create(
                Membership(
                    tenant_id=tenant_id,
                    principal_id=principal_id,
                    role=role,
                    is_active=True,
                    display_name=display_name,
                    email=email,
                    created_at=now,
                    updated_at=now,
                )
            )
        except IntegrityError:
            self.db.rollback()
            return Err(ErrorCatalog.MEMBERSHIP_EXISTS, details={"principal_id": principal_id})
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
        return Ok(membership)

    def update_membership(
        self,
        tenant_id,
        membership_id,
        *,
        role: str | None = None,
        is_active: bool | None = None,
        display_name: str | None = None,
    ) -> Result[MembershipChange]:
        if role is not None and role not in MEMBERSHIP_ROLES:
            return Err(ErrorCatalog.VALIDATION_ERROR, details={"field": "role", "allowed": list(MEMBERSHIP_ROLES)})
        try:
            membership = self.memberships.get_by_id(membership_id)
            if membership is None or str(membership.tenant_id) != str(tenant_id):
                return Err(ErrorCatalog.MEMBERSHIP_NOT_FOUND)
            keeps_admin = (role or membership.role) == "admin" and (
                membership.is_active if is_active is None else is_active
            )
            if membership.is_admin and membership.is_active and not keeps_admin:
                admins = self.memberships.active_admin_ids(tenant_id, for_update=True)
                if len(admins) <= 1:
                    self.db.rollback()
                    return Err(ErrorCatalog.LAST_ADMIN_REQUIRED, details={"membership_id": str(membership.id)})
            before = membership_snapshot(membership)
            if role is not None:
                membership.role = role
            if is_active is not None:
                membership.is_active = is_active
            if display_name is not None:
                membership.display_name = display_name
            after = membership_snapshot(membership)
            if after == before:
                return Err(ErrorCatalog.NO_CHANGES)
            membership.updated_at = datetime.utcnow()
            membership = self.memberships.update(membership)
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
        return Ok(MembershipChange(membership=membership, before=before, after=after))

    def list_memberships(self, tenant_id) -> Result[list[Membership]]:
        try:
            return Ok(list(self.memberships.list_by_tenant(tenant_id)))
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
