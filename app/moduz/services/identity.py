from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from app.moduz.core.context import Principal
from app.moduz.core.result import Err, Ok, Result
from app.moduz.db.errors import storage_error
from app.moduz.repos.memberships import MembershipRepository


@dataclass(frozen=True)
class TenantMembership:
    membership_id: object
    tenant_id: object
    tenant_name: str
    tenant_active: bool
    role: str
    display_name: str | None
    created_at: object


@dataclass(frozen=True)
class IdentityContext:
    principal: Principal
    memberships: list[TenantMembership]
    default_tenant_id: object | None

    def allows(self, tenant_id) -> bool:
        return any(str(item.tenant_id) == str(tenant_id) for item in self.memberships)


class IdentityResolver:
    def __init__(self, db):
        self.db = db
        self.repo = MembershipRepository(db)

    def resolve_context(self, principal: Principal) -> Result[IdentityContext]:
        """Active memberships of ``principal`` in creation order.

        An empty list is a valid answer. A storage failure is not, and comes
        back as a retryable error instead.
        """
        try:
            rows = self.repo.list_active_for_principal(principal.id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
        memberships = [
            TenantMembership(
                membership_id=membership.id,
                tenant_id=tenant.id,
                tenant_name=tenant.name,
                tenant_active=tenant.is_active,
                role=membership.role,
                display_name=membership.display_name,
                created_at=membership.created_at,
            )
            for membership, tenant in rows
        ]
        default_tenant_id = memberships[0].tenant_id if memberships else None
        return Ok(IdentityContext(principal=principal, memberships=memberships, default_tenant_id=default_tenant_id))
