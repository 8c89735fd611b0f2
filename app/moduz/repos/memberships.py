from sqlalchemy import select

from app.moduz.db.models import Membership, Tenant


class MembershipRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, membership_id):
        return self.db.get(Membership, membership_id)

    def get_for_principal(self, tenant_id, principal_id: str):
        stmt = select(Membership).where(
            Membership.tenant_id == tenant_id,
            Membership.principal_id == principal_id,
        )
        return self.db.execute(stmt).scalars().first()

    def list_active_for_principal(self, principal_id: str):
        """Active memberships with their tenant, oldest first."""
        stmt = (
            select(Membership, Tenant)
            .join(Tenant, Tenant.id == Membership.tenant_id)
            .where(Membership.principal_id == principal_id, Membership.is_active.is_(True))
            .order_by(Membership.created_at.asc(), Membership.id.asc())
        )
        return self.db.execute(stmt).all()

    def list_by_tenant(self, tenant_id, *, include_inactive: bool = True):
        stmt = select(Membership).where(Membership.tenant_id == tenant_id)
        if not include_inactive:
            stmt = stmt.where(Membership.is_active.is_(True))
        stmt = stmt.order_by(Membership.created_at.asc(), Membership.id.asc())
        return self.db.execute(stmt).scalars().all()

    def active_admin_ids(self, tenant_id, *, for_update: bool = False):
        stmt = select(Membership.id).where(
            Membership.tenant_id == tenant_id,
            Membership.role == "admin",
            Membership.is_active.is_(True),
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalars().all()

    def create(self, membership: Membership):
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def update(self, membership: Membership):
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership
