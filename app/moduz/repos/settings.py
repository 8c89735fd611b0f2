from sqlalchemy import select

from app.moduz.db.models import TenantSettings


class TenantSettingsRepository:
    def __init__(self, db):
        self.db = db

    def get_by_tenant_id(self, tenant_id):
        stmt = select(TenantSettings).where(TenantSettings.tenant_id == tenant_id)
        return self.db.execute(stmt).scalars().first()

    def create(self, tenant_settings: TenantSettings):
        self.db.add(tenant_settings)
        self.db.commit()
        self.db.refresh(tenant_settings)
        return tenant_settings

    def update(self, tenant_settings: TenantSettings):
        self.db.add(tenant_settings)
        self.db.commit()
        self.db.refresh(tenant_settings)
        return tenant_settings
