from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.moduz.core.config import settings as app_settings
from app.moduz.core.error_catalog import ErrorCatalog
from app.moduz.core.result import Err, Ok, Result
from app.moduz.db.errors import storage_error
from app.moduz.db.models import TenantSettings
from app.moduz.repos.settings import TenantSettingsRepository

EDITABLE_FIELDS = ("timezone", "locale", "currency", "extras")


@dataclass(frozen=True)
class SettingsChange:
    settings: TenantSettings
    before: dict
    after: dict


def settings_snapshot(tenant_settings: TenantSettings) -> dict:
    return {name: getattr(tenant_settings, name) for name in EDITABLE_FIELDS}


class TenantSettingsService:
    def __init__(self, db):
        self.db = db
        self.repo = TenantSettingsRepository(db)

    def get_or_create(self, tenant_id) -> Result[TenantSettings]:
        try:
            existing = self.repo.get_by_tenant_id(tenant_id)
            if existing is not None:
                return Ok(existing)
            now = datetime.utcnow()
            return Ok(
                self.repo.create(
                    TenantSettings(
                        tenant_id=tenant_id,
                        timezone=app_settings.DEFAULT_TIMEZONE,
                        locale=app_settings.DEFAULT_LOCALE,
                        currency=app_settings.DEFAULT_CURRENCY,
                        extras={},
                        created_at=now,
                        updated_at=now,
                    )
                )
            )
        except IntegrityError:
            # Another request created the row first.
            self.db.rollback()
            return Ok(self.repo.get_by_tenant_id(tenant_id))
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))

    def update(self, tenant_id, changes: dict) -> Result[SettingsChange]:
        changes = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS and value is not None}
        if not changes:
            return Err(ErrorCatalog.NO_CHANGES)
        current = self.get_or_create(tenant_id)
        if isinstance(current, Err):
            return current
        tenant_settings = current.value
        before = settings_snapshot(tenant_settings)
        for name, value in changes.items():
            setattr(tenant_settings, name, dict(value) if name == "extras" else value)
        after = settings_snapshot(tenant_settings)
        if after == before:
            return Err(ErrorCatalog.NO_CHANGES)
        tenant_settings.updated_at = datetime.utcnow()
        try:
            tenant_settings = self.repo.update(tenant_settings)
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
        return Ok(SettingsChange(settings=tenant_settings, before=before, after=after))
