from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from moduz_catalog import modules
from app.moduz.core.error_catalog import ErrorCatalog
from app.moduz.core.logging import log_json
from app.moduz.core.metrics import metrics
from app.moduz.core.result import Err, Ok, Result
from app.moduz.db.errors import storage_error
from app.moduz.db.models import ModuleFlag
from app.moduz.repos.module_flags import ModuleFlagRepository

logger = logging.getLogger(__name__)

_GUARDRAIL_ERRORS = {
    modules.MODULE_UNKNOWN: ErrorCatalog.MODULE_UNKNOWN,
    modules.MANDATORY_MODULE_CANNOT_BE_DISABLED: ErrorCatalog.MANDATORY_MODULE_CANNOT_BE_DISABLED,
    modules.MODULE_NOT_IMPLEMENTED: ErrorCatalog.MODULE_NOT_IMPLEMENTED,
}


@dataclass(frozen=True)
class ToggleOutcome:
    flag: ModuleFlag
    previous_enabled: bool | None


def seed_rows(tenant_id, now: datetime) -> list[dict]:
    rows = []
    for descriptor in modules.descriptors():
        enabled = descriptor.seed_enabled
        rows.append(
            {
                "id": uuid.uuid4(),
                "tenant_id": tenant_id,
                "module_key": descriptor.key.value,
                "enabled": enabled,
                "enabled_at": now if enabled else None,
                "created_at": now,
                "updated_at": now,
            }
        )
    return rows


class ModuleFlagService:
    def __init__(self, db):
        self.db = db
        self.repo = ModuleFlagRepository(db)

    def seed(self, tenant_id) -> Result[int]:
        """Insert the missing catalog rows for ``tenant_id``; safe to call concurrently."""
        try:
            self.repo.insert_missing(seed_rows(tenant_id, datetime.utcnow()))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc), details={"tenant_id": str(tenant_id)})
        return Ok(len(modules.descriptors()))

    def list(self, tenant_id) -> Result[list[ModuleFlag]]:
        seeded = self.seed(tenant_id)
        if isinstance(seeded, Err):
            return seeded
        try:
            flags = self.repo.list_by_tenant(tenant_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
        # Rows for keys removed from the catalog stay in storage but are not served.
        known = set(modules.catalog_keys())
        return Ok([flag for flag in flags if flag.module_key in known])

    def enabled_keys(self, tenant_id) -> Result[list[str]]:
        listed = self.list(tenant_id)
        if isinstance(listed, Err):
            return listed
        return Ok([flag.module_key for flag in listed.value if flag.enabled])

    def toggle(self, tenant_id, module_key, desired_enabled: bool) -> Result[ToggleOutcome]:
        rejection = modules.check_toggle(module_key, desired_enabled)
        label = str(getattr(module_key, "value", module_key))
        if rejection is not None:
            metrics.record_module_toggle(label, rejection)
            return Err(_GUARDRAIL_ERRORS[rejection], details={"module_key": label})

        key = modules.parse_module_key(module_key).value
        seeded = self.seed(tenant_id)
        if isinstance(seeded, Err):
            return seeded

        try:
            current = self.repo.get(tenant_id, key, for_update=True)
            previous = current.enabled if current is not None else None
            self.repo.set_enabled(tenant_id, key, desired_enabled, datetime.utcnow())
            flag = self.repo.get(tenant_id, key)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            metrics.record_module_toggle(key, "STORAGE_ERROR")
            return Err(storage_error(exc), details={"module_key": key})

        metrics.record_module_toggle(key, "OK")
        log_json(
            logger,
            {
                "event": "module_toggled",
                "tenant_id": tenant_id,
                "module_key": key,
                "enabled": flag.enabled,
                "previous_enabled": previous,
            },
        )
        return Ok(ToggleOutcome(flag=flag, previous_enabled=previous))
