from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError

from app.moduz.core.config import settings
from app.moduz.core.error_catalog import ErrorCatalog
from app.moduz.core.logging import log_json
from app.moduz.core.metrics import metrics
from app.moduz.core.result import Err, Ok, Result
from app.moduz.db.errors import storage_error
from app.moduz.db.models import AuditEvent
from app.moduz.repos.audit import AuditRepository

logger = logging.getLogger(__name__)

_REDACTED_MARKERS = ("password", "secret", "token")


class AuditAction(str, Enum):
    MODULE_TOGGLED = "MODULE_TOGGLED"
    SETTINGS_UPDATED = "SETTINGS_UPDATED"
    MEMBERSHIP_CREATED = "MEMBERSHIP_CREATED"
    MEMBERSHIP_UPDATED = "MEMBERSHIP_UPDATED"
    TENANT_CREATED = "TENANT_CREATED"


@dataclass
class AuditEventPayload:
    tenant_id: object
    actor_principal_id: str
    action: AuditAction
    entity_type: str | None = None
    entity_id: str | None = None
    actor_membership_id: object | None = None
    trace_id: str | None = None
    payload: dict = field(default_factory=dict)


@dataclass(frozen=True)
class AuditPage:
    events: list
    next_cursor: datetime | None


def _sanitize(value):
    if isinstance(value, dict):
        return {
            key: "***" if any(marker in str(key).lower() for marker in _REDACTED_MARKERS) else _sanitize(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_sanitize(item) for item in value]
    return value


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return settings.AUDIT_LIST_DEFAULT_LIMIT
    return max(1, min(int(limit), settings.AUDIT_LIST_MAX_LIMIT))


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class AuditTrail:
    """Append-only log of privileged actions.

    ``record`` is best-effort: callers commit their own change first and then
    report whether the audit row made it. Storage failures are rolled back,
    logged and counted, and come back as ``Err(AUDIT_WRITE_FAILED)``.
    """

    def __init__(self, db):
        self.db = db
        self.repo = AuditRepository(db)

    def record(self, payload: AuditEventPayload) -> Result[AuditEvent]:
        action = AuditAction(payload.action)
        event = AuditEvent(
            tenant_id=payload.tenant_id,
            actor_principal_id=payload.actor_principal_id,
            actor_membership_id=payload.actor_membership_id,
            action=action.value,
            entity_type=payload.entity_type,
            entity_id=payload.entity_id,
            payload=_sanitize(payload.payload),
            trace_id=payload.trace_id,
            created_at=datetime.utcnow(),
        )
        try:
            return Ok(self.repo.create(event))
        except SQLAlchemyError as exc:
            self.db.rollback()
            metrics.increment_audit_write_failed(action.value)
            log_json(
                logger,
                {
                    "event": "audit_write_failed",
                    "action": action.value,
                    "tenant_id": payload.tenant_id,
                    "trace_id": payload.trace_id,
                    "error_class": exc.__class__.__name__,
                },
                level=logging.WARNING,
            )
            return Err(ErrorCatalog.AUDIT_WRITE_FAILED, details={"action": action.value})

    def list(self, tenant_id, limit: int | None = None, cursor: datetime | None = None) -> Result[AuditPage]:
        page_size = clamp_limit(limit)
        try:
            events = self.repo.list_page(tenant_id, limit=page_size, before=_naive_utc(cursor))
        except SQLAlchemyError as exc:
            self.db.rollback()
            return Err(storage_error(exc))
        next_cursor = events[-1].created_at if len(events) == page_size else None
        return Ok(AuditPage(events=list(events), next_cursor=next_cursor))
