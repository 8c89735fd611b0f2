from datetime import datetime

from sqlalchemy import select

from app.moduz.db.models import AuditEvent


class AuditRepository:
    def __init__(self, db):
        self.db = db

    def create(self, event: AuditEvent) -> AuditEvent:
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        return event

    def list_page(self, tenant_id, *, limit: int, before: datetime | None = None):
        stmt = select(AuditEvent).where(AuditEvent.tenant_id == tenant_id)
        if before is not None:
            stmt = stmt.where(AuditEvent.created_at < before)
        stmt = stmt.order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(limit)
        return self.db.execute(stmt).scalars().all()
