from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from app.moduz.db.models import ModuleFlag

_UNIQUE_COLUMNS = ["tenant_id", "module_key"]


class ModuleFlagRepository:
    def __init__(self, db):
        self.db = db

    def insert_missing(self, rows: list[dict]) -> None:
        """Insert rows, leaving any (tenant, module) pair that already exists untouched.

        The unique constraint decides; no row is read first.
        """
        if not rows:
            return
        table = ModuleFlag.__table__
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            insert = None

        if insert is not None:
            stmt = insert(table).on_conflict_do_nothing(index_elements=_UNIQUE_COLUMNS)
            self.db.execute(stmt, rows)
            return

        for row in rows:
            savepoint = self.db.begin_nested()
            try:
                self.db.execute(table.insert().values(**row))
                savepoint.commit()
            except IntegrityError:
                savepoint.rollback()

    def list_by_tenant(self, tenant_id):
        stmt = select(ModuleFlag).where(ModuleFlag.tenant_id == tenant_id).order_by(ModuleFlag.module_key.asc())
        return self.db.execute(stmt).scalars().all()

    def get(self, tenant_id, module_key: str, *, for_update: bool = False):
        stmt = select(ModuleFlag).where(ModuleFlag.tenant_id == tenant_id, ModuleFlag.module_key == module_key)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt.execution_options(populate_existing=True)).scalars().first()

    def set_enabled(self, tenant_id, module_key: str, enabled: bool, now: datetime) -> int:
        """Single-statement write; ``enabled_at`` is only ever filled, never cleared."""
        values = {"enabled": enabled, "updated_at": now}
        if enabled:
            values["enabled_at"] = func.coalesce(ModuleFlag.enabled_at, now)
        stmt = (
            update(ModuleFlag)
            .where(ModuleFlag.tenant_id == tenant_id, ModuleFlag.module_key == module_key)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount
