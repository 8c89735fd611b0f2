import time
from concurrent.futures import ThreadPoolExecutor

from moduz_catalog import modules
from app.moduz.core.error_catalog import ErrorCatalog
from app.moduz.core.result import Err, Ok
from app.moduz.db.models import ModuleFlag
from app.moduz.services.module_flags import ModuleFlagService
from tests.moduz_helpers import create_tenant


def _flags(db_session, tenant):
    db_session.expire_all()
    return {flag.module_key: flag for flag in db_session.query(ModuleFlag).filter(ModuleFlag.tenant_id == tenant.id)}


def test_list_self_heals_with_one_row_per_catalog_entry(db_session):
    tenant = create_tenant(db_session)
    assert db_session.query(ModuleFlag).filter(ModuleFlag.tenant_id == tenant.id).count() == 0

    result = ModuleFlagService(db_session).list(tenant.id)

    assert isinstance(result, Ok)
    assert [flag.module_key for flag in result.value] == sorted(modules.catalog_keys())
    enabled = {flag.module_key for flag in result.value if flag.enabled}
    assert enabled == {"core", "docs"}
    for flag in result.value:
        assert (flag.enabled_at is not None) == flag.enabled


def test_seed_is_idempotent_and_keeps_existing_state(db_session):
    tenant = create_tenant(db_session)
    service = ModuleFlagService(db_session)
    service.seed(tenant.id)
    assert isinstance(service.toggle(tenant.id, "docs", False), Ok)

    for _ in range(3):
        assert isinstance(service.seed(tenant.id), Ok)

    flags = _flags(db_session, tenant)
    assert len(flags) == len(modules.descriptors())
    assert flags["docs"].enabled is False


def test_concurrent_seeds_converge_without_duplicates(db_session, session_factory):
    tenant = create_tenant(db_session)

    def seed_once(_):
        db = session_factory()
        try:
            return ModuleFlagService(db).seed(tenant.id)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(seed_once, range(16)))

    assert all(isinstance(result, Ok) for result in results)
    assert db_session.query(ModuleFlag).filter(ModuleFlag.tenant_id == tenant.id).count() == len(modules.descriptors())


def test_mandatory_module_cannot_be_disabled(db_session):
    tenant = create_tenant(db_session)
    service = ModuleFlagService(db_session)
    service.seed(tenant.id)
    before = _flags(db_session, tenant)["core"].updated_at

    for _ in range(3):
        result = service.toggle(tenant.id, "core", False)
        assert isinstance(result, Err)
        assert result.error is ErrorCatalog.MANDATORY_MODULE_CANNOT_BE_DISABLED

    core = _flags(db_session, tenant)["core"]
    assert core.enabled is True
    assert core.updated_at == before


def test_enabling_unimplemented_module_fails_and_never_writes(db_session):
    tenant = create_tenant(db_session)
    service = ModuleFlagService(db_session)
    service.seed(tenant.id)
    before = _flags(db_session, tenant)["track"]
    before_updated_at = before.updated_at

    result = service.toggle(tenant.id, "track", True)

    assert isinstance(result, Err)
    assert result.error is ErrorCatalog.MODULE_NOT_IMPLEMENTED
    after = _flags(db_session, tenant)["track"]
    assert after.enabled is False
    assert after.enabled_at is None
    assert after.updated_at == before_updated_at


def test_unknown_module_is_rejected_before_seeding(db_session):
    tenant = create_tenant(db_session)

    result = ModuleFlagService(db_session).toggle(tenant.id, "payroll", True)

    assert isinstance(result, Err)
    assert result.error is ErrorCatalog.MODULE_UNKNOWN
    assert db_session.query(ModuleFlag).filter(ModuleFlag.tenant_id == tenant.id).count() == 0


def test_enabling_twice_keeps_first_enabled_at(db_session):
    tenant = create_tenant(db_session)
    service = ModuleFlagService(db_session)
    service.seed(tenant.id)
    assert isinstance(service.toggle(tenant.id, "docs", False), Ok)
    first_enabled_at = _flags(db_session, tenant)["docs"].enabled_at
    assert first_enabled_at is not None

    first = service.toggle(tenant.id, "docs", True)
    time.sleep(0.01)
    second = service.toggle(tenant.id, "docs", True)

    assert isinstance(first, Ok) and isinstance(second, Ok)
    assert first.value.flag.enabled is True
    assert second.value.flag.enabled is True
    assert second.value.previous_enabled is True
    docs = _flags(db_session, tenant)["docs"]
    assert docs.enabled_at == first_enabled_at
    assert docs.updated_at >= first.value.flag.updated_at


def test_disabling_never_clears_enabled_at(db_session):
    tenant = create_tenant(db_session)
    service = ModuleFlagService(db_session)
    service.seed(tenant.id)
    enabled_at = _flags(db_session, tenant)["docs"].enabled_at

    result = service.toggle(tenant.id, "docs", False)

    assert isinstance(result, Ok)
    assert result.value.previous_enabled is True
    docs = _flags(db_session, tenant)["docs"]
    assert docs.enabled is False
    assert docs.enabled_at == enabled_at


def test_disabling_a_disabled_unimplemented_module_is_allowed(db_session):
    tenant = create_tenant(db_session)

    result = ModuleFlagService(db_session).toggle(tenant.id, "stock", False)

    assert isinstance(result, Ok)
    assert result.value.flag.enabled is False
    assert result.value.flag.enabled_at is None


def test_concurrent_toggles_converge_to_one_row(db_session, session_factory):
    tenant = create_tenant(db_session)
    ModuleFlagService(db_session).seed(tenant.id)
    desired = [index % 2 == 0 for index in range(12)]

    def toggle(enabled):
        db = session_factory()
        try:
            return ModuleFlagService(db).toggle(tenant.id, "docs", enabled)
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(toggle, desired))

    assert all(isinstance(result, Ok) for result in results)
    rows = db_session.query(ModuleFlag).filter(ModuleFlag.tenant_id == tenant.id, ModuleFlag.module_key == "docs").all()
    assert len(rows) == 1
    assert rows[0].enabled in (True, False)
    assert rows[0].enabled_at is not None


def test_enabled_keys_reflects_toggles(db_session):
    tenant = create_tenant(db_session)
    service = ModuleFlagService(db_session)
    service.toggle(tenant.id, "docs", False)

    result = service.enabled_keys(tenant.id)

    assert isinstance(result, Ok)
    assert result.value == ["core"]
