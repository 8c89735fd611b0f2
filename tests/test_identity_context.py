from datetime import datetime, timedelta

from sqlalchemy.exc import OperationalError

from app.moduz.core.context import Principal
from app.moduz.core.error_catalog import ErrorCatalog
from app.moduz.core.result import Err, Ok
from app.moduz.repos.memberships import MembershipRepository
from app.moduz.services.identity import IdentityResolver
from tests.moduz_helpers import add_member, auth_headers, create_tenant


def test_memberships_are_ordered_by_creation_and_default_is_first(db_session):
    base = datetime(2026, 1, 1, 12, 0, 0)
    later = create_tenant(db_session, "Zulu Lda")
    earlier = create_tenant(db_session, "Alpha Lda")
    add_member(db_session, later, "ivan", role="admin", created_at=base + timedelta(days=1))
    add_member(db_session, earlier, "ivan", role="external", created_at=base)

    result = IdentityResolver(db_session).resolve_context(Principal(id="ivan"))

    assert isinstance(result, Ok)
    context = result.value
    assert [item.tenant_name for item in context.memberships] == ["Alpha Lda", "Zulu Lda"]
    assert context.default_tenant_id == earlier.id
    assert context.allows(later.id)


def test_inactive_memberships_are_excluded(db_session):
    tenant = create_tenant(db_session)
    add_member(db_session, tenant, "judy", is_active=False)

    result = IdentityResolver(db_session).resolve_context(Principal(id="judy"))

    assert isinstance(result, Ok)
    assert result.value.memberships == []
    assert result.value.default_tenant_id is None


def test_storage_failure_is_retryable_and_not_an_empty_list(db_session, monkeypatch):
    def boom(self, principal_id):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(MembershipRepository, "list_active_for_principal", boom)

    result = IdentityResolver(db_session).resolve_context(Principal(id="ken"))

    assert isinstance(result, Err)
    assert result.error is ErrorCatalog.STORAGE_UNAVAILABLE
    assert result.error.retryable is True


def test_context_endpoint(client, db_session):
    tenant = create_tenant(db_session, "Empresa Um")
    add_member(db_session, tenant, "leo", role="admin")

    response = client.get("/moduz/context", headers=auth_headers("leo", trace_id="trace-context-1"))

    assert response.status_code == 200
    body = response.json()
    assert body["principal"] == {"id": "leo", "email": "leo@example.com"}
    assert body["default_tenant_id"] == str(tenant.id)
    assert body["memberships"][0]["tenant_name"] == "Empresa Um"
    assert body["memberships"][0]["is_admin"] is True
    assert body["trace_id"] == "trace-context-1"


def test_context_endpoint_with_no_memberships(client):
    response = client.get("/moduz/context", headers=auth_headers("stranger"))

    assert response.status_code == 200
    assert response.json()["memberships"] == []
    assert response.json()["default_tenant_id"] is None


def test_context_endpoint_surfaces_storage_failure(client, monkeypatch):
    def boom(self, principal_id):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(MembershipRepository, "list_active_for_principal", boom)

    response = client.get("/moduz/context", headers=auth_headers("mia"))

    assert response.status_code == 503
    assert response.json()["code"] == "STORAGE_UNAVAILABLE"
