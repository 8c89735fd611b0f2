from app.moduz.db.models import AuditEvent
from tests.moduz_helpers import add_member, auth_headers, create_tenant, modules_by_key, setup_tenant_with_admin


def test_catalog_lists_every_module_with_one_mandatory(client):
    response = client.get("/moduz/modules/catalog", headers=auth_headers("anyone"))

    assert response.status_code == 200
    body = response.json()
    keys = [item["key"] for item in body["modules"]]
    assert keys[0] == "core"
    assert set(keys) == {"core", "docs", "people", "track", "finance", "bizz", "stock", "assets", "flow"}
    assert body["mandatory_module"] == "core"
    assert [item["key"] for item in body["modules"] if item["mandatory"]] == ["core"]


def test_admin_disables_and_reenables_docs(client, db_session):
    tenant = setup_tenant_with_admin(db_session)
    admin = auth_headers("admin-1", tenant, trace_id="trace-toggle-1")
    member = auth_headers("member-1", tenant)

    listing = client.get("/moduz/modules", headers=member)
    assert listing.status_code == 200
    flags = modules_by_key(listing.json())
    assert flags["core"]["enabled"] is True
    assert flags["docs"]["enabled"] is True
    assert flags["people"]["enabled"] is False
    assert flags["people"]["implemented"] is True
    original_enabled_at = flags["docs"]["enabled_at"]

    disabled = client.post("/moduz/modules/toggle", headers=admin, json={"module_key": "docs", "enabled": False})
    assert disabled.status_code == 200
    body = disabled.json()
    assert body["module"]["module_key"] == "docs"
    assert body["module"]["enabled"] is False
    assert body["module"]["enabled_at"] == original_enabled_at
    assert body["audit_recorded"] is True
    assert body["audit_error"] is None
    assert body["trace_id"] == "trace-toggle-1"

    assert modules_by_key(client.get("/moduz/modules", headers=member).json())["docs"]["enabled"] is False

    enabled = client.post("/moduz/modules/toggle", headers=admin, json={"module_key": "docs", "enabled": True})
    assert enabled.status_code == 200
    assert enabled.json()["module"]["enabled"] is True
    assert enabled.json()["module"]["enabled_at"] == original_enabled_at

    events = (
        db_session.query(AuditEvent)
        .filter(AuditEvent.tenant_id == tenant.id, AuditEvent.action == "MODULE_TOGGLED")
        .order_by(AuditEvent.created_at)
        .all()
    )
    assert len(events) == 2
    first = events[0]
    assert first.actor_principal_id == "admin-1"
    assert first.entity_type == "module_flag"
    assert first.entity_id == "docs"
    assert first.trace_id == "trace-toggle-1"
    assert first.payload == {"module_key": "docs", "enabled": False, "previous_enabled": True}
    assert events[1].payload["previous_enabled"] is False


def test_member_cannot_toggle(client, db_session):
    tenant = setup_tenant_with_admin(db_session)

    response = client.post(
        "/moduz/modules/toggle",
        headers=auth_headers("member-1", tenant),
        json={"module_key": "docs", "enabled": False},
    )

    assert response.status_code == 403
    assert response.json()["code"] == "NOT_ADMIN"
    assert modules_by_key(client.get("/moduz/modules", headers=auth_headers("member-1", tenant)).json())["docs"][
        "enabled"
    ] is True
    assert db_session.query(AuditEvent).filter(AuditEvent.tenant_id == tenant.id).count() == 0


def test_toggle_guardrail_errors(client, db_session):
    tenant = setup_tenant_with_admin(db_session)
    admin = auth_headers("admin-1", tenant)

    cases = [
        ({"module_key": "core", "enabled": False}, 409, "MANDATORY_MODULE_CANNOT_BE_DISABLED"),
        ({"module_key": "track", "enabled": True}, 409, "MODULE_NOT_IMPLEMENTED"),
        ({"module_key": "payroll", "enabled": True}, 404, "MODULE_UNKNOWN"),
    ]
    for payload, status_code, code in cases:
        response = client.post("/moduz/modules/toggle", headers=admin, json=payload)
        assert response.status_code == status_code
        body = response.json()
        assert body["code"] == code
        assert body["trace_id"]

    assert db_session.query(AuditEvent).filter(AuditEvent.tenant_id == tenant.id).count() == 0


def test_toggle_requires_a_boolean(client, db_session):
    tenant = setup_tenant_with_admin(db_session)

    response = client.post(
        "/moduz/modules/toggle",
        headers=auth_headers("admin-1", tenant),
        json={"module_key": "docs"},
    )

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_tenants_are_isolated(client, db_session):
    first = setup_tenant_with_admin(db_session, admin="admin-a", member=None)
    second = create_tenant(db_session)
    add_member(db_session, second, "admin-b", role="admin")

    client.post(
        "/moduz/modules/toggle",
        headers=auth_headers("admin-a", first),
        json={"module_key": "docs", "enabled": False},
    )

    assert modules_by_key(client.get("/moduz/modules", headers=auth_headers("admin-b", second)).json())["docs"][
        "enabled"
    ] is True
    denied = client.get("/moduz/modules", headers=auth_headers("admin-a", second))
    assert denied.status_code == 403
    assert denied.json()["code"] == "NO_MEMBERSHIP"


def test_module_lifecycle_for_a_fresh_tenant(client, db_session):
    tenant = setup_tenant_with_admin(db_session)
    admin = auth_headers("admin-1", tenant)
    member = auth_headers("member-1", tenant)

    seeded = modules_by_key(client.get("/moduz/modules", headers=admin).json())
    assert seeded["core"]["enabled"] is True
    assert seeded["docs"]["enabled"] is True
    assert seeded["people"]["enabled"] is False
    assert seeded["people"]["enabled_at"] is None

    enabled = client.post("/moduz/modules/toggle", headers=admin, json={"module_key": "people", "enabled": True})
    assert enabled.status_code == 200
    assert enabled.json()["module"]["enabled"] is True
    assert enabled.json()["module"]["enabled_at"] is not None
    people = modules_by_key(client.get("/moduz/modules", headers=member).json())["people"]
    assert people["enabled"] is True
    assert people["enabled_at"] == enabled.json()["module"]["enabled_at"]

    denied = client.post("/moduz/modules/toggle", headers=member, json={"module_key": "people", "enabled": False})
    assert denied.status_code == 403
    assert denied.json()["code"] == "NOT_ADMIN"
    assert modules_by_key(client.get("/moduz/modules", headers=admin).json())["people"] == people

    mandatory = client.post("/moduz/modules/toggle", headers=admin, json={"module_key": "core", "enabled": False})
    assert mandatory.status_code == 409
    assert mandatory.json()["code"] == "MANDATORY_MODULE_CANNOT_BE_DISABLED"
    final = modules_by_key(client.get("/moduz/modules", headers=admin).json())
    assert final["core"]["enabled"] is True
    assert final["people"] == people

    events = db_session.query(AuditEvent).filter(AuditEvent.tenant_id == tenant.id).all()
    assert [(event.action, event.entity_id, event.actor_principal_id) for event in events] == [
        ("MODULE_TOGGLED", "people", "admin-1")
    ]
