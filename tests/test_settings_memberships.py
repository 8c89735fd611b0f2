from app.moduz.db.models import AuditEvent, Membership
from tests.moduz_helpers import add_member, auth_headers, setup_tenant_with_admin


def test_settings_default_on_first_read(client, db_session):
    tenant = setup_tenant_with_admin(db_session)

    response = client.get("/moduz/settings", headers=auth_headers("member-1", tenant))

    assert response.status_code == 200
    settings = response.json()["settings"]
    assert settings["tenant_id"] == str(tenant.id)
    assert settings["timezone"] == "Europe/Lisbon"
    assert settings["currency"] == "EUR"
    assert settings["extras"] == {}


def test_admin_updates_settings_and_it_is_audited(client, db_session):
    tenant = setup_tenant_with_admin(db_session)
    headers = auth_headers("admin-1", tenant)

    response = client.patch("/moduz/settings", headers=headers, json={"currency": "AOA"})

    assert response.status_code == 200
    assert response.json()["settings"]["currency"] == "AOA"
    assert response.json()["audit_recorded"] is True
    event = db_session.query(AuditEvent).filter(AuditEvent.action == "SETTINGS_UPDATED").one()
    assert event.payload["before"]["currency"] == "EUR"
    assert event.payload["after"]["currency"] == "AOA"

    unchanged = client.patch("/moduz/settings", headers=headers, json={"currency": "AOA"})
    assert unchanged.status_code == 400
    assert unchanged.json()["code"] == "NO_CHANGES"


def test_member_cannot_update_settings(client, db_session):
    tenant = setup_tenant_with_admin(db_session)

    response = client.patch("/moduz/settings", headers=auth_headers("member-1", tenant), json={"locale": "en-GB"})

    assert response.status_code == 403
    assert response.json()["code"] == "NOT_ADMIN"


def test_admin_manages_memberships(client, db_session):
    tenant = setup_tenant_with_admin(db_session)
    headers = auth_headers("admin-1", tenant)

    created = client.post(
        "/moduz/memberships",
        headers=headers,
        json={"principal_id": "new-user", "role": "external", "email": "new@example.com"},
    )
    assert created.status_code == 201
    membership = created.json()["membership"]
    assert membership["role"] == "external"
    assert created.json()["audit_recorded"] is True

    duplicate = client.post("/moduz/memberships", headers=headers, json={"principal_id": "new-user"})
    assert duplicate.status_code == 409
    assert duplicate.json()["code"] == "MEMBERSHIP_EXISTS"

    promoted = client.patch(f"/moduz/memberships/{membership['id']}", headers=headers, json={"role": "admin"})
    assert promoted.status_code == 200
    assert promoted.json()["membership"]["role"] == "admin"

    listing = client.get("/moduz/memberships", headers=auth_headers("new-user", tenant))
    assert listing.status_code == 200
    assert {item["principal_id"] for item in listing.json()["memberships"]} == {"admin-1", "member-1", "new-user"}

    actions = [event.action for event in db_session.query(AuditEvent).filter(AuditEvent.tenant_id == tenant.id)]
    assert sorted(actions) == ["MEMBERSHIP_CREATED", "MEMBERSHIP_UPDATED"]


def test_deactivated_membership_loses_access(client, db_session):
    tenant = setup_tenant_with_admin(db_session)
    member = db_session.query(Membership).filter(Membership.principal_id == "member-1").one()

    response = client.patch(
        f"/moduz/memberships/{member.id}",
        headers=auth_headers("admin-1", tenant),
        json={"is_active": False},
    )

    assert response.status_code == 200
    assert response.json()["membership"]["is_active"] is False
    denied = client.get("/moduz/modules", headers=auth_headers("member-1", tenant))
    assert denied.status_code == 403
    assert denied.json()["code"] == "NO_MEMBERSHIP"


def test_patch_unknown_membership(client, db_session):
    tenant = setup_tenant_with_admin(db_session)

    response = client.patch(
        "/moduz/memberships/6c1f7f58-5b8f-4e0b-a8a2-8d7f2b1c9a10",
        headers=auth_headers("admin-1", tenant),
        json={"role": "internal"},
    )

    assert response.status_code == 404
    assert response.json()["code"] == "MEMBERSHIP_NOT_FOUND"


def test_last_active_admin_cannot_demote_or_deactivate_themselves(client, db_session):
    tenant = setup_tenant_with_admin(db_session)
    headers = auth_headers("admin-1", tenant)
    admin = db_session.query(Membership).filter(Membership.principal_id == "admin-1").one()

    for payload in ({"role": "internal"}, {"is_active": False}):
        response = client.patch(f"/moduz/memberships/{admin.id}", headers=headers, json=payload)
        assert response.status_code == 409
        assert response.json()["code"] == "LAST_ADMIN_REQUIRED"
        assert response.json()["details"] == {"membership_id": str(admin.id)}

    db_session.expire_all()
    admin = db_session.query(Membership).filter(Membership.principal_id == "admin-1").one()
    assert admin.role == "admin"
    assert admin.is_active is True
    assert db_session.query(AuditEvent).filter(AuditEvent.tenant_id == tenant.id).count() == 0

    add_member(db_session, tenant, "admin-2", role="admin")
    demoted = client.patch(f"/moduz/memberships/{admin.id}", headers=headers, json={"role": "internal"})
    assert demoted.status_code == 200
    assert demoted.json()["membership"]["role"] == "internal"
