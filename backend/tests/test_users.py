from sqlalchemy import text

from wenlock.enums import AuditAction, Role


async def test_profile_returns_caller(client, auth, users):
    resp = await client.get("/api/users/profile", headers=auth[Role.OT_STAFF])
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == users[Role.OT_STAFF].id
    assert body["username"] == "ot_staff_user"
    assert "passwordHash" not in body


async def test_listing_is_admin_only(client, auth):
    resp = await client.get("/api/users", headers=auth[Role.ADMIN])
    assert resp.status_code == 200
    assert len(resp.json()) == 4

    assert (await client.get("/api/users", headers=auth[Role.OT_STAFF])).status_code == 403


async def test_get_unknown_user(client, auth):
    assert (await client.get("/api/users/9999", headers=auth[Role.ADMIN])).status_code == 404


async def test_role_change_is_audited(client, auth, users, audit_entries):
    target = users[Role.GENERAL_STAFF]
    resp = await client.put(f"/api/users/{target.id}", json={"role": "ot_staff"}, headers=auth[Role.ADMIN])
    assert resp.status_code == 200
    assert resp.json()["role"] == "ot_staff"
    assert resp.json()["email"] == "general_staff@wenlock-hospital.org"

    [entry] = await audit_entries(AuditAction.USER_UPDATE)
    assert "Role changed from 'general_staff' to 'ot_staff'" in entry.details
    assert entry.resource_id == str(target.id)


async def test_update_rejects_taken_email(client, auth, users):
    target = users[Role.GENERAL_STAFF]
    resp = await client.put(
        f"/api/users/{target.id}", json={"email": "admin@wenlock-hospital.org"}, headers=auth[Role.ADMIN]
    )
    assert resp.status_code == 409


async def test_password_change_allows_new_login(client, auth, users):
    target = users[Role.PHARMACY_STAFF]
    resp = await client.put(f"/api/users/{target.id}", json={"password": "brand-new-pw"}, headers=auth[Role.ADMIN])
    assert resp.status_code == 200

    resp = await client.post(
        "/api/auth/login", json={"email": "pharmacy_staff@wenlock-hospital.org", "password": "brand-new-pw"}
    )
    assert resp.status_code == 200


async def test_delete_keeps_identity_in_audit(client, auth, users, audit_entries):
    target = users[Role.OT_STAFF]
    resp = await client.delete(f"/api/users/{target.id}", headers=auth[Role.ADMIN])
    assert resp.status_code == 200
    assert (await client.get(f"/api/users/{target.id}", headers=auth[Role.ADMIN])).status_code == 404

    [entry] = await audit_entries(AuditAction.USER_DELETE)
    assert "ot_staff@wenlock-hospital.org" in entry.details
    assert entry.username == "admin_user"
    assert entry.resource_id == str(target.id)


async def test_roles_are_stored_by_value(session_factory, users):
    async with session_factory() as session:
        stored = set((await session.execute(text("SELECT role FROM users"))).scalars())
    assert stored == {"admin", "ot_staff", "pharmacy_staff", "general_staff"}
