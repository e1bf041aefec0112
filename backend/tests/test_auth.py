from conftest import PASSWORD

from wenlock.auth import create_token, decode_token, hash_password, verify_password
from wenlock.enums import AuditAction, Role


def test_password_hashing():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_token_payload(users):
    payload = decode_token(create_token(users[Role.OT_STAFF]))
    assert payload["id"] == users[Role.OT_STAFF].id
    assert payload["role"] == "ot_staff"
    assert "exp" in payload


async def test_login_sets_http_only_cookie(client, users, audit_entries):
    resp = await client.post("/api/auth/login", json={"email": "admin@wenlock-hospital.org", "password": PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["username"] == "admin_user"
    assert "passwordHash" not in body["user"]
    assert resp.cookies.get("token") == body["accessToken"]

    set_cookie = resp.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie

    [entry] = await audit_entries(AuditAction.USER_LOGIN)
    assert entry.user_id == users[Role.ADMIN].id
    assert entry.details.startswith("User logged in")
    assert entry.ip_address == "127.0.0.1"


async def test_login_email_is_case_insensitive(client, users):
    resp = await client.post("/api/auth/login", json={"email": "Admin@Wenlock-Hospital.org", "password": PASSWORD})
    assert resp.status_code == 200


async def test_failed_logins_are_audited(client, users, audit_entries):
    resp = await client.post("/api/auth/login", json={"email": "admin@wenlock-hospital.org", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"

    resp = await client.post("/api/auth/login", json={"email": "ghost@wenlock-hospital.org", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"

    wrong_password, unknown_email = await audit_entries(AuditAction.USER_LOGIN)
    assert wrong_password.user_id == users[Role.ADMIN].id
    assert "incorrect password" in wrong_password.details
    assert unknown_email.user_id is None
    assert unknown_email.username == "ghost@wenlock-hospital.org"
    assert "Failed login attempt" in unknown_email.details


async def test_cookie_credential_is_accepted(client, users):
    token = create_token(users[Role.PHARMACY_STAFF])
    resp = await client.get("/api/users/profile", headers={"Cookie": f"token={token}"})
    assert resp.status_code == 200
    assert resp.json()["role"] == "pharmacy_staff"


async def test_cookie_takes_precedence_over_bearer(client, users, auth):
    token = create_token(users[Role.ADMIN])
    headers = {"Cookie": f"token={token}", **auth[Role.GENERAL_STAFF]}
    resp = await client.get("/api/users/profile", headers=headers)
    assert resp.json()["role"] == "admin"


async def test_missing_credential(client):
    resp = await client.get("/api/users/profile")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Not authorized, no token"


async def test_bad_credentials_are_rejected_before_any_side_effect(client, users, broadcaster, audit_entries):
    expired = create_token(users[Role.ADMIN], expires_in=-10)
    for token in [expired, "not-a-jwt", create_token(users[Role.ADMIN]) + "tampered"]:
        resp = await client.put("/api/tokens/OPD/advance", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Not authorized, token failed"

    assert broadcaster.events == []
    assert await audit_entries() == []


async def test_token_of_deleted_user_is_rejected(client, users, auth):
    victim = users[Role.GENERAL_STAFF]
    resp = await client.delete(f"/api/users/{victim.id}", headers=auth[Role.ADMIN])
    assert resp.status_code == 200

    resp = await client.get("/api/users/profile", headers=auth[Role.GENERAL_STAFF])
    assert resp.status_code == 401


async def test_logout_clears_cookie(client):
    resp = await client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out successfully"}
    set_cookie = resp.headers["set-cookie"]
    assert set_cookie.startswith("token=")
    assert "Max-Age=0" in set_cookie


async def test_register_is_admin_only(client, auth, users, audit_entries):
    new_user = {"username": "nurse.kay", "email": "Kay@wenlock-hospital.org", "password": "abcdef"}

    resp = await client.post("/api/auth/register", json=new_user, headers=auth[Role.GENERAL_STAFF])
    assert resp.status_code == 403

    resp = await client.post("/api/auth/register", json=new_user, headers=auth[Role.ADMIN])
    assert resp.status_code == 201
    body = resp.json()
    assert body["role"] == "general_staff"
    assert body["email"] == "kay@wenlock-hospital.org"
    assert "passwordHash" not in body

    [entry] = await audit_entries(AuditAction.USER_REGISTER)
    assert entry.user_id == users[Role.ADMIN].id
    assert "nurse.kay" in entry.details

    resp = await client.post("/api/auth/login", json={"email": "kay@wenlock-hospital.org", "password": "abcdef"})
    assert resp.status_code == 200


async def test_register_rejects_duplicates_and_weak_passwords(client, auth):
    resp = await client.post(
        "/api/auth/register",
        json={"username": "someone", "email": "admin@wenlock-hospital.org", "password": "abcdef"},
        headers=auth[Role.ADMIN],
    )
    assert resp.status_code == 409

    resp = await client.post(
        "/api/auth/register",
        json={"username": "admin_user", "email": "fresh@wenlock-hospital.org", "password": "abcdef"},
        headers=auth[Role.ADMIN],
    )
    assert resp.status_code == 409

    resp = await client.post(
        "/api/auth/register",
        json={"username": "shorty", "email": "shorty@wenlock-hospital.org", "password": "abc"},
        headers=auth[Role.ADMIN],
    )
    assert resp.status_code == 400

    resp = await client.post(
        "/api/auth/register",
        json={"username": "badrole", "email": "badrole@wenlock-hospital.org", "password": "abcdef", "role": "janitor"},
        headers=auth[Role.ADMIN],
    )
    assert resp.status_code == 400


async def test_seed_admin_is_created_once(services, session_factory):
    async with session_factory() as session:
        first = await services.users.ensure_seed_admin(session, "root", "root@wenlock-hospital.org", "bootstrap-pw")
        second = await services.users.ensure_seed_admin(session, "root", "root@wenlock-hospital.org", "bootstrap-pw")
        skipped = await services.users.ensure_seed_admin(session, "other", "other@wenlock-hospital.org", "")
    assert first is not None and first.role == Role.ADMIN
    assert second is None
    assert skipped is None


async def test_roles_listing(client, auth):
    resp = await client.get("/api/meta/roles", headers=auth[Role.GENERAL_STAFF])
    assert resp.json() == {"roles": ["admin", "ot_staff", "pharmacy_staff", "general_staff"]}
