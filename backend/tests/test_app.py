import pytest
from conftest import RecordingBroadcaster
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import NullPool
from starlette.testclient import TestClient

from wenlock.database import make_engine, make_session_factory
from wenlock.enums import Role
from wenlock.exceptions import TransientInfraError
from wenlock.main import create_app
from wenlock.services.realtime import ConnectionManager


class FakeSocket:
    def __init__(self, broken=False):
        self.broken = broken
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


async def test_responses_are_not_cached(client, auth):
    resp = await client.get("/api/meta/roles", headers=auth[Role.ADMIN])
    assert "no-store" in resp.headers["cache-control"]
    assert resp.headers["pragma"] == "no-cache"


async def test_validation_errors_use_message_envelope(client, auth):
    resp = await client.post("/api/inventory", json={"drugName": "X"}, headers=auth[Role.ADMIN])
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation error"
    assert {e["field"] for e in body["error"]} == {"currentStock", "reorderThreshold"}


async def test_unknown_route_uses_message_envelope(client):
    resp = await client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Not Found"}


async def test_connection_manager_fans_out_and_drops_dead_sockets():
    manager = ConnectionManager()
    alive, dead = FakeSocket(), FakeSocket(broken=True)
    await manager.connect(alive)
    await manager.connect(dead)
    assert alive.accepted and dead.accepted

    await manager.publish("tokenUpdate", {"action": "advance"})
    assert alive.sent == [{"event": "tokenUpdate", "data": {"action": "advance"}}]
    assert manager.connections == {alive}

    manager.disconnect(alive)
    await manager.publish("tokenUpdate", {"action": "reset"})
    assert len(alive.sent) == 1


def test_subscriber_is_dropped_after_binary_frame_and_close():
    manager = ConnectionManager()
    client = TestClient(create_app(broadcaster=manager))
    with client.websocket_connect("/ws") as ws:
        ws.send_bytes(b"\x00")
        ws.send_text("ping")
    assert manager.connections == set()


@pytest.mark.parametrize("url", [
    "/api/schedules/99999999999999999999",
    "/api/inventory/2147483648",
    "/api/users/0",
    "/api/auditlogs/-1",
])
async def test_out_of_range_ids_are_rejected_as_validation_errors(client, auth, url):
    resp = await client.get(url, headers=auth[Role.ADMIN])
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation error"


async def test_out_of_range_ids_on_writes(client, auth):
    huge = 2**63
    resp = await client.put(f"/api/alerts/{huge}/deactivate", headers=auth[Role.ADMIN])
    assert resp.status_code == 400
    resp = await client.delete(f"/api/schedules/{huge}", headers=auth[Role.ADMIN])
    assert resp.status_code == 400
    resp = await client.get("/api/auditlogs", params={"userId": huge}, headers=auth[Role.ADMIN])
    assert resp.status_code == 400


async def test_largest_storable_id_is_a_plain_not_found(client, auth):
    resp = await client.get("/api/schedules/2147483647", headers=auth[Role.ADMIN])
    assert resp.status_code == 404


async def test_unreachable_database_is_reported_as_transient(tmp_path, auth):
    missing = (tmp_path / "missing" / "wenlock.db").as_posix()
    engine = make_engine(f"sqlite+aiosqlite:///{missing}", poolclass=NullPool)
    app = create_app(session_factory=make_session_factory(engine), broadcaster=RecordingBroadcaster())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/api/users/profile", headers=auth[Role.ADMIN])
    await engine.dispose()

    assert resp.status_code == TransientInfraError.status_code
    assert resp.json() == {"message": "Service temporarily unavailable", "error": "OperationalError"}
