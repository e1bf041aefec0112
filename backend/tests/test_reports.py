from datetime import datetime, timedelta, timezone

from wenlock.enums import AlertType, AuditAction, ResourceType, Role
from wenlock.models import Alert


def booking(department):
    return {"department": department, "type": "OT", "scheduledTime": "2030-03-10T10:00:00Z"}


async def test_schedules_summary(client, auth, audit_entries):
    for department in ["Surgery", "Cardiology", "Surgery"]:
        await client.post("/api/schedules", json=booking(department), headers=auth[Role.ADMIN])
    first = (await client.get("/api/schedules", params={"department": "Surgery"}, headers=auth[Role.ADMIN])).json()[0]
    await client.put(f"/api/schedules/{first['id']}", json={"status": "Completed"}, headers=auth[Role.ADMIN])

    params = {"startDate": "2030-01-01T00:00:00Z", "endDate": "2030-12-31T00:00:00Z"}
    resp = await client.get("/api/reports/schedules-summary", params=params, headers=auth[Role.GENERAL_STAFF])
    assert resp.status_code == 200
    assert resp.json() == [
        {"department": "Cardiology", "totalSchedules": 1, "scheduled": 1, "inProgress": 0, "completed": 0, "cancelled": 0},
        {"department": "Surgery", "totalSchedules": 2, "scheduled": 1, "inProgress": 0, "completed": 1, "cancelled": 0},
    ]

    [entry] = await audit_entries(AuditAction.REPORT_ACCESS)
    assert entry.resource_type == ResourceType.REPORT
    assert entry.details.startswith("Accessed Schedule Summary Report (Range: 2030-01-01")


async def test_schedules_outside_range_are_excluded(client, auth):
    await client.post("/api/schedules", json=booking("Surgery"), headers=auth[Role.ADMIN])
    params = {"startDate": "2031-01-01T00:00:00Z"}
    resp = await client.get("/api/reports/schedules-summary", params=params, headers=auth[Role.OT_STAFF])
    assert resp.json() == []


async def test_inventory_overview(client, auth):
    for name, stock, threshold in [("Morphine", 2, 5), ("Atropine", 40, 10)]:
        await client.post(
            "/api/inventory",
            json={"drugName": name, "currentStock": stock, "reorderThreshold": threshold},
            headers=auth[Role.ADMIN],
        )
    resp = await client.get("/api/reports/inventory-overview", headers=auth[Role.PHARMACY_STAFF])
    assert resp.status_code == 200
    assert [(r["drugName"], r["isLowStock"]) for r in resp.json()] == [("Atropine", False), ("Morphine", True)]


async def test_alert_metrics(client, auth, session_factory):
    start = datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)
    async with session_factory() as session:
        session.add_all([
            Alert(type=AlertType.CODE_RED, message="a", active=False, triggered_at=start,
                  deactivated_at=start + timedelta(minutes=10)),
            Alert(type=AlertType.CODE_RED, message="b", active=False, triggered_at=start + timedelta(hours=1),
                  deactivated_at=start + timedelta(hours=1, minutes=30)),
            Alert(type=AlertType.CODE_BLUE, message="c", active=True, triggered_at=start + timedelta(hours=2)),
        ])
        await session.commit()

    resp = await client.get("/api/reports/alert-metrics", headers=auth[Role.GENERAL_STAFF])
    assert resp.status_code == 200
    blue, red = resp.json()
    assert blue["alertType"] == "Code Blue"
    assert blue["activeNow"] == 1
    assert blue["avgDurationMinutes"] is None
    assert red["alertType"] == "Code Red"
    assert red["totalTriggers"] == 2
    assert red["activeNow"] == 0
    assert red["avgDurationMinutes"] == 20.0
    assert red["latestTrigger"].startswith("2026-01-05T09:00:00")


async def test_audit_summary_counts_distinct_users(client, auth, services, users):
    admin, staff = users[Role.ADMIN], users[Role.OT_STAFF]
    for actor in (admin, staff, staff):
        await services.audit.record(actor.id, actor.username, AuditAction.TOKEN_ADVANCE, "advance")

    resp = await client.get("/api/reports/audit-summary", headers=auth[Role.ADMIN])
    assert resp.status_code == 200
    assert resp.json() == [{"actionType": "token_advance", "totalActions": 3, "uniqueUsers": 2}]


async def test_report_permissions(client, auth):
    assert (await client.get("/api/reports/schedules-summary", headers=auth[Role.PHARMACY_STAFF])).status_code == 403
    assert (await client.get("/api/reports/inventory-overview", headers=auth[Role.OT_STAFF])).status_code == 403
    assert (await client.get("/api/reports/alert-metrics", headers=auth[Role.PHARMACY_STAFF])).status_code == 403
    assert (await client.get("/api/reports/audit-summary", headers=auth[Role.GENERAL_STAFF])).status_code == 403


def test_read_only_services_have_no_broadcaster(services):
    for service in (services.users, services.reports, services.integrations):
        assert not hasattr(service, "broadcaster")
    assert services.tokens.broadcaster is services.alerts.broadcaster
