from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wenlock.services.alert_service import AlertBroadcaster
from wenlock.services.audit_service import AuditTrail
from wenlock.services.integration_service import MockIntegrationService
from wenlock.services.inventory_service import InventoryLedger
from wenlock.services.realtime import Broadcaster
from wenlock.services.report_service import ReportService
from wenlock.services.schedule_service import ScheduleLedger
from wenlock.services.sequence_service import SequenceCounter
from wenlock.services.token_service import TokenQueueService
from wenlock.services.user_service import UserService


@dataclass
class Services:
    audit: AuditTrail
    users: UserService
    schedules: ScheduleLedger
    tokens: TokenQueueService
    inventory: InventoryLedger
    alerts: AlertBroadcaster
    reports: ReportService
    integrations: MockIntegrationService


def build_services(session_factory: async_sessionmaker[AsyncSession], broadcaster: Broadcaster) -> Services:
    audit = AuditTrail(session_factory)
    return Services(
        audit=audit,
        users=UserService(audit),
        schedules=ScheduleLedger(audit, broadcaster, SequenceCounter()),
        tokens=TokenQueueService(audit, broadcaster),
        inventory=InventoryLedger(audit, broadcaster),
        alerts=AlertBroadcaster(audit, broadcaster),
        reports=ReportService(audit),
        integrations=MockIntegrationService(audit),
    )


def get_services(request: Request) -> Services:
    """FastAPI dependency: the service bundle built by create_app()."""
    return request.app.state.services
