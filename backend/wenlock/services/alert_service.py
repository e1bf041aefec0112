from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.enums import AlertType, AuditAction, ResourceType
from wenlock.exceptions import ConflictError, NotFoundError, ValidationError
from wenlock.models._time import utcnow
from wenlock.models.alert import Alert
from wenlock.models.user import User
from wenlock.schemas.alert import AlertResponse
from wenlock.services.audit_service import RequestMeta
from wenlock.services.base import LedgerService
from wenlock.services.realtime import EMERGENCY_ALERT


class AlertBroadcaster(LedgerService):
    """Emergency alerts (Code Blue, Code Red, Emergency) pushed to every client."""

    async def list_active(self, db: AsyncSession) -> list[Alert]:
        return await self._list(db, select(Alert).where(Alert.active.is_(True)))

    async def list_all(self, db: AsyncSession) -> list[Alert]:
        return await self._list(db, select(Alert))

    async def trigger(
        self, db: AsyncSession, alert_type: AlertType, message: str, actor: User, meta: RequestMeta = None
    ) -> Alert:
        message = (message or "").strip()
        if not alert_type or not message:
            raise ValidationError("Please provide alert type and message")

        alert = Alert(type=alert_type, message=message, active=True, triggered_by=actor.id, triggered_at=utcnow())
        db.add(alert)
        await db.commit()
        await db.refresh(alert)

        await self._audit(
            actor, AuditAction.ALERT_TRIGGER,
            f"Triggered new alert: '{alert.type.value}' with message: '{alert.message}'",
            resource_id=alert.id, resource_type=ResourceType.ALERT, meta=meta,
        )
        await self._publish(EMERGENCY_ALERT, {"action": "trigger", "alert": self._dump(alert)})
        return alert

    async def deactivate(self, db: AsyncSession, alert_id: int, actor: User, meta: RequestMeta = None) -> Alert:
        # Conditional update: of two concurrent deactivations exactly one succeeds.
        result = await db.scalars(
            update(Alert)
            .where(Alert.id == alert_id, Alert.active.is_(True))
            .values(active=False, deactivated_at=utcnow())
            .returning(Alert),
            execution_options={"populate_existing": True},
        )
        alert = result.one_or_none()
        if alert is None:
            await db.rollback()
            if await db.get(Alert, alert_id) is None:
                raise NotFoundError("Alert not found")
            raise ConflictError("Alert is already inactive")
        await db.commit()

        await self._audit(
            actor, AuditAction.ALERT_DEACTIVATE,
            f"Deactivated alert: '{alert.type.value}' (ID: {alert.id}) with message: '{alert.message}'",
            resource_id=alert.id, resource_type=ResourceType.ALERT, meta=meta,
        )
        await self._publish(EMERGENCY_ALERT, {"action": "deactivate", "alertId": alert.id, "alert": self._dump(alert)})
        return alert

    @staticmethod
    async def _list(db: AsyncSession, query) -> list[Alert]:
        result = await db.execute(query.order_by(Alert.triggered_at.desc(), Alert.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    def _dump(alert: Alert) -> dict:
        return AlertResponse.model_validate(alert).model_dump(mode="json", by_alias=True)
