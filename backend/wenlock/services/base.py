from typing import Any, Optional

from wenlock.enums import AuditAction, ResourceType
from wenlock.models.user import User
from wenlock.services.audit_service import AuditTrail, RequestMeta
from wenlock.services.realtime import Broadcaster


class AuditedService:
    """Services whose actions are recorded in the audit trail."""

    def __init__(self, audit: AuditTrail):
        self.audit = audit

    async def _audit(
        self,
        actor: Optional[User],
        action_type: AuditAction,
        details: str,
        resource_id: Optional[object] = None,
        resource_type: Optional[ResourceType] = None,
        meta: Optional[RequestMeta] = None,
        actor_name: Optional[str] = None,
    ) -> None:
        # Audit failures are already logged by the trail; the primary operation stands.
        _written = await self.audit.record(
            actor.id if actor else None,
            actor_name or (actor.username if actor else "System"),
            action_type,
            details,
            resource_id=resource_id,
            resource_type=resource_type,
            meta=meta,
        )


class LedgerService(AuditedService):
    """Shared plumbing for services that mutate shared state: audit then publish."""

    def __init__(self, audit: AuditTrail, broadcaster: Broadcaster):
        super().__init__(audit)
        self.broadcaster = broadcaster

    async def _publish(self, event: str, payload: dict[str, Any]) -> None:
        await self.broadcaster.publish(event, payload)
