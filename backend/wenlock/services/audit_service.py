import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wenlock.enums import AuditAction, ResourceType
from wenlock.exceptions import NotFoundError
from wenlock.models.audit_log import AuditLog
from wenlock.models._time import as_utc

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 500


@dataclass(frozen=True)
class RequestMeta:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request: Request) -> "RequestMeta":
        return cls(
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )


class AuditTrail:
    """
    Append-only audit log.

    Entries are written through their own session so a failed audit write can
    never roll back the operation it documents. record() reports failure by
    returning False after logging it; it does not raise.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(
        self,
        actor_id: Optional[int],
        actor_name: str,
        action_type: AuditAction,
        details: str,
        resource_id: Optional[object] = None,
        resource_type: Optional[ResourceType] = None,
        meta: Optional[RequestMeta] = None,
    ) -> bool:
        if not isinstance(action_type, AuditAction):
            raise TypeError(f"Unknown audit action: {action_type!r}")
        meta = meta or RequestMeta()
        entry = AuditLog(
            user_id=actor_id,
            username=actor_name,
            action_type=action_type,
            details=details,
            resource_id=str(resource_id) if resource_id is not None else None,
            resource_type=resource_type,
            ip_address=meta.ip_address,
            user_agent=(meta.user_agent or "")[:500] or None,
        )
        try:
            async with self.session_factory() as session:
                session.add(entry)
                await session.commit()
        except Exception:
            logger.exception("Failed to write audit entry %s for %s", action_type.value, actor_name)
            return False
        return True

    async def query(
        self,
        db: AsyncSession,
        user_id: Optional[int] = None,
        action_type: Optional[AuditAction] = None,
        resource_type: Optional[ResourceType] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[AuditLog]:
        """Newest first; limit is clamped to MAX_PAGE_SIZE."""
        query = select(AuditLog)
        if user_id is not None:
            query = query.where(AuditLog.user_id == user_id)
        if action_type:
            query = query.where(AuditLog.action_type == action_type)
        if resource_type:
            query = query.where(AuditLog.resource_type == resource_type)
        start, end = as_utc(start), as_utc(end)
        if start:
            query = query.where(AuditLog.created_at >= start)
        if end:
            query = query.where(AuditLog.created_at <= end)

        limit = max(1, min(limit, MAX_PAGE_SIZE))
        query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, log_id: int) -> AuditLog:
        log = await db.get(AuditLog, log_id)
        if not log:
            raise NotFoundError("Audit log not found")
        return log
