from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.database import upsert
from wenlock.enums import AuditAction, ResourceType
from wenlock.exceptions import ValidationError
from wenlock.models._time import utcnow
from wenlock.models.token import QueueToken
from wenlock.models.user import User
from wenlock.schemas.token import TokenResponse
from wenlock.services.audit_service import RequestMeta
from wenlock.services.base import LedgerService
from wenlock.services.realtime import TOKEN_UPDATE


def _department(value: str) -> str:
    department = (value or "").strip()
    if not department:
        raise ValidationError("Department is required")
    return department


class TokenQueueService(LedgerService):
    """Per-department "now serving" counter shown on the queue displays."""

    async def get_current(self, db: AsyncSession, department: str) -> QueueToken:
        department = _department(department)
        token = await db.scalar(select(QueueToken).where(QueueToken.department == department))
        if token is None:
            # Create-if-absent; a concurrent creator wins harmlessly. No broadcast.
            await db.execute(
                upsert(db, QueueToken)
                .values(department=department, current_token=0)
                .on_conflict_do_nothing(index_elements=[QueueToken.department])
            )
            await db.commit()
            token = await db.scalar(select(QueueToken).where(QueueToken.department == department))
        return token

    async def advance(self, db: AsyncSession, department: str, actor: User, meta: RequestMeta = None) -> QueueToken:
        department = _department(department)
        now = utcnow()
        stmt = (
            upsert(db, QueueToken)
            .values(department=department, current_token=1)
            .on_conflict_do_update(
                index_elements=[QueueToken.department],
                set_={"current_token": QueueToken.current_token + 1, "updated_at": now},
            )
            .returning(QueueToken)
        )
        token = await self._apply(db, stmt)

        await self._audit(
            actor, AuditAction.TOKEN_ADVANCE,
            f"Advanced token for {department} to {token.current_token}",
            resource_id=token.id, resource_type=ResourceType.TOKEN, meta=meta,
        )
        await self._publish(TOKEN_UPDATE, {"action": "advance", "token": self._dump(token)})
        return token

    async def reset(self, db: AsyncSession, department: str, actor: User, meta: RequestMeta = None) -> QueueToken:
        department = _department(department)
        now = utcnow()
        stmt = (
            upsert(db, QueueToken)
            .values(department=department, current_token=0, last_reset_at=now)
            .on_conflict_do_update(
                index_elements=[QueueToken.department],
                set_={"current_token": 0, "last_reset_at": now, "updated_at": now},
            )
            .returning(QueueToken)
        )
        token = await self._apply(db, stmt)

        await self._audit(
            actor, AuditAction.TOKEN_RESET,
            f"Reset token for {department} to {token.current_token}",
            resource_id=token.id, resource_type=ResourceType.TOKEN, meta=meta,
        )
        await self._publish(TOKEN_UPDATE, {"action": "reset", "token": self._dump(token)})
        return token

    async def _apply(self, db: AsyncSession, stmt) -> QueueToken:
        result = await db.scalars(stmt, execution_options={"populate_existing": True})
        token = result.one()
        await db.commit()
        return token

    @staticmethod
    def _dump(token: QueueToken) -> dict:
        return TokenResponse.model_validate(token).model_dump(mode="json", by_alias=True)
