import re
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.enums import AuditAction, ResourceType, ScheduleStatus
from wenlock.exceptions import NotFoundError, ValidationError
from wenlock.models._time import as_utc
from wenlock.models.schedule import Schedule
from wenlock.models.user import User
from wenlock.schemas.schedule import ScheduleCreate, ScheduleResponse, ScheduleUpdate
from wenlock.services.audit_service import AuditTrail, RequestMeta
from wenlock.services.base import LedgerService
from wenlock.services.realtime import SCHEDULE_UPDATE, Broadcaster
from wenlock.services.sequence_service import SequenceCounter

TOKEN_DIGITS = 8


def department_code(department: str) -> str:
    """First three letters of the department, uppercased ("pharmacy" -> "PHA")."""
    letters = re.sub(r"[^A-Za-z]", "", department)
    return letters[:3].upper() or "GEN"


def format_patient_token(code: str, seq: int) -> str:
    return f"{code}-{seq:0{TOKEN_DIGITS}d}"


class ScheduleLedger(LedgerService):
    """OT and consultation bookings."""

    def __init__(self, audit: AuditTrail, broadcaster: Broadcaster, counter: SequenceCounter):
        super().__init__(audit, broadcaster)
        self.counter = counter

    async def list_by_department(self, db: AsyncSession, department: Optional[str] = None) -> list[Schedule]:
        query = select(Schedule)
        if department:
            query = query.where(Schedule.department == department)
        result = await db.execute(query.order_by(Schedule.scheduled_time.asc(), Schedule.id.asc()))
        return list(result.scalars().all())

    async def list_by_patient_token(self, db: AsyncSession, patient_token: str) -> list[Schedule]:
        result = await db.execute(
            select(Schedule)
            .where(Schedule.patient_token == patient_token)
            .order_by(Schedule.scheduled_time.asc())
        )
        schedules = list(result.scalars().all())
        if not schedules:
            raise NotFoundError("No schedules found for this patient token")
        return schedules

    async def get(self, db: AsyncSession, schedule_id: int) -> Schedule:
        schedule = await db.get(Schedule, schedule_id)
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    async def create(self, db: AsyncSession, data: ScheduleCreate, actor: User, meta: RequestMeta = None) -> Schedule:
        department = (data.department or "").strip()
        if not department or data.type is None or data.scheduled_time is None:
            raise ValidationError("Please enter all required fields: department, type, scheduledTime")

        # Keyed by code, not name, so departments sharing a code never share a token.
        code = department_code(department)
        seq = await self.counter.next_sequence(db, code)

        schedule = Schedule(
            department=department,
            type=data.type,
            patient_token=format_patient_token(code, seq),
            doctor_name=data.doctor_name,
            room_number=data.room_number,
            scheduled_time=as_utc(data.scheduled_time),
            status=ScheduleStatus.SCHEDULED,
            notes=data.notes,
        )
        db.add(schedule)
        await db.commit()
        await db.refresh(schedule)

        await self._audit(
            actor, AuditAction.SCHEDULE_CREATE,
            f"Created new {schedule.type.value} schedule for {schedule.department} "
            f"(Patient: {schedule.patient_token})",
            resource_id=schedule.id, resource_type=ResourceType.SCHEDULE, meta=meta,
        )
        await self._publish(SCHEDULE_UPDATE, {"action": "create", "schedule": self._dump(schedule)})
        return schedule

    async def update(
        self, db: AsyncSession, schedule_id: int, data: ScheduleUpdate, actor: User, meta: RequestMeta = None
    ) -> Schedule:
        schedule = await self.get(db, schedule_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if "department" in changes:
            changes["department"] = changes["department"].strip()
            if not changes["department"]:
                raise ValidationError("Department cannot be blank")
        if "scheduled_time" in changes:
            changes["scheduled_time"] = as_utc(changes["scheduled_time"])

        old_status = schedule.status
        old_time = as_utc(schedule.scheduled_time)

        for key, value in changes.items():
            setattr(schedule, key, value)
        await db.commit()
        await db.refresh(schedule)

        details = (
            f"Updated {schedule.type.value} schedule for {schedule.department} "
            f"(Patient: {schedule.patient_token})."
        )
        if "status" in changes and schedule.status != old_status:
            details += f" Status changed from '{old_status.value}' to '{schedule.status.value}'."
        new_time = as_utc(schedule.scheduled_time)
        if "scheduled_time" in changes and new_time != old_time:
            details += f" Time changed from '{old_time.isoformat()}' to '{new_time.isoformat()}'."

        await self._audit(
            actor, AuditAction.SCHEDULE_UPDATE, details,
            resource_id=schedule.id, resource_type=ResourceType.SCHEDULE, meta=meta,
        )
        await self._publish(SCHEDULE_UPDATE, {"action": "update", "schedule": self._dump(schedule)})
        return schedule

    async def delete(self, db: AsyncSession, schedule_id: int, actor: User, meta: RequestMeta = None) -> None:
        schedule = await self.get(db, schedule_id)
        # The row is gone after commit, so the audit entry carries its identity.
        summary = (
            f"Schedule for {schedule.department}, type {schedule.type.value}, "
            f"patient {schedule.patient_token}"
        )
        await db.delete(schedule)
        await db.commit()

        await self._audit(
            actor, AuditAction.SCHEDULE_DELETE, f"Deleted {summary} by {actor.username}",
            resource_id=schedule_id, resource_type=ResourceType.SCHEDULE, meta=meta,
        )
        await self._publish(SCHEDULE_UPDATE, {"action": "delete", "scheduleId": schedule_id})

    @staticmethod
    def _dump(schedule: Schedule) -> dict:
        return ScheduleResponse.model_validate(schedule).model_dump(mode="json", by_alias=True)
