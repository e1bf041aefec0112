from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.enums import AuditAction, ResourceType, ScheduleStatus
from wenlock.models._time import as_utc, utcnow
from wenlock.models.alert import Alert
from wenlock.models.audit_log import AuditLog
from wenlock.models.inventory import InventoryItem
from wenlock.models.schedule import Schedule
from wenlock.models.user import User
from wenlock.schemas.report import AlertMetricsRow, AuditSummaryRow, InventoryOverviewRow, ScheduleSummaryRow
from wenlock.services.audit_service import RequestMeta
from wenlock.services.base import AuditedService

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def date_range(start: Optional[datetime], end: Optional[datetime]) -> tuple[datetime, datetime]:
    return as_utc(start) or EPOCH, as_utc(end) or utcnow()


def _count_status(status: ScheduleStatus):
    return func.sum(case((Schedule.status == status, 1), else_=0))


class ReportService(AuditedService):
    """
    Read-only aggregations. Every report access is itself audited as
    report_access, so reporting is never an unaudited read path.
    """

    async def schedules_summary(
        self, db: AsyncSession, actor: User, start: Optional[datetime] = None,
        end: Optional[datetime] = None, meta: RequestMeta = None,
    ) -> list[ScheduleSummaryRow]:
        start, end = date_range(start, end)
        result = await db.execute(
            select(
                Schedule.department,
                func.count(Schedule.id),
                _count_status(ScheduleStatus.SCHEDULED),
                _count_status(ScheduleStatus.IN_PROGRESS),
                _count_status(ScheduleStatus.COMPLETED),
                _count_status(ScheduleStatus.CANCELLED),
            )
            .where(Schedule.scheduled_time >= start, Schedule.scheduled_time <= end)
            .group_by(Schedule.department)
            .order_by(Schedule.department)
        )
        rows = [
            ScheduleSummaryRow(
                department=department, total_schedules=total, scheduled=scheduled or 0,
                in_progress=in_progress or 0, completed=completed or 0, cancelled=cancelled or 0,
            )
            for department, total, scheduled, in_progress, completed, cancelled in result.all()
        ]
        await self._record_access(actor, "Schedule Summary Report", start, end, meta)
        return rows

    async def inventory_overview(self, db: AsyncSession, actor: User, meta: RequestMeta = None) -> list[InventoryOverviewRow]:
        result = await db.execute(select(InventoryItem).order_by(InventoryItem.drug_name))
        rows = [
            InventoryOverviewRow(
                drug_name=item.drug_name, current_stock=item.current_stock,
                reorder_threshold=item.reorder_threshold, location=item.location,
                is_low_stock=item.is_low_stock,
            )
            for item in result.scalars().all()
        ]
        await self._record_access(actor, "Inventory Overview Report", meta=meta)
        return rows

    async def alert_metrics(
        self, db: AsyncSession, actor: User, start: Optional[datetime] = None,
        end: Optional[datetime] = None, meta: RequestMeta = None,
    ) -> list[AlertMetricsRow]:
        start, end = date_range(start, end)
        result = await db.execute(
            select(Alert)
            .where(Alert.triggered_at >= start, Alert.triggered_at <= end)
            .order_by(Alert.type)
        )

        # Durations are computed here rather than in SQL to stay dialect-neutral.
        groups: dict = {}
        for alert in result.scalars().all():
            group = groups.setdefault(alert.type, {"total": 0, "active": 0, "durations": [], "latest": None})
            group["total"] += 1
            triggered_at = as_utc(alert.triggered_at)
            if alert.active:
                group["active"] += 1
            elif alert.deactivated_at is not None:
                group["durations"].append((as_utc(alert.deactivated_at) - triggered_at).total_seconds() / 60)
            if group["latest"] is None or triggered_at > group["latest"]:
                group["latest"] = triggered_at

        rows = []
        for alert_type in sorted(groups, key=lambda t: t.value):
            group = groups[alert_type]
            durations = group["durations"]
            rows.append(AlertMetricsRow(
                alert_type=alert_type,
                total_triggers=group["total"],
                active_now=group["active"],
                avg_duration_minutes=round(sum(durations) / len(durations), 2) if durations else None,
                latest_trigger=group["latest"],
            ))
        await self._record_access(actor, "Alert Metrics Report", start, end, meta)
        return rows

    async def audit_summary(
        self, db: AsyncSession, actor: User, start: Optional[datetime] = None,
        end: Optional[datetime] = None, meta: RequestMeta = None,
    ) -> list[AuditSummaryRow]:
        start, end = date_range(start, end)
        result = await db.execute(
            select(AuditLog.action_type, func.count(AuditLog.id), func.count(distinct(AuditLog.user_id)))
            .where(AuditLog.created_at >= start, AuditLog.created_at <= end)
            .group_by(AuditLog.action_type)
        )
        rows = [
            AuditSummaryRow(action_type=action_type, total_actions=total, unique_users=users)
            for action_type, total, users in result.all()
        ]
        rows.sort(key=lambda r: r.action_type.value)
        await self._record_access(actor, "Audit Log Summary Report", start, end, meta)
        return rows

    async def _record_access(
        self, actor: User, report_name: str, start: Optional[datetime] = None,
        end: Optional[datetime] = None, meta: Optional[RequestMeta] = None,
    ) -> None:
        details = f"Accessed {report_name}"
        if start is not None and end is not None:
            details += f" (Range: {start.isoformat()} to {end.isoformat()})"
        await self._audit(actor, AuditAction.REPORT_ACCESS, details, resource_type=ResourceType.REPORT, meta=meta)
