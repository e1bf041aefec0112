from datetime import datetime
from typing import Optional
from wenlock.enums import AlertType, AuditAction
from wenlock.schemas.common import CamelModel


class ScheduleSummaryRow(CamelModel):
    department: str
    total_schedules: int
    scheduled: int
    in_progress: int
    completed: int
    cancelled: int


class InventoryOverviewRow(CamelModel):
    drug_name: str
    current_stock: int
    reorder_threshold: int
    location: Optional[str] = None
    is_low_stock: bool


class AlertMetricsRow(CamelModel):
    alert_type: AlertType
    total_triggers: int
    active_now: int
    avg_duration_minutes: Optional[float] = None
    latest_trigger: Optional[datetime] = None


class AuditSummaryRow(CamelModel):
    action_type: AuditAction
    total_actions: int
    unique_users: int
