from datetime import datetime
from typing import Optional
from wenlock.enums import ScheduleStatus, ScheduleType
from wenlock.schemas.common import CamelModel


class ScheduleCreate(CamelModel):
    department: str
    type: ScheduleType
    scheduled_time: datetime
    doctor_name: Optional[str] = None
    room_number: Optional[str] = None
    notes: Optional[str] = None


class ScheduleUpdate(CamelModel):
    # patient_token is deliberately absent: it is assigned once at creation.
    department: Optional[str] = None
    type: Optional[ScheduleType] = None
    scheduled_time: Optional[datetime] = None
    doctor_name: Optional[str] = None
    room_number: Optional[str] = None
    status: Optional[ScheduleStatus] = None
    notes: Optional[str] = None


class ScheduleResponse(CamelModel):
    id: int
    department: str
    type: ScheduleType
    patient_token: str
    doctor_name: Optional[str] = None
    room_number: Optional[str] = None
    scheduled_time: datetime
    status: ScheduleStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
