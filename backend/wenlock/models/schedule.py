from sqlalchemy import Column, Integer, String, Text, DateTime, Enum
from wenlock.database import Base
from wenlock.enums import ScheduleStatus, ScheduleType
from wenlock.models._time import utcnow


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True)
    department = Column(String(100), nullable=False, index=True)
    type = Column(Enum(ScheduleType, values_callable=_values, native_enum=False, length=20), nullable=False)
    patient_token = Column(String(40), unique=True, nullable=False, index=True)
    doctor_name = Column(String(200))
    room_number = Column(String(50))
    scheduled_time = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(Enum(ScheduleStatus, values_callable=_values, native_enum=False, length=20),
                    nullable=False, default=ScheduleStatus.SCHEDULED)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
