from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Enum
from wenlock.database import Base
from wenlock.enums import AlertType
from wenlock.models._time import utcnow


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(AlertType, values_callable=_values, native_enum=False, length=20),
                  nullable=False)
    message = Column(Text, nullable=False)
    active = Column(Boolean, nullable=False, default=True, index=True)
    triggered_by = Column(Integer)
    triggered_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    deactivated_at = Column(DateTime(timezone=True))
