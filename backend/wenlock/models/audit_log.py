from sqlalchemy import Column, Integer, String, Text, DateTime, Enum
from wenlock.database import Base
from wenlock.enums import AuditAction, ResourceType
from wenlock.models._time import utcnow


def _values(enum_cls):
    return [m.value for m in enum_cls]


class AuditLog(Base):
    """Append-only. The application never updates or deletes rows here."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, index=True)  # null for failed logins with an unknown email
    username = Column(String(255), nullable=False)  # denormalized, survives user deletion
    action_type = Column(Enum(AuditAction, values_callable=_values, native_enum=False, length=40),
                         nullable=False, index=True)
    details = Column(Text, nullable=False)
    resource_id = Column(String(100))
    resource_type = Column(Enum(ResourceType, values_callable=_values, native_enum=False, length=20), index=True)
    ip_address = Column(String(45))
    user_agent = Column(String(500))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
