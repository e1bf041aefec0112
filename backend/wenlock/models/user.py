from sqlalchemy import Column, Integer, String, DateTime, Enum
from wenlock.database import Base
from wenlock.enums import Role
from wenlock.models._time import utcnow


def _values(enum_cls):
    return [m.value for m in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(Role, values_callable=_values, native_enum=False, length=20),
                  nullable=False, default=Role.GENERAL_STAFF)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
