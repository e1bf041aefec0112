from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from wenlock.database import Base
from wenlock.models._time import utcnow


class QueueToken(Base):
    __tablename__ = "tokens"
    __table_args__ = (CheckConstraint("current_token >= 0", name="ck_tokens_current_token_non_negative"),)

    id = Column(Integer, primary_key=True, index=True)
    department = Column(String(100), unique=True, nullable=False, index=True)
    current_token = Column(Integer, nullable=False, default=0)
    last_reset_at = Column(DateTime(timezone=True), default=utcnow)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
