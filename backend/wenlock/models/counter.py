from sqlalchemy import Column, Integer, String
from wenlock.database import Base


class Counter(Base):
    """Per-key sequence. Only ever changed by an atomic upsert-increment."""

    __tablename__ = "counters"

    key = Column(String(100), primary_key=True)
    seq = Column(Integer, nullable=False, default=0)
