from sqlalchemy import Column, Integer, String, Text, DateTime, CheckConstraint
from sqlalchemy.ext.hybrid import hybrid_property
from wenlock.database import Base
from wenlock.models._time import utcnow


class InventoryItem(Base):
    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_inventory_current_stock_non_negative"),
        CheckConstraint("reorder_threshold >= 0", name="ck_inventory_reorder_threshold_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    drug_name = Column(String(200), unique=True, nullable=False, index=True)
    current_stock = Column(Integer, nullable=False, default=0)
    reorder_threshold = Column(Integer, nullable=False, default=10)
    location = Column(String(200))
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @hybrid_property
    def is_low_stock(self):
        # Never stored; the same expression drives the low-stock query.
        return self.current_stock <= self.reorder_threshold
