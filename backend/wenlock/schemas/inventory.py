from pydantic import Field
from datetime import datetime
from typing import Optional
from wenlock.schemas.common import CamelModel


class InventoryCreate(CamelModel):
    drug_name: str = Field(min_length=1, max_length=200)
    current_stock: int = Field(ge=0)
    reorder_threshold: int = Field(ge=0)
    location: Optional[str] = None
    notes: Optional[str] = None


class InventoryUpdate(CamelModel):
    drug_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    current_stock: Optional[int] = Field(default=None, ge=0)
    reorder_threshold: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    notes: Optional[str] = None


class InventoryResponse(CamelModel):
    id: int
    drug_name: str
    current_stock: int
    reorder_threshold: int
    location: Optional[str] = None
    notes: Optional[str] = None
    is_low_stock: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
