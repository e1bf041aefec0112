from pydantic import Field
from datetime import datetime
from typing import Optional
from wenlock.enums import AlertType
from wenlock.schemas.common import CamelModel


class AlertTrigger(CamelModel):
    type: AlertType
    message: str = Field(min_length=1)


class AlertResponse(CamelModel):
    id: int
    type: AlertType
    message: str
    active: bool
    triggered_by: Optional[int] = None
    triggered_at: datetime
    deactivated_at: Optional[datetime] = None
