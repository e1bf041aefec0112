from datetime import datetime
from typing import Optional
from wenlock.enums import AuditAction, ResourceType
from wenlock.schemas.common import CamelModel


class AuditLogResponse(CamelModel):
    id: int
    user_id: Optional[int] = None
    username: str
    action_type: AuditAction
    details: str
    resource_id: Optional[str] = None
    resource_type: Optional[ResourceType] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
