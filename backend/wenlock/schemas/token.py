from datetime import datetime
from typing import Optional
from wenlock.schemas.common import CamelModel


class TokenResponse(CamelModel):
    id: int
    department: str
    current_token: int
    last_reset_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
