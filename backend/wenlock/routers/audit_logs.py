from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import authorize
from wenlock.container import Services, get_services
from wenlock.database import MAX_ROW_ID, RowId, get_db
from wenlock.enums import AuditAction, ResourceType
from wenlock.models.user import User
from wenlock.schemas.audit import AuditLogResponse
from wenlock.services.audit_service import DEFAULT_PAGE_SIZE

router = APIRouter()


@router.get("", response_model=list[AuditLogResponse])
async def query_audit_logs(
    user_id: Optional[int] = Query(None, alias="userId", ge=1, le=MAX_ROW_ID),
    action_type: Optional[AuditAction] = Query(None, alias="actionType"),
    resource_type: Optional[ResourceType] = Query(None, alias="resourceType"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, description="Clamped to the server maximum"),
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("audit.read")),
):
    return await services.audit.query(
        db,
        user_id=user_id,
        action_type=action_type,
        resource_type=resource_type,
        start=start_date,
        end=end_date,
        limit=limit,
    )


@router.get("/{log_id}", response_model=AuditLogResponse)
async def get_audit_log(
    log_id: RowId,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("audit.read")),
):
    return await services.audit.get(db, log_id)
