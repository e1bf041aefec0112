from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import authorize
from wenlock.container import Services, get_services
from wenlock.database import RowId, get_db
from wenlock.models.user import User
from wenlock.schemas.alert import AlertResponse, AlertTrigger
from wenlock.services.audit_service import RequestMeta

router = APIRouter()


@router.get("/active", response_model=list[AlertResponse])
async def active_alerts(
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("alert.read_active")),
):
    return await services.alerts.list_active(db)


@router.get("/all", response_model=list[AlertResponse])
async def all_alerts(
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("alert.read_all")),
):
    return await services.alerts.list_all(db)


@router.post("/trigger", response_model=AlertResponse, status_code=201)
async def trigger_alert(
    body: AlertTrigger,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("alert.trigger")),
):
    return await services.alerts.trigger(db, body.type, body.message, current_user, RequestMeta.from_request(request))


@router.put("/{alert_id}/deactivate", response_model=AlertResponse)
async def deactivate_alert(
    alert_id: RowId,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("alert.deactivate")),
):
    return await services.alerts.deactivate(db, alert_id, current_user, RequestMeta.from_request(request))
