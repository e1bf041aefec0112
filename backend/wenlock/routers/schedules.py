from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import authorize
from wenlock.container import Services, get_services
from wenlock.database import RowId, get_db
from wenlock.models.user import User
from wenlock.schemas.common import MessageResponse
from wenlock.schemas.schedule import ScheduleCreate, ScheduleResponse, ScheduleUpdate
from wenlock.services.audit_service import RequestMeta

router = APIRouter()


@router.get("", response_model=list[ScheduleResponse])
async def list_schedules(
    department: Optional[str] = Query(None, description="Filter by department"),
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("schedule.read")),
):
    return await services.schedules.list_by_department(db, department)


@router.get("/by-patient-token/{patient_token}", response_model=list[ScheduleResponse])
async def schedules_for_patient(
    patient_token: str,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("schedule.read")),
):
    return await services.schedules.list_by_patient_token(db, patient_token)


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: RowId,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("schedule.read")),
):
    return await services.schedules.get(db, schedule_id)


@router.post("", response_model=ScheduleResponse, status_code=201)
async def create_schedule(
    body: ScheduleCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("schedule.create")),
):
    return await services.schedules.create(db, body, current_user, RequestMeta.from_request(request))


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: RowId,
    body: ScheduleUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("schedule.update")),
):
    return await services.schedules.update(db, schedule_id, body, current_user, RequestMeta.from_request(request))


@router.delete("/{schedule_id}", response_model=MessageResponse)
async def delete_schedule(
    schedule_id: RowId,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("schedule.delete")),
):
    await services.schedules.delete(db, schedule_id, current_user, RequestMeta.from_request(request))
    return MessageResponse(message="Schedule removed")
