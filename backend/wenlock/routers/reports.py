from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import authorize
from wenlock.container import Services, get_services
from wenlock.database import get_db
from wenlock.models.user import User
from wenlock.schemas.report import AlertMetricsRow, AuditSummaryRow, InventoryOverviewRow, ScheduleSummaryRow
from wenlock.services.audit_service import RequestMeta

router = APIRouter()


@router.get("/schedules-summary", response_model=list[ScheduleSummaryRow])
async def schedules_summary(
    request: Request,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("report.schedules")),
):
    return await services.reports.schedules_summary(
        db, current_user, start_date, end_date, RequestMeta.from_request(request)
    )


@router.get("/inventory-overview", response_model=list[InventoryOverviewRow])
async def inventory_overview(
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("report.inventory")),
):
    return await services.reports.inventory_overview(db, current_user, RequestMeta.from_request(request))


@router.get("/alert-metrics", response_model=list[AlertMetricsRow])
async def alert_metrics(
    request: Request,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("report.alerts")),
):
    return await services.reports.alert_metrics(
        db, current_user, start_date, end_date, RequestMeta.from_request(request)
    )


@router.get("/audit-summary", response_model=list[AuditSummaryRow])
async def audit_summary(
    request: Request,
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("report.audit")),
):
    return await services.reports.audit_summary(
        db, current_user, start_date, end_date, RequestMeta.from_request(request)
    )
