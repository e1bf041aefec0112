from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import authorize
from wenlock.container import Services, get_services
from wenlock.database import get_db
from wenlock.models.user import User
from wenlock.schemas.token import TokenResponse
from wenlock.services.audit_service import RequestMeta

router = APIRouter()


@router.get("/{department}", response_model=TokenResponse)
async def current_token(
    department: str,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("token.read")),
):
    return await services.tokens.get_current(db, department)


@router.put("/{department}/advance", response_model=TokenResponse)
async def advance_token(
    department: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("token.advance")),
):
    return await services.tokens.advance(db, department, current_user, RequestMeta.from_request(request))


@router.put("/{department}/reset", response_model=TokenResponse)
async def reset_token(
    department: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("token.reset")),
):
    return await services.tokens.reset(db, department, current_user, RequestMeta.from_request(request))
