from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import authorize, get_current_user
from wenlock.container import Services, get_services
from wenlock.database import RowId, get_db
from wenlock.models.user import User
from wenlock.schemas.common import MessageResponse
from wenlock.schemas.user import UserResponse, UserUpdate
from wenlock.services.audit_service import RequestMeta

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("", response_model=list[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("user.list")),
):
    return await services.users.list_users(db)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: RowId,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("user.read")),
):
    return await services.users.get(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: RowId,
    body: UserUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("user.update")),
):
    return await services.users.update(db, user_id, body, current_user, RequestMeta.from_request(request))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: RowId,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("user.delete")),
):
    await services.users.delete(db, user_id, current_user, RequestMeta.from_request(request))
    return MessageResponse(message="User removed")
