from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import authorize, create_token
from wenlock.config import get_settings
from wenlock.container import Services, get_services
from wenlock.database import get_db
from wenlock.models.user import User
from wenlock.schemas.common import MessageResponse
from wenlock.schemas.user import LoginRequest, LoginResponse, RegisterRequest, UserResponse
from wenlock.services.audit_service import RequestMeta

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
):
    """Verify credentials, issue a JWT and set it as an HttpOnly cookie."""
    user = await services.users.authenticate(db, body.email, body.password, RequestMeta.from_request(request))
    settings = get_settings()
    token = create_token(user)
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.token_expire_seconds,
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="strict",
    )
    return LoginResponse(user=UserResponse.model_validate(user), access_token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    settings = get_settings()
    response.delete_cookie(
        key=settings.auth_cookie_name, httponly=True, secure=settings.auth_cookie_secure, samesite="strict"
    )
    return MessageResponse(message="Logged out successfully")


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    body: RegisterRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("user.register")),
):
    return await services.users.register(db, body, current_user, RequestMeta.from_request(request))
