from fastapi import APIRouter, Depends

from wenlock.auth import get_current_user
from wenlock.enums import Role
from wenlock.models.user import User

router = APIRouter()


@router.get("/roles")
async def list_roles(current_user: User = Depends(get_current_user)):
    return {"roles": [role.value for role in Role]}
