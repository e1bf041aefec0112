from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.auth import authorize
from wenlock.container import Services, get_services
from wenlock.database import RowId, get_db
from wenlock.models.user import User
from wenlock.schemas.common import MessageResponse
from wenlock.schemas.inventory import InventoryCreate, InventoryResponse, InventoryUpdate
from wenlock.services.audit_service import RequestMeta

router = APIRouter()


@router.get("", response_model=list[InventoryResponse])
async def list_inventory(
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("inventory.read")),
):
    return await services.inventory.list_all(db)


# Registered before /{item_id} so "low-stock" is not parsed as an id.
@router.get("/low-stock", response_model=list[InventoryResponse])
async def low_stock(
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("inventory.low_stock")),
):
    return await services.inventory.list_low_stock(db)


@router.get("/{item_id}", response_model=InventoryResponse)
async def get_item(
    item_id: RowId,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("inventory.read")),
):
    return await services.inventory.get(db, item_id)


@router.post("", response_model=InventoryResponse, status_code=201)
async def create_item(
    body: InventoryCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("inventory.create")),
):
    return await services.inventory.create(db, body, current_user, RequestMeta.from_request(request))


@router.put("/{item_id}", response_model=InventoryResponse)
async def update_item(
    item_id: RowId,
    body: InventoryUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("inventory.update")),
):
    return await services.inventory.update(db, item_id, body, current_user, RequestMeta.from_request(request))


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_item(
    item_id: RowId,
    request: Request,
    db: AsyncSession = Depends(get_db),
    services: Services = Depends(get_services),
    current_user: User = Depends(authorize("inventory.delete")),
):
    await services.inventory.delete(db, item_id, current_user, RequestMeta.from_request(request))
    return MessageResponse(message="Inventory item removed")
