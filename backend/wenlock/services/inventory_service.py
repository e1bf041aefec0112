from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wenlock.enums import AuditAction, ResourceType
from wenlock.exceptions import ConflictError, NotFoundError, ValidationError
from wenlock.models._time import utcnow
from wenlock.models.inventory import InventoryItem
from wenlock.models.user import User
from wenlock.schemas.inventory import InventoryCreate, InventoryResponse, InventoryUpdate
from wenlock.services.audit_service import RequestMeta
from wenlock.services.base import LedgerService
from wenlock.services.realtime import INVENTORY_UPDATE, LOW_STOCK_ALERT


class InventoryLedger(LedgerService):
    """Drug stock levels with reorder thresholds."""

    async def list_all(self, db: AsyncSession) -> list[InventoryItem]:
        result = await db.execute(select(InventoryItem).order_by(InventoryItem.drug_name))
        return list(result.scalars().all())

    async def list_low_stock(self, db: AsyncSession) -> list[InventoryItem]:
        # Evaluated at query time from the two columns, never from a stored flag.
        result = await db.execute(
            select(InventoryItem).where(InventoryItem.is_low_stock).order_by(InventoryItem.drug_name)
        )
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, item_id: int) -> InventoryItem:
        item = await db.get(InventoryItem, item_id)
        if not item:
            raise NotFoundError("Inventory item not found")
        return item

    async def create(self, db: AsyncSession, data: InventoryCreate, actor: User, meta: RequestMeta = None) -> InventoryItem:
        drug_name = (data.drug_name or "").strip()
        if not drug_name or data.current_stock is None or data.reorder_threshold is None:
            raise ValidationError("Please enter drug name, current stock, and reorder threshold")

        if await self._find_by_name(db, drug_name):
            raise ConflictError("Drug with this name already exists")

        item = InventoryItem(
            drug_name=drug_name,
            current_stock=data.current_stock,
            reorder_threshold=data.reorder_threshold,
            location=data.location,
            notes=data.notes,
        )
        db.add(item)
        await self._commit(db, "Drug with this name already exists")
        await db.refresh(item)

        await self._audit(
            actor, AuditAction.INVENTORY_CREATE,
            f"Added {item.drug_name} with stock {item.current_stock} (threshold {item.reorder_threshold})",
            resource_id=item.id, resource_type=ResourceType.INVENTORY, meta=meta,
        )
        await self._publish(INVENTORY_UPDATE, {"action": "create", "item": self._dump(item)})
        await self._check_low_stock(item)
        return item

    async def update(
        self, db: AsyncSession, item_id: int, data: InventoryUpdate, actor: User, meta: RequestMeta = None
    ) -> InventoryItem:
        item = await self.get(db, item_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        if "drug_name" in changes:
            changes["drug_name"] = changes["drug_name"].strip()
            if not changes["drug_name"]:
                raise ValidationError("Drug name cannot be blank")
            if changes["drug_name"] != item.drug_name:
                existing = await self._find_by_name(db, changes["drug_name"])
                if existing and existing.id != item.id:
                    raise ConflictError("Another drug with this name already exists")

        old_stock, old_threshold = item.current_stock, item.reorder_threshold
        for key, value in changes.items():
            setattr(item, key, value)
        await self._commit(db, "Another drug with this name already exists")
        await db.refresh(item)

        details = f"Updated {item.drug_name}."
        if item.current_stock != old_stock:
            details += f" Stock changed from {old_stock} to {item.current_stock}."
        if item.reorder_threshold != old_threshold:
            details += f" Threshold changed from {old_threshold} to {item.reorder_threshold}."

        await self._audit(
            actor, AuditAction.INVENTORY_UPDATE, details,
            resource_id=item.id, resource_type=ResourceType.INVENTORY, meta=meta,
        )
        await self._publish(INVENTORY_UPDATE, {"action": "update", "item": self._dump(item)})
        await self._check_low_stock(item)
        return item

    async def delete(self, db: AsyncSession, item_id: int, actor: User, meta: RequestMeta = None) -> None:
        item = await self.get(db, item_id)
        drug_name = item.drug_name
        await db.delete(item)
        await db.commit()

        await self._audit(
            actor, AuditAction.INVENTORY_DELETE, f"Deleted inventory item {drug_name}",
            resource_id=item_id, resource_type=ResourceType.INVENTORY, meta=meta,
        )
        await self._publish(INVENTORY_UPDATE, {"action": "delete", "itemId": item_id})

    async def _check_low_stock(self, item: InventoryItem) -> None:
        if not item.is_low_stock:
            return
        await self._publish(LOW_STOCK_ALERT, {
            "action": "lowStock",
            "item": self._dump(item),
            "message": (
                f"{item.drug_name} stock is low! Current: {item.current_stock}, "
                f"Threshold: {item.reorder_threshold}"
            ),
            "timestamp": utcnow().isoformat(),
        })

    @staticmethod
    async def _find_by_name(db: AsyncSession, drug_name: str):
        return await db.scalar(select(InventoryItem).where(InventoryItem.drug_name == drug_name))

    @staticmethod
    async def _commit(db: AsyncSession, conflict_message: str) -> None:
        # Unique index on drug_name catches a racing create/rename.
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(conflict_message)

    @staticmethod
    def _dump(item: InventoryItem) -> dict:
        return InventoryResponse.model_validate(item).model_dump(mode="json", by_alias=True)
