from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import NotFoundError
from core.logging_config import get_child_logger
from db.inventory import InventoryItem
from services.pagination import Page
from services.transaction import read_snapshot, scoped_transaction
from services.validation import validate_new_item, validate_page

logger = get_child_logger("item_store")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ItemStore:
    """
    Storage for inventory items, bound to one session.

    `lock_and_get` and `set_quantity` are reserved for the movement ledger and
    must run inside its transaction; everything else is safe to call directly.

    A rejected batch rolls the session back, which expires every object the
    session holds. Keep ids rather than instances across a batch that may
    fail, or `await session.refresh(obj)` before touching them again.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, name: str, unit: str, initial_quantity) -> InventoryItem:
        payload = validate_new_item({"name": name, "unit": unit, "quantity": initial_quantity})

        model = InventoryItem(name=payload.name, unit=payload.unit, quantity=payload.quantity)
        async with scoped_transaction(self.db):
            self.db.add(model)
            await self.db.flush()
            await self.db.refresh(model)

        logger.info("Created inventory item %s (%s) with quantity %s", model.id, model.name, model.quantity)
        return model

    async def find(self, item_id: int) -> InventoryItem:
        async with read_snapshot(self.db):
            res = await self.db.execute(select(InventoryItem).where(InventoryItem.id == item_id))
            item = res.scalar_one_or_none()
        if not item:
            raise NotFoundError(item_id)
        return item

    async def list(self, search: Optional[str] = None, page: int = 1, page_size: Optional[int] = None) -> Page[InventoryItem]:
        page, page_size = validate_page(page, page_size or settings.inventory_page_size)

        stmt = select(InventoryItem)
        count_stmt = select(func.count()).select_from(InventoryItem)
        term = (search or "").strip()
        if term:
            qq = f"%{_escape_like(term.lower())}%"
            cond = func.lower(InventoryItem.name).like(qq, escape="\\")
            stmt = stmt.where(cond)
            count_stmt = count_stmt.where(cond)

        stmt = (
            stmt.order_by(InventoryItem.name.asc(), InventoryItem.id.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        async with read_snapshot(self.db):
            total = (await self.db.execute(count_stmt)).scalar_one()
            items = (await self.db.execute(stmt)).scalars().all()

        return Page(items=tuple(items), page=page, page_size=page_size, total=int(total))

    async def lock_and_get(self, item_id: int) -> InventoryItem:
        """Lock the item row until the enclosing transaction ends and return it with its current quantity."""
        res = await self.db.execute(
            select(InventoryItem)
            .where(InventoryItem.id == item_id)
            .with_for_update()
            # a copy already in the session may predate the lock
            .execution_options(populate_existing=True)
        )
        item = res.scalar_one_or_none()
        if not item:
            raise NotFoundError(item_id)
        return item

    async def set_quantity(self, item_id: int, new_quantity: Decimal) -> InventoryItem:
        # Caller holds the row lock, so the item is already in the identity map
        item = await self.db.get(InventoryItem, item_id)
        if not item:
            raise NotFoundError(item_id)
        item.quantity = new_quantity
        await self.db.flush()
        return item
