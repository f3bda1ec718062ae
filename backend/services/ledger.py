"""
Movement ledger: the only code path that changes an item's quantity.

Every change is paired with exactly one StockMovement row, and a batch of
changes is applied as a single transaction:

- every request is validated before any row is locked;
- requests are applied in submitted order, each under the item's row lock;
- a deduct that would take an item below zero aborts the whole batch;
- on any error the transaction is rolled back and nothing is written.

Nothing is retried here. A TransientStorageError means the batch was not
applied and can be resubmitted unchanged.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from sqlalchemy import func, select

from core.config import settings
from core.exceptions import InsufficientStockError, NotFoundError, ValidationError
from core.logging_config import get_child_logger
from db.inventory import StockMovement
from schemas.inventory import MAX_QUANTITY, MovementType
from services.item_store import ItemStore
from services.pagination import Page
from services.transaction import read_snapshot, scoped_transaction
from services.validation import INVALID_DATA_MESSAGE, validate_movement_requests, validate_page

logger = get_child_logger("ledger")


class MovementLedger:
    def __init__(self, store: ItemStore):
        self.store = store

    @property
    def db(self):
        return self.store.db

    async def apply_batch(self, requests: Sequence[Any], kind: Optional[MovementType] = None) -> List[StockMovement]:
        """
        Apply a batch of movement requests atomically.

        Each request carries `inventory_item_id`, `kind` ("add" | "deduct"),
        `quantity` (the magnitude, > 0) and an optional `note`. When `kind` is
        passed here it applies to every request.

        Returns the new StockMovement rows in submitted order.
        """
        batch = validate_movement_requests(requests, kind=kind)

        created: List[StockMovement] = []
        try:
            async with scoped_transaction(self.db):
                for idx, req in enumerate(batch):
                    item = await self.store.lock_and_get(req.inventory_item_id)
                    current = Decimal(item.quantity)

                    if req.kind == "add":
                        new_quantity = current + req.quantity
                        if new_quantity > MAX_QUANTITY:
                            raise ValidationError(
                                INVALID_DATA_MESSAGE,
                                {f"items.{idx}.quantity": [f"resulting stock may not be greater than {MAX_QUANTITY}"]},
                            )
                    else:
                        new_quantity = current - req.quantity
                        if new_quantity < 0:
                            raise InsufficientStockError(
                                item_id=item.id,
                                item_name=item.name,
                                requested=req.quantity,
                                available=current,
                            )

                    await self.store.set_quantity(item.id, new_quantity)

                    created.append(
                        StockMovement(
                            inventory_item_id=item.id,
                            type=req.kind,
                            quantity=req.quantity,
                            note=req.note,
                        )
                    )

                # stamp once every row lock is held
                now = datetime.now(timezone.utc)
                for movement in created:
                    movement.created_at = now
                    movement.updated_at = now
                self.db.add_all(created)
                await self.db.flush()
        except InsufficientStockError as e:
            logger.warning(
                "Batch rejected: item %s (%s) has %s, %s requested",
                e.item_id, e.item_name, e.available, e.requested,
            )
            raise
        except NotFoundError as e:
            logger.warning("Batch rejected: inventory item %s not found", e.item_id)
            raise

        logger.info(
            "Applied batch of %d movement(s) to item(s) %s",
            len(created), sorted({m.inventory_item_id for m in created}),
        )
        return created

    async def add(self, lines: Sequence[Any]) -> List[StockMovement]:
        return await self.apply_batch(lines, kind="add")

    async def deduct(self, lines: Sequence[Any]) -> List[StockMovement]:
        return await self.apply_batch(lines, kind="deduct")

    async def history(self, item_id: int, page: int = 1, page_size: Optional[int] = None) -> Page[StockMovement]:
        """Movements of one item, newest first."""
        page, page_size = validate_page(page, page_size or settings.history_page_size)

        async with read_snapshot(self.db):
            await self.store.find(item_id)

            count_stmt = (
                select(func.count())
                .select_from(StockMovement)
                .where(StockMovement.inventory_item_id == item_id)
            )
            stmt = (
                select(StockMovement)
                .where(StockMovement.inventory_item_id == item_id)
                .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            )
            total = (await self.db.execute(count_stmt)).scalar_one()
            movements = (await self.db.execute(stmt)).scalars().all()

        return Page(items=tuple(movements), page=page, page_size=page_size, total=int(total))
