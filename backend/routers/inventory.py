from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session
from db.inventory import InventoryItem, StockMovement
from schemas.inventory import (
    InventoryItemCreate,
    InventoryItemOut,
    StockBatchRequest,
    StockMovementOut,
)
from services.item_store import ItemStore
from services.ledger import MovementLedger
from services.transaction import read_snapshot
from core.config import settings

router = APIRouter()


def get_item_store(db: AsyncSession = Depends(get_async_session)) -> ItemStore:
    return ItemStore(db)


def get_ledger(store: ItemStore = Depends(get_item_store)) -> MovementLedger:
    return MovementLedger(store)


def _item_out(item: InventoryItem) -> InventoryItemOut:
    return InventoryItemOut(**item.to_schema)


def _movement_out(movement: StockMovement) -> StockMovementOut:
    return StockMovementOut(**movement.to_schema)


@router.get("", response_model=Dict)
async def list_inventory_items(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    store: ItemStore = Depends(get_item_store),
):
    """List items whose name contains `search`, ordered by name."""
    items = await store.list(search=search, page=page, page_size=settings.inventory_page_size)
    return {
        "items": items.to_dict(_item_out),
        "filters": {"search": search or ""},
    }


@router.post("/items", response_model=Dict)
async def create_inventory_item(
    payload: InventoryItemCreate,
    store: ItemStore = Depends(get_item_store),
):
    item = await store.create(payload.name, payload.unit, payload.quantity)
    return {"message": "Item created successfully.", "item": _item_out(item)}


@router.get("/items/{item_id}", response_model=Dict)
async def get_inventory_item(item_id: int, store: ItemStore = Depends(get_item_store)):
    item = await store.find(item_id)
    return {"item": _item_out(item)}


@router.get("/{item_id}/history", response_model=Dict)
async def item_history(
    item_id: int,
    page: int = Query(1, ge=1),
    ledger: MovementLedger = Depends(get_ledger),
):
    """Stock movements for one item, newest first."""
    async with read_snapshot(ledger.db):
        item = await ledger.store.find(item_id)
        movements = await ledger.history(item_id, page=page, page_size=settings.history_page_size)
    return {
        "item": _item_out(item),
        "movements": movements.to_dict(_movement_out),
    }


@router.post("/add", response_model=Dict)
async def add_stock(payload: StockBatchRequest, ledger: MovementLedger = Depends(get_ledger)):
    movements = await ledger.add(payload.items)
    return {
        "message": "Stock added successfully.",
        "movements": [_movement_out(m) for m in movements],
    }


@router.post("/deduct", response_model=Dict)
async def deduct_stock(payload: StockBatchRequest, ledger: MovementLedger = Depends(get_ledger)):
    movements = await ledger.deduct(payload.items)
    return {
        "message": "Stock deducted successfully.",
        "movements": [_movement_out(m) for m in movements],
    }
