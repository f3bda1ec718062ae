"""Database migration utilities"""
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine

from core.logging_config import get_child_logger
from db.database import Base
from db.inventory import InventoryItem, StockMovement

logger = get_child_logger("migrations")

# creation order; dropped in reverse
INVENTORY_TABLES = [InventoryItem.__table__, StockMovement.__table__]


async def upgrade(engine: AsyncEngine):
    """Create inventory_items and stock_movements if they don't exist yet"""
    async with engine.begin() as conn:
        existing = await conn.run_sync(
            lambda sync_conn: set(inspect(sync_conn).get_table_names())
        )
        missing = [t for t in INVENTORY_TABLES if t.name not in existing]
        if not missing:
            logger.info("Inventory tables already exist")
            return
        await conn.run_sync(Base.metadata.create_all, tables=missing)
        logger.info("Created tables: %s", ", ".join(t.name for t in missing))


async def downgrade(engine: AsyncEngine):
    """Drop stock_movements, then inventory_items"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all, tables=list(reversed(INVENTORY_TABLES)))
        logger.info("Dropped tables: %s", ", ".join(t.name for t in reversed(INVENTORY_TABLES)))
