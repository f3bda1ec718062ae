"""
Seed a handful of demo inventory items.

Each item is created at zero stock and then receives its opening balance as an
`add` movement, so the history of every seeded item explains its quantity.

Run from the repo root:
  python backend/scripts/seed_inventory.py --dry-run
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from core.logging_config import get_child_logger  # noqa: E402
from db.database import async_session_maker, engine  # noqa: E402
from db.inventory import InventoryItem  # noqa: E402
from db.migrations import upgrade  # noqa: E402
from services.item_store import ItemStore  # noqa: E402
from services.ledger import MovementLedger  # noqa: E402

logger = get_child_logger("seed_inventory")

DEMO_ITEMS = [
    # (name, unit, opening quantity)
    ("Copy paper A4", "ream", "40"),
    ("Hand sanitizer", "bottle", "12.5"),
    ("Nitrile gloves", "box", "25"),
    ("Packing tape", "roll", "18"),
    ("Steel bolts M8", "kg", "7.25"),
]


async def seed(session: AsyncSession, items=DEMO_ITEMS, dry_run: bool = False) -> int:
    """Create every item that doesn't exist yet (matched by name). Returns how many were created."""
    res = await session.execute(select(func.lower(InventoryItem.name)))
    existing = set(res.scalars().all())
    await session.commit()

    todo = [it for it in items if it[0].lower() not in existing]
    if dry_run:
        for name, unit, qty in todo:
            logger.info("DRY RUN: would create %s (%s %s)", name, qty, unit)
        return len(todo)

    store = ItemStore(session)
    ledger = MovementLedger(store)
    for name, unit, qty in todo:
        item = await store.create(name, unit, "0")
        await ledger.add([{"inventory_item_id": item.id, "quantity": qty, "note": "Opening balance"}])
    logger.info("Seeded %d inventory item(s), skipped %d existing", len(todo), len(items) - len(todo))
    return len(todo)


async def run(dry_run: bool):
    await upgrade(engine)
    async with async_session_maker() as session:
        await seed(session, dry_run=dry_run)
    await engine.dispose()


def main():
    p = argparse.ArgumentParser(description="Seed demo inventory items")
    p.add_argument("--dry-run", action="store_true", help="Only log what would be created")
    args = p.parse_args()
    asyncio.run(run(dry_run=args.dry_run))


if __name__ == "__main__":
    main()
