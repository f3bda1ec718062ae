from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

# The module-level engine is never connected in tests; each test gets its own database file.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from db.database import build_engine, build_session_maker, get_async_session  # noqa: E402
from db.inventory import InventoryItem, StockMovement  # noqa: E402
from db.migrations import upgrade  # noqa: E402
from services.item_store import ItemStore  # noqa: E402
from services.ledger import MovementLedger  # noqa: E402


@pytest.fixture()
async def engine(tmp_path):
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}")
    await upgrade(eng)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture()
def session_maker(engine):
    return build_session_maker(engine)


@pytest.fixture()
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture()
def store(db_session):
    return ItemStore(db_session)


@pytest.fixture()
def ledger(store):
    return MovementLedger(store)


@pytest.fixture()
async def client(session_maker):
    from main import app

    async def _session_override():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _session_override
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()


async def committed_quantity(session_maker, item_id):
    """Quantity as seen by a fresh session, i.e. only committed state."""
    async with session_maker() as session:
        res = await session.execute(select(InventoryItem.quantity).where(InventoryItem.id == item_id))
        return res.scalar_one()


async def committed_movements(session_maker, item_id):
    async with session_maker() as session:
        res = await session.execute(
            select(StockMovement)
            .where(StockMovement.inventory_item_id == item_id)
            .order_by(StockMovement.id)
        )
        return res.scalars().all()
