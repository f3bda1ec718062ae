from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import TransientStorageError
from core.logging_config import get_child_logger

logger = get_child_logger("transaction")

# serialization_failure, deadlock_detected, lock_not_available
TRANSIENT_SQLSTATES = {"40001", "40P01", "55P03"}


def is_transient(exc: DBAPIError) -> bool:
    """True for failures where resubmitting the same batch can succeed."""
    if exc.connection_invalidated:
        return True
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in TRANSIENT_SQLSTATES:
        return True
    if isinstance(exc, OperationalError):
        msg = str(orig).lower()
        # sqlite: "database is locked" / "database table is locked" / SQLITE_BUSY
        return "locked" in msg or "busy" in msg
    return False


@asynccontextmanager
async def scoped_transaction(db: AsyncSession):
    """
    Run the body as one unit of work: commit on normal exit, roll back on
    every other exit (errors, cancellation).

    Joins a transaction the session already autobegan, since the caller may
    have read through the same session before.
    """
    try:
        yield db
        await db.commit()
    except DBAPIError as e:
        await db.rollback()
        if is_transient(e):
            logger.warning("Transient storage failure, transaction rolled back: %s", e.orig)
            raise TransientStorageError(original_exception=e) from e
        logger.error("Storage failure, transaction rolled back", exc_info=True)
        raise
    except BaseException:
        await db.rollback()
        raise


@asynccontextmanager
async def read_snapshot(db: AsyncSession):
    """Group reads into one short transaction unless the caller already has one open."""
    if db.in_transaction():
        yield db
        return
    try:
        async with db.begin():
            yield db
    except DBAPIError as e:
        if is_transient(e):
            raise TransientStorageError(original_exception=e) from e
        raise
