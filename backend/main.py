from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.exceptions import (
    InsufficientStockError,
    NotFoundError,
    TransientStorageError,
    ValidationError,
)
from core.logging_config import get_child_logger
from db.database import engine
from db.migrations import upgrade
from routers.inventory import router as inventory_router
from schemas.inventory import format_quantity

logger = get_child_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await upgrade(engine)
    yield
    await engine.dispose()


app = FastAPI(
    title="Stock Ledger API",
    description="API for tracking inventory items and their stock movements",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": {"message": exc.message, "errors": exc.errors}},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": {"message": exc.message, "item_id": exc.item_id}},
    )


@app.exception_handler(InsufficientStockError)
async def insufficient_stock_handler(request: Request, exc: InsufficientStockError):
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "message": exc.message,
                "item_id": exc.item_id,
                "item_name": exc.item_name,
                "requested": format_quantity(exc.requested),
                "available": format_quantity(exc.available),
            }
        },
    )


@app.exception_handler(TransientStorageError)
async def transient_storage_handler(request: Request, exc: TransientStorageError):
    logger.warning("%s %s failed with a transient storage error", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": {"message": exc.message}},
        headers={"Retry-After": "1"},
    )


@app.get("/", tags=["health"])
async def read_root():
    return {"status": "ok", "service": "stock-ledger"}


# Inventory and stock movement routes
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
