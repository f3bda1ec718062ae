from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


MovementType = Literal["add", "deduct"]

NAME_MAX_LENGTH = 255
UNIT_MAX_LENGTH = 50
NOTE_MAX_LENGTH = 500

# decimal(10, 2)
MAX_QUANTITY = Decimal("99999999.99")
TWO_PLACES = Decimal("0.01")


def parse_quantity(v: Any) -> Decimal:
    """Coerce user input to a finite Decimal with at most two fractional digits."""
    if isinstance(v, bool):
        raise ValueError("quantity must be a number")
    if isinstance(v, float):
        v = repr(v)
    try:
        d = Decimal(str(v).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError("quantity must be a number")
    if not d.is_finite():
        raise ValueError("quantity must be a number")
    if abs(d) > MAX_QUANTITY:
        raise ValueError(f"quantity may not be greater than {MAX_QUANTITY}")
    if d.as_tuple().exponent < -2 and d != d.quantize(TWO_PLACES):
        raise ValueError("quantity may have at most 2 decimal places")
    return d.quantize(TWO_PLACES)


def format_quantity(v: Optional[Decimal]) -> Optional[str]:
    if v is None:
        return None
    return str(Decimal(v).quantize(TWO_PLACES))


class InventoryItemCreate(BaseModel):
    name: str
    unit: str
    quantity: Decimal

    @field_validator("name", "unit", mode="before")
    @classmethod
    def _strip_required(cls, v: Any) -> str:
        if v is None:
            raise ValueError("field is required")
        if not isinstance(v, str):
            raise ValueError("must be a string")
        v = v.strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("name")
    @classmethod
    def _name_length(cls, v: str) -> str:
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(f"may not be greater than {NAME_MAX_LENGTH} characters")
        return v

    @field_validator("unit")
    @classmethod
    def _unit_length(cls, v: str) -> str:
        if len(v) > UNIT_MAX_LENGTH:
            raise ValueError(f"may not be greater than {UNIT_MAX_LENGTH} characters")
        return v

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_non_negative(cls, v: Any) -> Decimal:
        d = parse_quantity(v)
        if d < 0:
            raise ValueError("quantity must be at least 0")
        return d


class StockMovementLine(BaseModel):
    """One row of an add/deduct request body."""

    inventory_item_id: int = Field(..., gt=0)
    quantity: Decimal
    note: Optional[str] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity_positive(cls, v: Any) -> Decimal:
        d = parse_quantity(v)
        if d <= 0:
            raise ValueError("quantity must be greater than 0")
        return d

    @field_validator("note")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if len(v) > NOTE_MAX_LENGTH:
            raise ValueError(f"may not be greater than {NOTE_MAX_LENGTH} characters")
        return v or None


class MovementRequest(StockMovementLine):
    kind: MovementType


class StockBatchRequest(BaseModel):
    items: List[StockMovementLine] = Field(..., min_length=1)


class InventoryItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    unit: str
    quantity: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("quantity")
    def _quantity_str(self, v: Decimal) -> str:
        return format_quantity(v)


class StockMovementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    inventory_item_id: int
    type: MovementType
    quantity: Decimal
    note: Optional[str] = None
    created_at: datetime

    @field_serializer("quantity")
    def _quantity_str(self, v: Decimal) -> str:
        return format_quantity(v)
