"""
Input validation for the item store and the movement ledger.

Every function either returns typed, normalized input or raises
``core.exceptions.ValidationError`` with field-level messages keyed by the
path of the offending field (``name``, ``items.1.quantity``, ...).
Nothing here touches the database.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from schemas.inventory import InventoryItemCreate, MovementRequest, MovementType

INVALID_DATA_MESSAGE = "The given data was invalid."


def _collect_errors(exc: PydanticValidationError, prefix: str = "") -> Dict[str, List[str]]:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        key = f"{prefix}{loc}" if loc else prefix.rstrip(".") or "__root__"
        msg = err.get("msg", "invalid value")
        # pydantic prefixes messages raised from our own validators
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.setdefault(key, []).append(msg)
    return errors


def _as_dict(raw: Any) -> Optional[dict]:
    if isinstance(raw, BaseModel):
        return raw.model_dump()
    if isinstance(raw, Mapping):
        return dict(raw)
    return None


def validate_new_item(raw: Any) -> InventoryItemCreate:
    data = _as_dict(raw)
    if data is None:
        raise ValidationError(INVALID_DATA_MESSAGE, {"__root__": ["must be an object"]})
    try:
        return InventoryItemCreate.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(INVALID_DATA_MESSAGE, _collect_errors(e)) from e


def validate_movement_requests(raw: Any, kind: Optional[MovementType] = None) -> List[MovementRequest]:
    """Validate a whole batch. `kind`, when given, is stamped on every row."""
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence) or len(raw) == 0:
        raise ValidationError(INVALID_DATA_MESSAGE, {"items": ["at least one item is required"]})

    errors: Dict[str, List[str]] = {}
    requests: List[MovementRequest] = []
    for idx, row in enumerate(raw):
        data = _as_dict(row)
        if data is None:
            errors.setdefault(f"items.{idx}", []).append("must be an object")
            continue
        if kind is not None:
            data["kind"] = kind
        try:
            requests.append(MovementRequest.model_validate(data))
        except PydanticValidationError as e:
            for key, messages in _collect_errors(e, prefix=f"items.{idx}.").items():
                errors.setdefault(key, []).extend(messages)

    if errors:
        raise ValidationError(INVALID_DATA_MESSAGE, errors)
    return requests


def validate_page(page: Any, page_size: Any) -> tuple[int, int]:
    errors: Dict[str, List[str]] = {}
    out = []
    for field, value in (("page", page), ("page_size", page_size)):
        try:
            if isinstance(value, bool):
                raise ValueError
            n = int(value)
        except (TypeError, ValueError):
            errors[field] = ["must be an integer"]
            continue
        if n < 1:
            errors[field] = ["must be at least 1"]
            continue
        out.append(n)
    if errors:
        raise ValidationError(INVALID_DATA_MESSAGE, errors)
    return out[0], out[1]
