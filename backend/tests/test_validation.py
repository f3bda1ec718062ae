from decimal import Decimal

import pytest

from core.exceptions import ValidationError
from schemas.inventory import StockMovementLine, format_quantity
from services.validation import validate_movement_requests, validate_new_item, validate_page


def test_new_item_is_stripped_and_quantized():
    item = validate_new_item({"name": "  Packing tape ", "unit": "roll", "quantity": "3.5"})
    assert item.name == "Packing tape"
    assert item.unit == "roll"
    assert item.quantity == Decimal("3.50")


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"name": "", "unit": "pcs", "quantity": 1}, "name"),
        ({"name": "   ", "unit": "pcs", "quantity": 1}, "name"),
        ({"name": "x" * 256, "unit": "pcs", "quantity": 1}, "name"),
        ({"name": "Bolt", "unit": None, "quantity": 1}, "unit"),
        ({"name": "Bolt", "unit": "u" * 51, "quantity": 1}, "unit"),
        ({"name": "Bolt", "unit": "pcs", "quantity": -1}, "quantity"),
        ({"name": "Bolt", "unit": "pcs", "quantity": "abc"}, "quantity"),
        ({"name": "Bolt", "unit": "pcs", "quantity": "NaN"}, "quantity"),
        ({"name": "Bolt", "unit": "pcs", "quantity": "1.005"}, "quantity"),
        ({"name": "Bolt", "unit": "pcs", "quantity": "100000000"}, "quantity"),
        ({"name": "Bolt", "unit": "pcs"}, "quantity"),
    ],
)
def test_new_item_rejects_bad_fields(payload, field):
    with pytest.raises(ValidationError) as exc:
        validate_new_item(payload)
    assert field in exc.value.errors


def test_name_at_limit_is_accepted():
    item = validate_new_item({"name": "x" * 255, "unit": "u" * 50, "quantity": 0})
    assert len(item.name) == 255
    assert item.quantity == Decimal("0.00")


def test_movement_requests_carry_kind_and_normalize_note():
    requests = validate_movement_requests(
        [
            {"inventory_item_id": 1, "quantity": 5},
            {"inventory_item_id": 2, "quantity": "0.25", "note": "  restock  "},
            {"inventory_item_id": 3, "quantity": 1, "note": "   "},
        ],
        kind="add",
    )
    assert [r.kind for r in requests] == ["add", "add", "add"]
    assert requests[0].quantity == Decimal("5.00")
    assert requests[1].note == "restock"
    assert requests[2].note is None


def test_movement_requests_accept_schema_rows():
    line = StockMovementLine(inventory_item_id=4, quantity=Decimal("2"), note="x")
    (req,) = validate_movement_requests([line], kind="deduct")
    assert req.inventory_item_id == 4
    assert req.kind == "deduct"


def test_movement_errors_are_keyed_by_row():
    with pytest.raises(ValidationError) as exc:
        validate_movement_requests(
            [
                {"inventory_item_id": 1, "quantity": 5},
                {"inventory_item_id": 2, "quantity": 0},
                {"inventory_item_id": "abc", "quantity": 1, "note": "n" * 501},
            ],
            kind="deduct",
        )
    errors = exc.value.errors
    assert "items.0.quantity" not in errors
    assert "items.1.quantity" in errors
    assert "items.2.inventory_item_id" in errors
    assert "items.2.note" in errors


def test_movement_kind_is_required_without_default():
    with pytest.raises(ValidationError) as exc:
        validate_movement_requests([{"inventory_item_id": 1, "quantity": 1, "kind": "move"}])
    assert "items.0.kind" in exc.value.errors


@pytest.mark.parametrize("raw", [None, [], "items", {"inventory_item_id": 1}])
def test_empty_or_non_list_batch_is_rejected(raw):
    with pytest.raises(ValidationError) as exc:
        validate_movement_requests(raw, kind="add")
    assert "items" in exc.value.errors


def test_negative_magnitude_is_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_movement_requests([{"inventory_item_id": 1, "quantity": "-3"}], kind="add")
    assert exc.value.errors["items.0.quantity"] == ["quantity must be greater than 0"]


def test_validate_page():
    assert validate_page(2, 10) == (2, 10)
    assert validate_page("3", "15") == (3, 15)
    with pytest.raises(ValidationError) as exc:
        validate_page(0, "x")
    assert set(exc.value.errors) == {"page", "page_size"}


def test_format_quantity():
    assert format_quantity(Decimal("7")) == "7.00"
    assert format_quantity(Decimal("0.5")) == "0.50"
    assert format_quantity(None) is None
