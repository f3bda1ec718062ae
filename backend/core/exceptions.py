from decimal import Decimal
from typing import Dict, List, Optional


class ApplicationError(Exception):
    """Base class for application-specific errors."""
    pass


class ValidationError(ApplicationError):
    """Raised for malformed or out-of-range input, before anything is written."""

    def __init__(self, message: str = "The given data was invalid.", errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or {}


class NotFoundError(ApplicationError):
    """Raised when a referenced inventory item does not exist."""

    def __init__(self, item_id, message: Optional[str] = None):
        self.item_id = item_id
        self.message = message or f"Inventory item {item_id} not found"
        super().__init__(self.message)


class InsufficientStockError(ApplicationError):
    """Raised when a deduct would drive an item's quantity below zero."""

    def __init__(self, item_id: int, item_name: str, requested: Decimal, available: Decimal):
        self.item_id = item_id
        self.item_name = item_name
        self.requested = requested
        self.available = available
        self.message = f"Not enough stock for item: {item_name}"
        super().__init__(self.message)


class TransientStorageError(ApplicationError):
    """Raised for lock waits, deadlocks and lost connections. The batch can be resubmitted unchanged."""

    def __init__(self, message="The storage backend is temporarily unavailable.", original_exception=None):
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception
