"""
Stock ledger models.

Models:
- InventoryItem (current quantity per item)
- StockMovement (append-only add/deduct records that explain every quantity change)
"""

from .item import InventoryItem
from .movement import MOVEMENT_TYPES, StockMovement

__all__ = ["InventoryItem", "StockMovement", "MOVEMENT_TYPES"]
