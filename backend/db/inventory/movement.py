from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import relationship

from ..database import Base

MOVEMENT_TYPES = ("add", "deduct")


class StockMovement(Base):
    __tablename__ = "stock_movements"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_movements_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)

    inventory_item_id = Column(
        Integer,
        ForeignKey("inventory_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = Column(Enum(*MOVEMENT_TYPES, name="stock_movement_type"), nullable=False)
    # magnitude of the change; the sign comes from `type`
    quantity = Column(Numeric(10, 2), nullable=False)
    note = Column(Text, nullable=True)

    # Set by the ledger to the batch's transaction time
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    inventory_item = relationship("InventoryItem", back_populates="movements")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "inventory_item_id": self.inventory_item_id,
            "type": self.type,
            "quantity": self.quantity,
            "note": self.note,
            "created_at": self.created_at,
        }
