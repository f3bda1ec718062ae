from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity_non_negative"),
    )
    # load server-generated timestamps during flush
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False, index=True)
    unit = Column(String(50), nullable=False)

    # Only ever written by the movement ledger after creation
    quantity = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    movements = relationship(
        "StockMovement",
        back_populates="inventory_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "quantity": self.quantity,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
