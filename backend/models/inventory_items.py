from sqlalchemy import Column, Integer, String, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from database import Base
from models.audit_mixin import TimestampMixin


class InventoryItem(Base, TimestampMixin):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(32), unique=True, nullable=False, index=True)  # e.g. "C-2024-0001"
    name = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    specification = Column(Text, nullable=True)
    unit_type = Column(String(20), nullable=True)  # e.g. "M", "EA", "식", "조"
    # Maintained only through the transaction ledger
    current_quantity = Column(Integer, nullable=False, default=0)
    minimum_quantity = Column(Integer, nullable=False, default=0)
    location = Column(String, nullable=True)
    unit_price = Column(Numeric(12, 2), nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    category = relationship("Category", back_populates="items")
    transactions = relationship(
        "Transaction",
        back_populates="item",
        cascade="all, delete-orphan",
    )
    # Purchase order lines keep their own copy of name/spec and are unlinked on delete
    purchase_order_items = relationship("PurchaseOrderItem", back_populates="inventory_item")

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def is_low_stock(self) -> bool:
        return (self.current_quantity or 0) < (self.minimum_quantity or 0)
