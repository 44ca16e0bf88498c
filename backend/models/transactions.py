from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from database import Base
from utils import local_now
import enum


class TransactionType(enum.Enum):
    IN = "in"
    OUT = "out"


class Transaction(Base):
    """One stock movement. Rows are never updated once written."""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(TransactionType, name="transaction_type"), nullable=False)
    quantity = Column(Integer, nullable=False)
    project = Column(String, nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=local_now, nullable=False, index=True)

    item = relationship("InventoryItem", back_populates="transactions")

    @property
    def item_name(self):
        return self.item.name if self.item else None

    @property
    def item_code(self):
        return self.item.code if self.item else None
