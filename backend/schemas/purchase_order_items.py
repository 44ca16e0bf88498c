from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal


class PurchaseOrderItemBase(BaseModel):
    item_id: Optional[int] = None  # link to an inventory item, if any
    item_name: str = Field(..., min_length=1)
    specification: Optional[str] = None
    unit_type: Optional[str] = None
    quantity: int = Field(..., gt=0)
    # Falls back to the inventory item's unit price when left out
    unit_price: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class PurchaseOrderItemCreate(PurchaseOrderItemBase):
    pass


class PurchaseOrderItemUpdate(BaseModel):
    item_id: Optional[int] = None
    item_name: Optional[str] = Field(None, min_length=1)
    specification: Optional[str] = None
    unit_type: Optional[str] = None
    quantity: Optional[int] = Field(None, gt=0)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class PurchaseOrderItemSync(PurchaseOrderItemBase):
    id: Optional[int] = None


class PurchaseOrderItem(PurchaseOrderItemBase):
    id: int
    purchase_order_id: int
    amount: Decimal

    class Config:
        from_attributes = True
