from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class InventoryItemBase(BaseModel):
    name: str = Field(..., min_length=1)
    category_id: int
    specification: Optional[str] = None
    unit_type: Optional[str] = None  # e.g. "M", "EA", "식", "조"
    minimum_quantity: int = Field(0, ge=0)
    location: Optional[str] = None
    unit_price: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class InventoryItemCreate(InventoryItemBase):
    # Opening stock; recorded as an "in" transaction, never written directly
    current_quantity: int = Field(0, ge=0)


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category_id: Optional[int] = None
    specification: Optional[str] = None
    unit_type: Optional[str] = None
    # A changed value is turned into a corrective transaction
    current_quantity: Optional[int] = Field(None, ge=0)
    minimum_quantity: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    unit_price: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class InventoryItem(InventoryItemBase):
    id: int
    code: str
    category_name: Optional[str] = None
    current_quantity: int
    is_low_stock: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
