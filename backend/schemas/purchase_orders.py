from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from models.purchase_orders import PurchaseOrderStatus
from schemas.purchase_order_items import (
    PurchaseOrderItem,
    PurchaseOrderItemCreate,
    PurchaseOrderItemSync,
)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class PurchaseOrderBase(BaseModel):
    order_date: Optional[date] = None  # defaults to today
    project_name: str = Field(..., min_length=1)
    manager: str = Field(..., min_length=1)
    contact_number: Optional[str] = None
    vendor_id: Optional[int] = None
    # Taken from the vendor record when vendor_id is given and these are left out
    vendor_name: Optional[str] = None
    vendor_contact: Optional[str] = None
    vendor_email: Optional[EmailStr] = None
    expected_delivery_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("vendor_email", mode="before")
    @classmethod
    def blank_email_to_none(cls, value):
        return _blank_to_none(value)


class PurchaseOrderCreate(PurchaseOrderBase):
    pass


class PurchaseOrderUpdate(BaseModel):
    status: Optional[PurchaseOrderStatus] = None
    order_date: Optional[date] = None
    project_name: Optional[str] = Field(None, min_length=1)
    manager: Optional[str] = Field(None, min_length=1)
    contact_number: Optional[str] = None
    vendor_id: Optional[int] = None
    vendor_name: Optional[str] = Field(None, min_length=1)
    vendor_contact: Optional[str] = None
    vendor_email: Optional[EmailStr] = None
    expected_delivery_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("vendor_email", mode="before")
    @classmethod
    def blank_email_to_none(cls, value):
        return _blank_to_none(value)


class PurchaseOrderCreateRequest(BaseModel):
    order: PurchaseOrderCreate
    items: List[PurchaseOrderItemCreate] = []


class PurchaseOrderUpdateRequest(BaseModel):
    order: Optional[PurchaseOrderUpdate] = None
    # When present, replaces the order's lines: entries with an id are
    # updated, entries without one are added, lines not listed are removed.
    items: Optional[List[PurchaseOrderItemSync]] = None


class PurchaseOrder(BaseModel):
    id: int
    order_number: str
    status: PurchaseOrderStatus
    order_date: date
    project_name: str
    manager: str
    contact_number: Optional[str] = None
    vendor_id: Optional[int] = None
    vendor_name: str
    vendor_contact: Optional[str] = None
    vendor_email: Optional[str] = None
    expected_delivery_date: Optional[date] = None
    notes: Optional[str] = None
    total_amount: Decimal
    pdf_path: Optional[str] = None
    email_sent: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PurchaseOrderDetail(BaseModel):
    order: PurchaseOrder
    items: List[PurchaseOrderItem]


class PurchaseOrderEmailRequest(BaseModel):
    email: Optional[EmailStr] = None  # falls back to the order's vendor_email

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_to_none(cls, value):
        return _blank_to_none(value)


class PurchaseOrderEmailResult(BaseModel):
    message: str
    email: str
    pdf_path: str
