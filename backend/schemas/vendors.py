from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class VendorBase(BaseModel):
    name: str = Field(..., min_length=1)
    contact_name: Optional[str] = None
    email: Optional[EmailStr] = None  # Optional, and validates email format
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_to_none(cls, value):
        return _blank_to_none(value)


class VendorCreate(VendorBase):
    pass


class VendorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    contact_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_to_none(cls, value):
        return _blank_to_none(value)


class Vendor(VendorBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
