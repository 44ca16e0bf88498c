from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from models.transactions import TransactionType


class TransactionBase(BaseModel):
    item_id: int
    type: TransactionType
    quantity: int = Field(..., gt=0)
    project: Optional[str] = None
    note: Optional[str] = None


class TransactionCreate(TransactionBase):
    pass


class Transaction(TransactionBase):
    id: int
    item_name: Optional[str] = None
    item_code: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
