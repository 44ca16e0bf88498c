from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.transactions import TransactionType
from schemas.transactions import Transaction, TransactionCreate
from crud import transactions as crud_transactions
from crud import inventory_items as crud_inventory_items

router = APIRouter(prefix="/transactions", tags=["Transactions"])
logger = logging.getLogger("transactions")


@router.get("", response_model=List[Transaction])
def read_transactions(
    skip: int = 0,
    limit: int = 100,
    type: Optional[TransactionType] = None,
    item_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """Stock movements, newest first. Dates are inclusive and in the application timezone."""
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    return crud_transactions.get_transactions(
        db, skip=skip, limit=limit, type=type, item_id=item_id, start_date=start_date, end_date=end_date
    )


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
def create_transaction(transaction: TransactionCreate, db: Session = Depends(get_db)):
    """Record an incoming or outgoing movement and update the item's stock.

    Outgoing movements larger than the available stock are rejected with 409.
    """
    return crud_transactions.create_transaction(db, transaction)


@router.get("/item/{item_id}", response_model=List[Transaction])
def read_item_transactions(item_id: int, db: Session = Depends(get_db)):
    if crud_inventory_items.get_inventory_item(db, item_id) is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return crud_transactions.get_transactions_by_item(db, item_id)


@router.get("/{transaction_id}", response_model=Transaction)
def read_transaction(transaction_id: int, db: Session = Depends(get_db)):
    db_transaction = crud_transactions.get_transaction(db, transaction_id)
    if db_transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return db_transaction
