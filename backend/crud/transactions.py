"""
Stock ledger.

``InventoryItem.current_quantity`` is only ever changed here: every movement
writes an immutable ``Transaction`` row and adjusts the item in the same
database transaction, with the item row locked (SELECT ... FOR UPDATE) so
concurrent movements on one item are serialised.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from exceptions import InsufficientStockError, NotFoundError
from models.inventory_items import InventoryItem
from models.transactions import Transaction, TransactionType
from schemas.transactions import TransactionCreate
from utils import get_timezone, local_now

logger = logging.getLogger("transactions")


def get_transaction(db: Session, transaction_id: int):
    return db.query(Transaction).filter(Transaction.id == transaction_id).first()


def get_transactions(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    type: Optional[TransactionType] = None,
    item_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    query = db.query(Transaction).options(joinedload(Transaction.item))
    if type:
        query = query.filter(Transaction.type == type)
    if item_id:
        query = query.filter(Transaction.item_id == item_id)
    tz = get_timezone()
    if start_date:
        query = query.filter(Transaction.created_at >= tz.localize(datetime.combine(start_date, time.min)))
    if end_date:
        # end_date is inclusive
        next_day = tz.localize(datetime.combine(end_date + timedelta(days=1), time.min))
        query = query.filter(Transaction.created_at < next_day)
    return (
        query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_transactions_by_item(db: Session, item_id: int):
    return (
        db.query(Transaction)
        .filter(Transaction.item_id == item_id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .all()
    )


def lock_item(db: Session, item_id: int) -> Optional[InventoryItem]:
    return db.query(InventoryItem).filter(InventoryItem.id == item_id).with_for_update().first()


def apply_transaction(
    db: Session,
    item: InventoryItem,
    type: TransactionType,
    quantity: int,
    project: Optional[str] = None,
    note: Optional[str] = None,
) -> Transaction:
    """Write one ledger row and move the (already locked) item's stock.

    Nothing is committed; the caller decides where the database transaction ends.
    """
    current = item.current_quantity or 0
    delta = quantity if type == TransactionType.IN else -quantity
    new_quantity = current + delta
    if new_quantity < 0:
        raise InsufficientStockError(item.code, current, quantity)

    db_transaction = Transaction(
        item_id=item.id,
        type=type,
        quantity=quantity,
        project=project,
        note=note,
    )
    db.add(db_transaction)
    item.current_quantity = new_quantity
    item.updated_at = local_now()
    db.flush()
    return db_transaction


def create_transaction(db: Session, transaction: TransactionCreate, commit: bool = True) -> Transaction:
    item = lock_item(db, transaction.item_id)
    if item is None:
        raise NotFoundError(f"Inventory item {transaction.item_id} not found")

    try:
        db_transaction = apply_transaction(
            db,
            item,
            transaction.type,
            transaction.quantity,
            project=transaction.project,
            note=transaction.note,
        )
    except InsufficientStockError:
        if commit:
            db.rollback()
        logger.warning(
            f"Rejected '{transaction.type.value}' of {transaction.quantity} for item {item.code}: "
            f"only {item.current_quantity} in stock"
        )
        raise

    if commit:
        db.commit()
        db.refresh(db_transaction)
    logger.info(
        f"Transaction '{transaction.type.value}' of {transaction.quantity} recorded for item {item.code}"
    )
    return db_transaction
