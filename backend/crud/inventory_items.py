import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from crud.categories import category_code_prefix, get_category
from crud.transactions import apply_transaction, lock_item
from exceptions import NotFoundError
from models.inventory_items import InventoryItem
from models.transactions import TransactionType
from schemas.inventory_items import InventoryItemCreate, InventoryItemUpdate
from utils import local_now

logger = logging.getLogger("inventory_items")

INITIAL_REGISTRATION_PROJECT = "initial registration"
INITIAL_REGISTRATION_NOTE = "initial stock on item registration"
ADJUSTMENT_PROJECT = "stock adjustment"
ADJUSTMENT_NOTE = "administrator adjustment"

# Columns that cannot be cleared through a partial update
REQUIRED_FIELDS = ("name", "category_id", "minimum_quantity")


def generate_item_code(db: Session, category_name: str) -> str:
    """Next free code of the form ``<prefix>-<year>-<NNNN>``."""
    prefix = f"{category_code_prefix(category_name)}-{local_now().year}-"
    codes = db.query(InventoryItem.code).filter(InventoryItem.code.like(f"{prefix}%")).all()
    numbers = [int(code.rsplit("-", 1)[1]) for (code,) in codes if code.rsplit("-", 1)[1].isdigit()]
    return f"{prefix}{max(numbers, default=0) + 1:04d}"


def get_inventory_item(db: Session, item_id: int):
    return (
        db.query(InventoryItem)
        .options(joinedload(InventoryItem.category))
        .filter(InventoryItem.id == item_id)
        .first()
    )


def get_inventory_items(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
):
    query = db.query(InventoryItem).options(joinedload(InventoryItem.category))
    if category_id:
        query = query.filter(InventoryItem.category_id == category_id)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(InventoryItem.name.ilike(pattern), InventoryItem.code.ilike(pattern)))
    return query.order_by(InventoryItem.id).offset(skip).limit(limit).all()


def get_items_by_category(db: Session, category_id: int):
    return (
        db.query(InventoryItem)
        .filter(InventoryItem.category_id == category_id)
        .order_by(InventoryItem.id)
        .all()
    )


def get_low_stock_items(db: Session):
    return (
        db.query(InventoryItem)
        .filter(InventoryItem.current_quantity < InventoryItem.minimum_quantity)
        .order_by(InventoryItem.id)
        .all()
    )


def create_inventory_item(db: Session, item: InventoryItemCreate):
    """Create an item; opening stock goes through the ledger as one "in" movement."""
    category = get_category(db, item.category_id)
    if category is None:
        raise NotFoundError(f"Category {item.category_id} not found")

    db_item = InventoryItem(
        **item.model_dump(exclude={"current_quantity"}),
        code=generate_item_code(db, category.name),
        current_quantity=0,
    )
    db.add(db_item)
    db.flush()

    if item.current_quantity > 0:
        apply_transaction(
            db,
            db_item,
            TransactionType.IN,
            item.current_quantity,
            project=INITIAL_REGISTRATION_PROJECT,
            note=INITIAL_REGISTRATION_NOTE,
        )

    db.commit()
    db.refresh(db_item)
    logger.info(f"Inventory item '{db_item.name}' created with code {db_item.code} and quantity {db_item.current_quantity}")
    return db_item


def update_inventory_item(db: Session, item_id: int, item: InventoryItemUpdate):
    db_item = lock_item(db, item_id)
    if db_item is None:
        return None

    update_data = item.model_dump(exclude_unset=True)
    new_quantity = update_data.pop("current_quantity", None)
    for key in REQUIRED_FIELDS:
        if key in update_data and update_data[key] is None:
            update_data.pop(key)

    category_id = update_data.get("category_id")
    if category_id is not None and category_id != db_item.category_id and get_category(db, category_id) is None:
        raise NotFoundError(f"Category {category_id} not found")

    # The corrective movement is recorded before the other fields change
    if new_quantity is not None and new_quantity != db_item.current_quantity:
        difference = new_quantity - (db_item.current_quantity or 0)
        apply_transaction(
            db,
            db_item,
            TransactionType.IN if difference > 0 else TransactionType.OUT,
            abs(difference),
            project=ADJUSTMENT_PROJECT,
            note=ADJUSTMENT_NOTE,
        )
        logger.info(f"Quantity of item {db_item.code} adjusted by {difference} to {new_quantity}")

    for key, value in update_data.items():
        setattr(db_item, key, value)

    db.commit()
    db.refresh(db_item)
    return db_item


def delete_inventory_item(db: Session, item_id: int) -> bool:
    """Delete an item with its ledger rows; purchase order lines are unlinked."""
    db_item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
    if db_item is None:
        return False
    db.delete(db_item)
    db.commit()
    return True
