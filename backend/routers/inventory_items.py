from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from schemas.inventory_items import InventoryItem, InventoryItemCreate, InventoryItemUpdate
from crud import inventory_items as crud_inventory_items
from crud import categories as crud_categories

router = APIRouter(prefix="/items", tags=["Inventory Items"])
logger = logging.getLogger("inventory_items")


@router.get("", response_model=List[InventoryItem])
def read_inventory_items(
    skip: int = 0,
    limit: int = 100,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Retrieve inventory items, optionally filtered by category or a name/code search."""
    return crud_inventory_items.get_inventory_items(db, skip=skip, limit=limit, category_id=category_id, search=search)


@router.get("/low-stock", response_model=List[InventoryItem])
def read_low_stock_items(db: Session = Depends(get_db)):
    """Items whose current quantity is below their minimum quantity."""
    return crud_inventory_items.get_low_stock_items(db)


@router.get("/category/{category_id}", response_model=List[InventoryItem])
def read_items_by_category(category_id: int, db: Session = Depends(get_db)):
    if crud_categories.get_category(db, category_id) is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return crud_inventory_items.get_items_by_category(db, category_id)


@router.post("", response_model=InventoryItem, status_code=status.HTTP_201_CREATED)
def create_inventory_item(item: InventoryItemCreate, db: Session = Depends(get_db)):
    """Create a new inventory item. An opening quantity is booked as an incoming transaction."""
    return crud_inventory_items.create_inventory_item(db=db, item=item)


@router.get("/{item_id}", response_model=InventoryItem)
def read_inventory_item(item_id: int, db: Session = Depends(get_db)):
    db_item = crud_inventory_items.get_inventory_item(db, item_id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return db_item


@router.put("/{item_id}", response_model=InventoryItem)
def update_inventory_item(item_id: int, item: InventoryItemUpdate, db: Session = Depends(get_db)):
    """Partially update an item. A changed current_quantity is recorded as an adjustment transaction."""
    db_item = crud_inventory_items.update_inventory_item(db, item_id=item_id, item=item)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    logger.info(f"Inventory item '{db_item.name}' (ID: {item_id}) updated")
    return db_item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inventory_item(item_id: int, db: Session = Depends(get_db)):
    if not crud_inventory_items.delete_inventory_item(db, item_id=item_id):
        raise HTTPException(status_code=404, detail="Inventory item not found")
    logger.info(f"Inventory item (ID: {item_id}) deleted")
    return None
