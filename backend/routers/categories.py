from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
import logging

from database import get_db
from schemas.categories import Category, CategoryCreate, CategoryUpdate
from crud import categories as crud_categories

router = APIRouter(prefix="/categories", tags=["Categories"])
logger = logging.getLogger("categories")


@router.get("", response_model=List[Category])
def read_categories(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return crud_categories.get_categories(db, skip=skip, limit=limit)


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    """Create a new category."""
    if crud_categories.get_category_by_name(db, category.name):
        raise HTTPException(status_code=400, detail="Category with this name already exists")
    db_category = crud_categories.create_category(db, category)
    logger.info(f"Category '{db_category.name}' (ID: {db_category.id}) created")
    return db_category


@router.post("/initialize-defaults", response_model=List[Category], status_code=status.HTTP_201_CREATED)
def initialize_default_categories(db: Session = Depends(get_db)):
    """
    Creates the default categories that do not exist yet.
    This is idempotent; existing categories are left untouched.
    """
    created = crud_categories.initialize_default_categories(db)
    logger.info(f"Initialized {len(created)} default categories")
    return created


@router.get("/{category_id}", response_model=Category)
def read_category(category_id: int, db: Session = Depends(get_db)):
    db_category = crud_categories.get_category(db, category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return db_category


@router.put("/{category_id}", response_model=Category)
def update_category(category_id: int, category: CategoryUpdate, db: Session = Depends(get_db)):
    db_category = crud_categories.get_category(db, category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    if category.name is not None and category.name != db_category.name:
        if crud_categories.get_category_by_name(db, category.name):
            raise HTTPException(status_code=400, detail="Category with this name already exists")
    updated = crud_categories.update_category(db, category_id, category)
    logger.info(f"Category '{updated.name}' (ID: {category_id}) updated")
    return updated


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    """Delete a category. Categories still referenced by items cannot be deleted."""
    db_category = crud_categories.get_category(db, category_id)
    if db_category is None:
        raise HTTPException(status_code=404, detail="Category not found")

    item_count = crud_categories.count_items_in_category(db, category_id)
    if item_count:
        logger.warning(f"Refused to delete category '{db_category.name}' (ID: {category_id}): {item_count} items use it")
        raise HTTPException(
            status_code=400,
            detail=f"Category is in use by {item_count} items and cannot be deleted",
        )

    crud_categories.delete_category(db, category_id)
    logger.info(f"Category (ID: {category_id}) deleted")
    return None
