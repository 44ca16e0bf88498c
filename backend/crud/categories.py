from sqlalchemy import func
from sqlalchemy.orm import Session
from models.categories import Category
from models.inventory_items import InventoryItem
from schemas.categories import CategoryCreate, CategoryUpdate

DEFAULT_CATEGORIES = [
    {"name": "케이블 종류", "description": "각종 케이블 자재", "color": "#0062FF"},
    {"name": "등기구 종류", "description": "조명 및 전기 등기구", "color": "#24A148"},
    {"name": "통신자재 종류", "description": "통신 관련 자재", "color": "#8A3FFC"},
    {"name": "공구 종류", "description": "작업용 공구", "color": "#FF832B"},
]

# Item code prefixes for the default categories
CATEGORY_CODE_PREFIXES = {
    "케이블 종류": "C",
    "등기구 종류": "L",
    "통신자재 종류": "T",
    "공구 종류": "P",
}


def category_code_prefix(category_name: str) -> str:
    if category_name in CATEGORY_CODE_PREFIXES:
        return CATEGORY_CODE_PREFIXES[category_name]
    first = (category_name or "").strip()[:1].upper()
    if first.isascii() and first.isalnum():
        return first
    return "X"


def get_category(db: Session, category_id: int):
    return db.query(Category).filter(Category.id == category_id).first()


def get_category_by_name(db: Session, name: str):
    return db.query(Category).filter(Category.name == name).first()


def get_categories(db: Session, skip: int = 0, limit: int = 100):
    return db.query(Category).order_by(Category.id).offset(skip).limit(limit).all()


def count_items_in_category(db: Session, category_id: int) -> int:
    return db.query(func.count(InventoryItem.id)).filter(InventoryItem.category_id == category_id).scalar() or 0


def create_category(db: Session, category: CategoryCreate):
    db_category = Category(**category.model_dump())
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


def update_category(db: Session, category_id: int, category: CategoryUpdate):
    db_category = get_category(db, category_id)
    if db_category:
        update_data = category.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if key in ("name", "color") and value is None:
                continue
            setattr(db_category, key, value)
        db.commit()
        db.refresh(db_category)
    return db_category


def delete_category(db: Session, category_id: int) -> bool:
    db_category = get_category(db, category_id)
    if db_category is None:
        return False
    db.delete(db_category)
    db.commit()
    return True


def initialize_default_categories(db: Session):
    """Create any missing default categories. Safe to call repeatedly."""
    created = []
    for data in DEFAULT_CATEGORIES:
        if get_category_by_name(db, data["name"]) is None:
            db_category = Category(**data)
            db.add(db_category)
            created.append(db_category)
    if created:
        db.commit()
        for db_category in created:
            db.refresh(db_category)
    return created
