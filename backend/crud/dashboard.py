from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.categories import Category
from models.inventory_items import InventoryItem
from models.transactions import Transaction, TransactionType
from utils import month_start


def get_dashboard_stats(db: Session, now: datetime = None) -> dict:
    """Summary figures, computed from the tables on every call."""
    start = month_start(now)

    total_items = db.query(func.count(InventoryItem.id)).scalar() or 0
    low_stock_items = (
        db.query(func.count(InventoryItem.id))
        .filter(InventoryItem.current_quantity < InventoryItem.minimum_quantity)
        .scalar()
        or 0
    )

    monthly = {
        transaction_type: (count, quantity)
        for transaction_type, count, quantity in (
            db.query(Transaction.type, func.count(Transaction.id), func.coalesce(func.sum(Transaction.quantity), 0))
            .filter(Transaction.created_at >= start)
            .group_by(Transaction.type)
            .all()
        )
    }
    inflow_count, inflow_quantity = monthly.get(TransactionType.IN, (0, 0))
    outflow_count, outflow_quantity = monthly.get(TransactionType.OUT, (0, 0))

    distribution = (
        db.query(Category.id, Category.name, Category.color, func.count(InventoryItem.id))
        .outerjoin(InventoryItem, InventoryItem.category_id == Category.id)
        .group_by(Category.id, Category.name, Category.color)
        .order_by(Category.id)
        .all()
    )

    return {
        "total_items": total_items,
        "low_stock_items": low_stock_items,
        "monthly_inflow": inflow_count,
        "monthly_outflow": outflow_count,
        "monthly_inflow_quantity": int(inflow_quantity),
        "monthly_outflow_quantity": int(outflow_quantity),
        "category_distribution": [
            {"category_id": category_id, "category": name, "color": color, "count": count}
            for category_id, name, color, count in distribution
        ],
    }
