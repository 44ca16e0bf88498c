"""
Purchase orders and their lines.

Every change to a line recomputes that line's ``amount`` and then the
order's ``total_amount`` before the commit, with the order row locked for
the duration.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from exceptions import BadRequestError, ConflictError, InvalidStatusTransitionError, NotFoundError
from models.inventory_items import InventoryItem
from models.purchase_order_items import PurchaseOrderItem
from models.purchase_orders import ALLOWED_STATUS_PREDECESSORS, PurchaseOrder, PurchaseOrderStatus
from models.vendors import Vendor
from schemas.purchase_order_items import PurchaseOrderItemCreate, PurchaseOrderItemSync, PurchaseOrderItemUpdate
from schemas.purchase_orders import PurchaseOrderCreate, PurchaseOrderUpdate
from utils import local_now

logger = logging.getLogger("purchase_orders")

TWO_PLACES = Decimal("0.01")

# Lines of orders in these states are frozen
CLOSED_STATUSES = (PurchaseOrderStatus.RECEIVED, PurchaseOrderStatus.CANCELED)

REQUIRED_ORDER_FIELDS = ("order_date", "project_name", "manager", "vendor_name")


def generate_order_number(db: Session) -> str:
    """Next order number of the form ``PO-YYYYMM-NNNN``, numbered per month."""
    prefix = f"PO-{local_now():%Y%m}-"
    numbers = [
        int(number.rsplit("-", 1)[1])
        for (number,) in db.query(PurchaseOrder.order_number).filter(PurchaseOrder.order_number.like(f"{prefix}%")).all()
        if number.rsplit("-", 1)[1].isdigit()
    ]
    return f"{prefix}{max(numbers, default=0) + 1:04d}"


def line_amount(quantity, unit_price) -> Decimal:
    if quantity is None or unit_price is None:
        return Decimal("0.00")
    return (Decimal(quantity) * Decimal(unit_price)).quantize(TWO_PLACES)


def recalculate_total(db_po: PurchaseOrder) -> Decimal:
    db_po.total_amount = sum((Decimal(line.amount or 0) for line in db_po.items), Decimal("0.00")).quantize(TWO_PLACES)
    return db_po.total_amount


def check_status_transition(current: PurchaseOrderStatus, target: PurchaseOrderStatus) -> bool:
    """True when the status actually changes; raises if the move is not allowed."""
    if current == target:
        return False
    if current not in ALLOWED_STATUS_PREDECESSORS.get(target, set()):
        raise InvalidStatusTransitionError(current, target)
    return True


def get_purchase_order(db: Session, po_id: int):
    return (
        db.query(PurchaseOrder)
        .options(selectinload(PurchaseOrder.items))
        .filter(PurchaseOrder.id == po_id)
        .first()
    )


def get_purchase_orders(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    status: Optional[PurchaseOrderStatus] = None,
    vendor_id: Optional[int] = None,
):
    query = db.query(PurchaseOrder)
    if status:
        query = query.filter(PurchaseOrder.status == status)
    if vendor_id:
        query = query.filter(PurchaseOrder.vendor_id == vendor_id)
    return query.order_by(PurchaseOrder.created_at.desc(), PurchaseOrder.id.desc()).offset(skip).limit(limit).all()


def lock_purchase_order(db: Session, po_id: int) -> PurchaseOrder:
    db_po = db.query(PurchaseOrder).filter(PurchaseOrder.id == po_id).with_for_update().first()
    if db_po is None:
        raise NotFoundError("Purchase Order not found")
    return db_po


def _ensure_open(db_po: PurchaseOrder):
    if db_po.status in CLOSED_STATUSES:
        raise ConflictError(f"Cannot modify items of a purchase order with status '{db_po.status.value}'")


def _fill_vendor_fields(db: Session, data: dict, vendor_changed: bool = True):
    """Copy name/contact/email from the vendor record for fields the caller left empty."""
    vendor_id = data.get("vendor_id")
    if vendor_id is None or not vendor_changed:
        return
    vendor = db.query(Vendor).filter(Vendor.id == vendor_id).first()
    if vendor is None:
        raise NotFoundError(f"Vendor {vendor_id} not found")
    if not data.get("vendor_name"):
        data["vendor_name"] = vendor.name
    if not data.get("vendor_contact"):
        data["vendor_contact"] = vendor.phone
    if not data.get("vendor_email"):
        data["vendor_email"] = vendor.email


def _resolve_unit_price(db: Session, item_id: Optional[int], unit_price):
    if item_id is None:
        return unit_price
    inventory_item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
    if inventory_item is None:
        raise NotFoundError(f"Inventory item {item_id} not found")
    if unit_price is None:
        return inventory_item.unit_price
    return unit_price


def _add_line(db: Session, db_po: PurchaseOrder, data: dict) -> PurchaseOrderItem:
    data = dict(data)
    data.pop("id", None)
    data["unit_price"] = _resolve_unit_price(db, data.get("item_id"), data.get("unit_price"))
    line = PurchaseOrderItem(**data, amount=line_amount(data["quantity"], data["unit_price"]))
    db_po.items.append(line)
    return line


def _update_line(db: Session, line: PurchaseOrderItem, data: dict) -> PurchaseOrderItem:
    for key, value in data.items():
        if key == "id" or (key in ("item_name", "quantity") and value is None):
            continue
        setattr(line, key, value)
    line.unit_price = _resolve_unit_price(db, line.item_id, line.unit_price)
    line.amount = line_amount(line.quantity, line.unit_price)
    return line


def _sync_lines(db: Session, db_po: PurchaseOrder, items: List[PurchaseOrderItemSync]):
    existing = {line.id: line for line in db_po.items}
    kept = set()
    for entry in items:
        if entry.id is None:
            _add_line(db, db_po, entry.model_dump())
            continue
        line = existing.get(entry.id)
        if line is None:
            raise NotFoundError(f"Purchase Order Item {entry.id} not found on this order")
        _update_line(db, line, entry.model_dump())
        kept.add(line.id)
    for line_id, line in existing.items():
        if line_id not in kept:
            db_po.items.remove(line)


def create_purchase_order(db: Session, order: PurchaseOrderCreate, items: List[PurchaseOrderItemCreate]):
    data = order.model_dump()
    _fill_vendor_fields(db, data)
    if not data.get("vendor_name"):
        raise BadRequestError("vendor_name is required when no vendor is selected")
    if data.get("order_date") is None:
        data["order_date"] = local_now().date()

    db_po = PurchaseOrder(
        **data,
        order_number=generate_order_number(db),
        status=PurchaseOrderStatus.DRAFT,
        total_amount=Decimal("0.00"),
        email_sent=False,
    )
    db.add(db_po)
    for item in items:
        _add_line(db, db_po, item.model_dump())
    recalculate_total(db_po)
    db.commit()
    db.refresh(db_po)
    logger.info(f"Purchase Order {db_po.order_number} created with {len(db_po.items)} items, total {db_po.total_amount}")
    return db_po


def update_purchase_order(
    db: Session,
    po_id: int,
    order: Optional[PurchaseOrderUpdate] = None,
    items: Optional[List[PurchaseOrderItemSync]] = None,
):
    db_po = lock_purchase_order(db, po_id)

    if order is not None:
        data = order.model_dump(exclude_unset=True)
        new_status = data.pop("status", None)
        for key in REQUIRED_ORDER_FIELDS:
            if key in data and data[key] is None:
                data.pop(key)
        _fill_vendor_fields(db, data, vendor_changed=data.get("vendor_id") not in (None, db_po.vendor_id))
        for key, value in data.items():
            setattr(db_po, key, value)
        if new_status is not None and check_status_transition(db_po.status, new_status):
            logger.info(f"Purchase Order {db_po.order_number} status {db_po.status.value} -> {new_status.value}")
            db_po.status = new_status

    if items is not None:
        _ensure_open(db_po)
        _sync_lines(db, db_po, items)
        recalculate_total(db_po)

    db_po.updated_at = local_now()
    db.commit()
    db.refresh(db_po)
    logger.info(f"Purchase Order {db_po.order_number} updated")
    return db_po


def delete_purchase_order(db: Session, po_id: int) -> bool:
    db_po = db.query(PurchaseOrder).filter(PurchaseOrder.id == po_id).first()
    if db_po is None:
        return False
    # Lines go with the order (delete-orphan cascade)
    db.delete(db_po)
    db.commit()
    return True


def add_purchase_order_item(db: Session, po_id: int, item: PurchaseOrderItemCreate):
    db_po = lock_purchase_order(db, po_id)
    _ensure_open(db_po)
    line = _add_line(db, db_po, item.model_dump())
    recalculate_total(db_po)
    db_po.updated_at = local_now()
    db.commit()
    db.refresh(db_po)
    logger.info(f"Item '{line.item_name}' added to Purchase Order {db_po.order_number}, total {db_po.total_amount}")
    return db_po


def update_purchase_order_item(db: Session, po_id: int, line_id: int, item: PurchaseOrderItemUpdate):
    db_po = lock_purchase_order(db, po_id)
    _ensure_open(db_po)
    line = next((line for line in db_po.items if line.id == line_id), None)
    if line is None:
        raise NotFoundError("Purchase Order Item not found")
    _update_line(db, line, item.model_dump(exclude_unset=True))
    recalculate_total(db_po)
    db_po.updated_at = local_now()
    db.commit()
    db.refresh(db_po)
    logger.info(f"Item {line_id} of Purchase Order {db_po.order_number} updated, total {db_po.total_amount}")
    return db_po


def delete_purchase_order_item(db: Session, po_id: int, line_id: int):
    db_po = lock_purchase_order(db, po_id)
    _ensure_open(db_po)
    line = next((line for line in db_po.items if line.id == line_id), None)
    if line is None:
        raise NotFoundError("Purchase Order Item not found")
    db_po.items.remove(line)
    recalculate_total(db_po)
    db_po.updated_at = local_now()
    db.commit()
    db.refresh(db_po)
    logger.info(f"Item {line_id} removed from Purchase Order {db_po.order_number}, total {db_po.total_amount}")
    return db_po


def record_pdf(db: Session, db_po: PurchaseOrder, pdf_path: str):
    db_po.pdf_path = pdf_path
    db.commit()
    db.refresh(db_po)
    return db_po


def mark_email_sent(db: Session, db_po: PurchaseOrder):
    db_po.email_sent = True
    db.commit()
    db.refresh(db_po)
    return db_po
