from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from config import SettingsProvider, get_settings_provider
from database import get_db
from models.purchase_orders import PurchaseOrderStatus
from schemas.purchase_orders import (
    PurchaseOrder as PurchaseOrderSchema,
    PurchaseOrderCreateRequest,
    PurchaseOrderDetail,
    PurchaseOrderEmailRequest,
    PurchaseOrderEmailResult,
    PurchaseOrderUpdateRequest,
)
from schemas.purchase_order_items import PurchaseOrderItemCreate, PurchaseOrderItemUpdate
from crud import purchase_orders as crud_purchase_orders
from utils.purchase_order_pdf import generate_purchase_order_pdf, purchase_order_attachment_name
from utils.email_utils import EmailClient, purchase_order_bodies, purchase_order_subject

router = APIRouter(prefix="/purchase-orders", tags=["Purchase Orders"])
logger = logging.getLogger("purchase_orders")


def _detail(db_po):
    return {"order": db_po, "items": db_po.items}


def _get_or_404(db: Session, po_id: int):
    db_po = crud_purchase_orders.get_purchase_order(db, po_id)
    if db_po is None:
        raise HTTPException(status_code=404, detail="Purchase Order not found")
    return db_po


@router.get("", response_model=List[PurchaseOrderSchema])
def read_purchase_orders(
    skip: int = 0,
    limit: int = 100,
    status: Optional[PurchaseOrderStatus] = None,
    vendor_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Retrieve purchase orders, newest first, optionally filtered by status or vendor."""
    return crud_purchase_orders.get_purchase_orders(db, skip=skip, limit=limit, status=status, vendor_id=vendor_id)


@router.post("", response_model=PurchaseOrderDetail, status_code=status.HTTP_201_CREATED)
def create_purchase_order(request: PurchaseOrderCreateRequest, db: Session = Depends(get_db)):
    """Create a draft purchase order with its items."""
    db_po = crud_purchase_orders.create_purchase_order(db, request.order, request.items)
    return _detail(db_po)


@router.get("/{po_id}", response_model=PurchaseOrderDetail)
def read_purchase_order(po_id: int, db: Session = Depends(get_db)):
    """Retrieve a single purchase order with its items."""
    return _detail(_get_or_404(db, po_id))


@router.put("/{po_id}", response_model=PurchaseOrderDetail)
def update_purchase_order(po_id: int, request: PurchaseOrderUpdateRequest, db: Session = Depends(get_db)):
    """
    Update order fields and/or replace its items.

    Status changes must follow the purchase order workflow
    (draft -> pending -> approved -> ordered -> received, or canceled);
    anything else is answered with 409.
    """
    db_po = crud_purchase_orders.update_purchase_order(db, po_id, order=request.order, items=request.items)
    return _detail(db_po)


@router.delete("/{po_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase_order(po_id: int, db: Session = Depends(get_db)):
    """Delete a purchase order together with its items."""
    if not crud_purchase_orders.delete_purchase_order(db, po_id):
        raise HTTPException(status_code=404, detail="Purchase Order not found")
    logger.info(f"Purchase Order (ID: {po_id}) deleted")
    return None


# --- Purchase Order Item Endpoints (Nested for managing items within a PO) ---

@router.post("/{po_id}/items", response_model=PurchaseOrderDetail, status_code=status.HTTP_201_CREATED)
def add_item_to_purchase_order(po_id: int, item: PurchaseOrderItemCreate, db: Session = Depends(get_db)):
    """Add a new item to an existing purchase order."""
    return _detail(crud_purchase_orders.add_purchase_order_item(db, po_id, item))


@router.put("/{po_id}/items/{item_id}", response_model=PurchaseOrderDetail)
def update_item_in_purchase_order(
    po_id: int,
    item_id: int,
    item: PurchaseOrderItemUpdate,
    db: Session = Depends(get_db),
):
    """Update one item of a purchase order; the line amount and order total are recomputed."""
    return _detail(crud_purchase_orders.update_purchase_order_item(db, po_id, item_id, item))


@router.delete("/{po_id}/items/{item_id}", response_model=PurchaseOrderDetail)
def remove_item_from_purchase_order(po_id: int, item_id: int, db: Session = Depends(get_db)):
    return _detail(crud_purchase_orders.delete_purchase_order_item(db, po_id, item_id))


# --- Documents ---

@router.get("/{po_id}/pdf")
def download_purchase_order_pdf(
    po_id: int,
    db: Session = Depends(get_db),
    settings_provider: SettingsProvider = Depends(get_settings_provider),
):
    """Generate the purchase order PDF and return it."""
    db_po = _get_or_404(db, po_id)
    pdf_path = generate_purchase_order_pdf(db_po, settings_provider.settings)
    crud_purchase_orders.record_pdf(db, db_po, pdf_path)
    return FileResponse(
        pdf_path,
        media_type="application/pdf",
        filename=purchase_order_attachment_name(db_po),
    )


@router.post("/{po_id}/email", response_model=PurchaseOrderEmailResult)
def email_purchase_order(
    po_id: int,
    request: Optional[PurchaseOrderEmailRequest] = None,
    db: Session = Depends(get_db),
    settings_provider: SettingsProvider = Depends(get_settings_provider),
):
    """
    Email the purchase order PDF to the vendor.

    The recipient defaults to the order's vendor email. The PDF is generated
    first and attached; delivery is attempted once.
    """
    db_po = _get_or_404(db, po_id)
    recipient = (request.email if request else None) or db_po.vendor_email
    if not recipient:
        raise HTTPException(status_code=400, detail="No recipient email address: the order has no vendor email")

    settings = settings_provider.settings
    if not settings.email.configured:
        raise HTTPException(status_code=400, detail="Email settings are not configured")

    pdf_path = generate_purchase_order_pdf(db_po, settings)
    crud_purchase_orders.record_pdf(db, db_po, pdf_path)

    text_body, html_body = purchase_order_bodies(db_po, settings.company)
    client = EmailClient.from_settings(settings.email)
    sent = client.send_email(
        [recipient],
        purchase_order_subject(db_po, settings.company),
        text_body,
        html_body,
        attachments=[(pdf_path, purchase_order_attachment_name(db_po))],
    )
    if not sent:
        raise HTTPException(status_code=500, detail="Failed to send the purchase order email")

    crud_purchase_orders.mark_email_sent(db, db_po)
    logger.info(f"Purchase Order {db_po.order_number} emailed to {recipient}")
    return {"message": "Purchase order email sent", "email": recipient, "pdf_path": pdf_path}
