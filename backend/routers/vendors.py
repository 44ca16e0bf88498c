from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.vendors import Vendor as VendorModel
from models.purchase_orders import PurchaseOrder as PurchaseOrderModel
from schemas.vendors import Vendor, VendorCreate, VendorUpdate
from schemas.purchase_orders import PurchaseOrder

router = APIRouter(prefix="/vendors", tags=["Vendors"])
logger = logging.getLogger("vendors")


def _purchase_orders_for_vendor(db: Session, db_vendor: VendorModel):
    # Orders may reference a vendor by id or only by the copied name
    return db.query(PurchaseOrderModel).filter(
        or_(PurchaseOrderModel.vendor_id == db_vendor.id, PurchaseOrderModel.vendor_name == db_vendor.name)
    )


@router.post("", response_model=Vendor, status_code=status.HTTP_201_CREATED)
def create_vendor(vendor: VendorCreate, db: Session = Depends(get_db)):
    """Create a new vendor."""
    db_vendor = db.query(VendorModel).filter(VendorModel.name == vendor.name).first()
    if db_vendor:
        raise HTTPException(status_code=400, detail="Vendor with this name already exists")

    db_vendor = VendorModel(**vendor.model_dump())
    db.add(db_vendor)
    db.commit()
    db.refresh(db_vendor)
    logger.info(f"Vendor '{db_vendor.name}' created")
    return db_vendor


@router.get("", response_model=List[Vendor])
def read_vendors(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Retrieve a list of vendors, optionally filtered by name."""
    query = db.query(VendorModel)
    if search:
        query = query.filter(VendorModel.name.ilike(f"%{search}%"))
    return query.order_by(VendorModel.name).offset(skip).limit(limit).all()


@router.get("/{vendor_id}", response_model=Vendor)
def read_vendor(vendor_id: int, db: Session = Depends(get_db)):
    """Retrieve a single vendor by ID."""
    db_vendor = db.query(VendorModel).filter(VendorModel.id == vendor_id).first()
    if db_vendor is None:
        raise HTTPException(status_code=404, detail="Vendor not found")
    return db_vendor


@router.put("/{vendor_id}", response_model=Vendor)
def update_vendor(vendor_id: int, vendor: VendorUpdate, db: Session = Depends(get_db)):
    """Update an existing vendor."""
    db_vendor = db.query(VendorModel).filter(VendorModel.id == vendor_id).first()
    if db_vendor is None:
        raise HTTPException(status_code=404, detail="Vendor not found")

    # Check if name is being updated to an existing name
    if vendor.name is not None and vendor.name != db_vendor.name:
        existing_vendor = db.query(VendorModel).filter(VendorModel.name == vendor.name).first()
        if existing_vendor:
            raise HTTPException(status_code=400, detail="Vendor with this name already exists")

    vendor_data = vendor.model_dump(exclude_unset=True)
    if vendor_data.get("name", "") is None:
        vendor_data.pop("name")
    for key, value in vendor_data.items():
        setattr(db_vendor, key, value)

    db.commit()
    db.refresh(db_vendor)
    logger.info(f"Vendor '{db_vendor.name}' (ID: {vendor_id}) updated")
    return db_vendor


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vendor(vendor_id: int, db: Session = Depends(get_db)):
    """Delete a vendor. Vendors referenced by purchase orders cannot be deleted."""
    db_vendor = db.query(VendorModel).filter(VendorModel.id == vendor_id).first()
    if db_vendor is None:
        raise HTTPException(status_code=404, detail="Vendor not found")

    order_count = _purchase_orders_for_vendor(db, db_vendor).count()
    if order_count:
        logger.warning(f"Vendor '{db_vendor.name}' (ID: {vendor_id}) not deleted: referenced by {order_count} purchase orders")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Vendor '{db_vendor.name}' has {order_count} associated purchase orders and cannot be deleted.",
        )

    db.delete(db_vendor)
    db.commit()
    logger.info(f"Vendor '{db_vendor.name}' (ID: {vendor_id}) deleted")
    return None


@router.get("/{vendor_id}/purchase-orders", response_model=List[PurchaseOrder])
def get_vendor_purchase_orders(vendor_id: int, db: Session = Depends(get_db)):
    """Purchase orders placed with this vendor, newest first."""
    db_vendor = db.query(VendorModel).filter(VendorModel.id == vendor_id).first()
    if db_vendor is None:
        raise HTTPException(status_code=404, detail="Vendor not found")
    return (
        _purchase_orders_for_vendor(db, db_vendor)
        .order_by(PurchaseOrderModel.order_date.desc(), PurchaseOrderModel.id.desc())
        .all()
    )
