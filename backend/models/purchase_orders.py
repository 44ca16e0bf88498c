from sqlalchemy import Column, Integer, String, Text, Numeric, Date, Boolean, ForeignKey, Enum
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class PurchaseOrderStatus(enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELED = "canceled"


# target status -> statuses it may be reached from
ALLOWED_STATUS_PREDECESSORS = {
    PurchaseOrderStatus.DRAFT: {PurchaseOrderStatus.PENDING},
    PurchaseOrderStatus.PENDING: {PurchaseOrderStatus.DRAFT},
    PurchaseOrderStatus.APPROVED: {PurchaseOrderStatus.PENDING},
    PurchaseOrderStatus.ORDERED: {PurchaseOrderStatus.APPROVED},
    PurchaseOrderStatus.RECEIVED: {PurchaseOrderStatus.ORDERED},
    PurchaseOrderStatus.CANCELED: {
        PurchaseOrderStatus.DRAFT,
        PurchaseOrderStatus.PENDING,
        PurchaseOrderStatus.APPROVED,
        PurchaseOrderStatus.ORDERED,
    },
}


class PurchaseOrder(Base, TimestampMixin):
    __tablename__ = "purchase_orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(20), unique=True, nullable=False, index=True)  # PO-YYYYMM-NNNN
    status = Column(Enum(PurchaseOrderStatus, name="purchase_order_status"), default=PurchaseOrderStatus.DRAFT, nullable=False)
    order_date = Column(Date, nullable=False)
    project_name = Column(String, nullable=False)
    manager = Column(String, nullable=False)
    contact_number = Column(String, nullable=True)
    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="SET NULL"), nullable=True, index=True)
    vendor_name = Column(String, nullable=False)
    vendor_contact = Column(String, nullable=True)
    vendor_email = Column(String, nullable=True)
    expected_delivery_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    total_amount = Column(Numeric(14, 2), default=0, nullable=False)  # sum of line amounts
    pdf_path = Column(String(500), nullable=True)
    email_sent = Column(Boolean, default=False, nullable=False)

    # Relationships
    vendor = relationship("Vendor", back_populates="purchase_orders")
    items = relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )
