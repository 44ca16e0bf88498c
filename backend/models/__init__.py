from models.categories import Category
from models.inventory_items import InventoryItem
from models.transactions import Transaction, TransactionType
from models.vendors import Vendor
from models.purchase_orders import PurchaseOrder, PurchaseOrderStatus
from models.purchase_order_items import PurchaseOrderItem

__all__ = ['Category', 'InventoryItem', 'PurchaseOrder', 'PurchaseOrderItem', 'PurchaseOrderStatus', 'Transaction', 'TransactionType', 'Vendor',]
