from .purchase_order_repository import PurchaseOrderRepository
from .purchase_order_line_repository import PurchaseOrderLineRepository
from .goods_receipt_repository import GoodsReceiptRepository

__all__ = [
    "PurchaseOrderRepository",
    "PurchaseOrderLineRepository",
    "GoodsReceiptRepository",
]
