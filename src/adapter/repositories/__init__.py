from .purchase_order_repository import SqlAlchemyPurchaseOrderRepository
from .purchase_order_line_repository import SqlAlchemyPurchaseOrderLineRepository
from .goods_receipt_repository import SqlAlchemyGoodsReceiptRepository

__all__ = [
    "SqlAlchemyPurchaseOrderRepository",
    "SqlAlchemyPurchaseOrderLineRepository",
    "SqlAlchemyGoodsReceiptRepository",
]
