from .base import BaseModel
from .purchase_order import PurchaseOrder, PurchaseOrderStatus, RECEIVABLE_STATUSES
from .purchase_order_line import PurchaseOrderLine
from .goods_receipt import GoodsReceipt, GoodsReceiptStatus
from .goods_receipt_line import GoodsReceiptLine, LineFulfillmentStatus
from .quantity_ledger import QuantityLedger
from .receipt_validator import (
    RejectionCode,
    ProposedReceiptLine,
    ValidatedReceipt,
    ValidatedReceiptLine,
    validate_receipt,
)
from .status_deriver import (
    derive_line_status,
    derive_order_status,
    derive_receipt_status,
    can_transition,
)

__all__ = [
    "BaseModel",
    "PurchaseOrder",
    "PurchaseOrderStatus",
    "RECEIVABLE_STATUSES",
    "PurchaseOrderLine",
    "GoodsReceipt",
    "GoodsReceiptStatus",
    "GoodsReceiptLine",
    "LineFulfillmentStatus",
    "QuantityLedger",
    "RejectionCode",
    "ProposedReceiptLine",
    "ValidatedReceipt",
    "ValidatedReceiptLine",
    "validate_receipt",
    "derive_line_status",
    "derive_order_status",
    "derive_receipt_status",
    "can_transition",
]
