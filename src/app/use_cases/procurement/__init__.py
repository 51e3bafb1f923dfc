"""Procurement fulfillment use cases"""
from .submit_goods_receipt import SubmitGoodsReceipt, StaleOrderVersion
from .get_order_fulfillment import GetOrderFulfillment
from .list_order_receipts import ListOrderReceipts
from .update_order_status import UpdateOrderStatus
from .reconcile_fulfillment import ReconcileFulfillment
from .dtos import (
    ReceiptLineCommandDTO,
    SubmitReceiptCommandDTO,
    ReceiptLineResultDTO,
    SubmitReceiptResponseDTO,
    OrderLineFulfillmentDTO,
    OrderFulfillmentResponseDTO,
    ReceiptHistoryLineDTO,
    ReceiptHistoryDTO,
    OrderReceiptsResponseDTO,
    UpdateOrderStatusCommandDTO,
    OrderStatusResponseDTO,
    FulfillmentDiscrepancyDTO,
    ReconciliationResultDTO,
)

__all__ = [
    "SubmitGoodsReceipt",
    "StaleOrderVersion",
    "GetOrderFulfillment",
    "ListOrderReceipts",
    "UpdateOrderStatus",
    "ReconcileFulfillment",
    "ReceiptLineCommandDTO",
    "SubmitReceiptCommandDTO",
    "ReceiptLineResultDTO",
    "SubmitReceiptResponseDTO",
    "OrderLineFulfillmentDTO",
    "OrderFulfillmentResponseDTO",
    "ReceiptHistoryLineDTO",
    "ReceiptHistoryDTO",
    "OrderReceiptsResponseDTO",
    "UpdateOrderStatusCommandDTO",
    "OrderStatusResponseDTO",
    "FulfillmentDiscrepancyDTO",
    "ReconciliationResultDTO",
]
