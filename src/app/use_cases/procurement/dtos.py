"""Data Transfer Objects for Procurement Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.goods_receipt import GoodsReceiptStatus
from src.domain.goods_receipt_line import LineFulfillmentStatus
from src.domain.purchase_order import PurchaseOrderStatus


class ReceiptLineCommandDTO(BaseModel):
    """
    One line of a goods receipt submission

    Quantities are not range-checked here: negative or all-zero receipts
    are rejected by the receipt validator with a typed error.
    """

    order_line_id: int = Field(
        ...,
        description="Purchase order line being received against"
    )

    received_quantity: Decimal = Field(
        ...,
        description="Quantity physically received (must be >= 0)"
    )

    note: Optional[str] = Field(
        default=None,
        description="Optional note (e.g., damaged packaging)"
    )


class SubmitReceiptCommandDTO(BaseModel):
    """
    Command DTO for submitting a goods receipt

    Used as input to SubmitGoodsReceipt use case.
    """

    order_id: int = Field(
        ...,
        description="Purchase order identifier"
    )

    idempotency_key: str = Field(
        ...,
        min_length=1,
        description="Caller-supplied key; a retried submission with the same key replays the first result"
    )

    lines: List[ReceiptLineCommandDTO] = Field(
        default_factory=list,
        description="Received quantities per order line"
    )

    receipt_date: Optional[date] = Field(
        default=None,
        description="Date the goods arrived (defaults to today)"
    )

    received_by: Optional[str] = Field(
        default=None,
        description="Person who logged the receipt"
    )

    notes: Optional[str] = Field(
        default=None,
        description="Free-form notes"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "order_id": 1,
                "idempotency_key": "dock-3:2024-01-05:001",
                "lines": [
                    {"order_line_id": 1, "received_quantity": "40", "note": None}
                ],
                "receipt_date": "2024-01-05",
                "received_by": "warehouse.clerk",
                "notes": "Pallet 1 of 2"
            }
        }


class ReceiptLineResultDTO(BaseModel):
    """Per-line outcome of a committed goods receipt"""

    order_line_id: int = Field(..., description="Purchase order line")
    received_quantity: Decimal = Field(..., description="Quantity received in this receipt")
    total_received: Decimal = Field(..., description="Cumulative received quantity after this receipt")
    line_status: LineFulfillmentStatus = Field(..., description="Line fulfillment state after this receipt")


class SubmitReceiptResponseDTO(BaseModel):
    """
    Response DTO for a committed goods receipt

    Returned by SubmitGoodsReceipt, both on first commit and on idempotent replay.
    """

    order_id: int = Field(..., description="Purchase order identifier")
    order_status: PurchaseOrderStatus = Field(..., description="Order status after this receipt")
    receipt_id: int = Field(..., description="Goods receipt identifier")
    receipt_status: GoodsReceiptStatus = Field(..., description="Receipt completeness")
    idempotency_key: str = Field(..., description="Idempotency key")
    receipt_date: date = Field(..., description="Date the goods arrived")
    lines: List[ReceiptLineResultDTO] = Field(..., description="Lines received against")
    created_at: datetime = Field(..., description="Receipt timestamp")

    class Config:
        json_schema_extra = {
            "example": {
                "order_id": 1,
                "order_status": "partially_received",
                "receipt_id": 7,
                "receipt_status": "partially_received",
                "idempotency_key": "dock-3:2024-01-05:001",
                "receipt_date": "2024-01-05",
                "lines": [
                    {
                        "order_line_id": 1,
                        "received_quantity": "40",
                        "total_received": "40",
                        "line_status": "partially_received"
                    }
                ],
                "created_at": "2024-01-05T09:30:00Z"
            }
        }


class OrderLineFulfillmentDTO(BaseModel):
    """Fulfillment projection of one purchase order line"""

    order_line_id: int = Field(..., description="Purchase order line")
    item_reference: str = Field(..., description="Item identifier")
    description: Optional[str] = Field(default=None, description="Line description")
    ordered: Decimal = Field(..., description="Ordered quantity")
    received: Decimal = Field(..., description="Cumulative received quantity")
    remaining: Decimal = Field(..., description="Quantity still receivable")
    line_status: LineFulfillmentStatus = Field(..., description="Line fulfillment state")


class OrderFulfillmentResponseDTO(BaseModel):
    """
    Response DTO for the order fulfillment projection

    Returned by GetOrderFulfillment.
    """

    order_id: int = Field(..., description="Purchase order identifier")
    order_number: str = Field(..., description="Purchase order number")
    supplier_reference: str = Field(..., description="Supplier identifier")
    order_status: PurchaseOrderStatus = Field(..., description="Current order status")
    lines: List[OrderLineFulfillmentDTO] = Field(..., description="Per-line fulfillment")


class ReceiptHistoryLineDTO(BaseModel):
    """One line of a recorded receipt"""

    order_line_id: int = Field(..., description="Purchase order line")
    item_reference: str = Field(..., description="Item identifier")
    received_quantity: Decimal = Field(..., description="Quantity received in this receipt")
    total_received: Decimal = Field(..., description="Cumulative received quantity after this receipt")
    line_status: LineFulfillmentStatus = Field(..., description="Line fulfillment state after this receipt")
    note: Optional[str] = Field(default=None, description="Line note")


class ReceiptHistoryDTO(BaseModel):
    """A recorded receipt as it was committed"""

    receipt_id: int = Field(..., description="Goods receipt identifier")
    idempotency_key: str = Field(..., description="Idempotency key")
    receipt_date: date = Field(..., description="Date the goods arrived")
    received_by: Optional[str] = Field(default=None, description="Person who logged the receipt")
    notes: Optional[str] = Field(default=None, description="Free-form notes")
    receipt_status: GoodsReceiptStatus = Field(..., description="Receipt completeness")
    order_status: PurchaseOrderStatus = Field(..., description="Order status after this receipt")
    created_at: datetime = Field(..., description="Receipt timestamp")
    lines: List[ReceiptHistoryLineDTO] = Field(..., description="Lines received against")


class OrderReceiptsResponseDTO(BaseModel):
    """
    Response DTO for the receipt history of an order

    Returned by ListOrderReceipts, oldest receipt first.
    """

    order_id: int = Field(..., description="Purchase order identifier")
    order_number: str = Field(..., description="Purchase order number")
    receipts: List[ReceiptHistoryDTO] = Field(..., description="Receipts in the order they were recorded")


class UpdateOrderStatusCommandDTO(BaseModel):
    """
    Command DTO for an explicit order status change

    Used as input to UpdateOrderStatus use case.
    """

    order_id: int = Field(..., description="Purchase order identifier")
    status: PurchaseOrderStatus = Field(
        ...,
        description="Target status (approved, cancelled or closed_short)"
    )


class OrderStatusResponseDTO(BaseModel):
    """Response DTO for an explicit order status change"""

    order_id: int = Field(..., description="Purchase order identifier")
    order_number: str = Field(..., description="Purchase order number")
    previous_status: PurchaseOrderStatus = Field(..., description="Status before the change")
    status: PurchaseOrderStatus = Field(..., description="Status after the change")
    version: int = Field(..., description="Order version after the change")


class FulfillmentDiscrepancyDTO(BaseModel):
    """
    One mismatch between stored fulfillment state and the receipt log

    kind is one of: received_total (cached line total differs from the log),
    over_received (log total exceeds the ordered quantity),
    order_status (stored status differs from the derived one).
    """

    order_id: int = Field(..., description="Purchase order identifier")
    order_number: str = Field(..., description="Purchase order number")
    order_line_id: Optional[int] = Field(default=None, description="Order line (None for order status)")
    kind: str = Field(..., description="Discrepancy kind")
    stored_value: str = Field(..., description="Value currently stored")
    calculated_value: str = Field(..., description="Value recomputed from the receipt log")


class ReconciliationResultDTO(BaseModel):
    """Response DTO for fulfillment reconciliation"""

    total_orders_checked: int = Field(..., description="Number of orders checked")
    discrepancies_found: int = Field(..., description="Number of discrepancies")
    discrepancies: List[FulfillmentDiscrepancyDTO] = Field(..., description="Discrepancies found")
    reconciliation_time: datetime = Field(..., description="When reconciliation started")
    execution_time_ms: int = Field(..., description="Execution time in milliseconds")
