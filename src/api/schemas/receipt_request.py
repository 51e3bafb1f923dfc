"""Request schemas for Procurement API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.purchase_order import PurchaseOrderStatus


class ReceiptLineRequestSchema(BaseModel):
    order_line_id: int = Field(
        ...,
        description="Purchase order line being received against"
    )

    received_quantity: Decimal = Field(
        ...,
        max_digits=18,
        decimal_places=6,
        description="Quantity physically received, at most 12 whole and 6 fractional digits"
    )

    note: Optional[str] = Field(
        default=None,
        max_length=2000,
        description="Optional note"
    )


class SubmitReceiptRequestSchema(BaseModel):
    """
    Request schema for submitting a goods receipt

    Used for POST /procurement/purchase-orders/{order_id}/receipts endpoint.
    Quantity rules are enforced by the receipt validator so the client gets
    a typed rejection instead of a schema error.
    """

    idempotency_key: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Unique key per order; resend the same key when retrying"
    )

    lines: List[ReceiptLineRequestSchema] = Field(
        default_factory=list,
        description="Received quantities per order line"
    )

    receipt_date: Optional[date] = Field(
        default=None,
        description="Date the goods arrived (defaults to today)"
    )

    received_by: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Person who logged the receipt"
    )

    notes: Optional[str] = Field(
        default=None,
        description="Free-form notes"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "idempotency_key": "dock-3:2024-01-05:001",
                "lines": [
                    {"order_line_id": 1, "received_quantity": "40"}
                ],
                "receipt_date": "2024-01-05",
                "received_by": "warehouse.clerk"
            }
        }


class UpdateOrderStatusRequestSchema(BaseModel):
    """
    Request schema for explicit status changes

    Used for POST /procurement/purchase-orders/{order_id}/status endpoint.
    """

    status: PurchaseOrderStatus = Field(
        ...,
        description="Target status (approved, cancelled or closed_short)"
    )
