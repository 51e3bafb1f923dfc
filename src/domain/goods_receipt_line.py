"""Goods Receipt Line Domain Entity

Quantity received for one purchase order line within one goods receipt.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text
from src.domain.base import BaseModel, IdType


class LineFulfillmentStatus(str, Enum):
    """Fulfillment state of a single order line"""
    NOT_RECEIVED = "not_received"
    PARTIALLY_RECEIVED = "partially_received"
    FULLY_RECEIVED = "fully_received"


class GoodsReceiptLine(BaseModel, table=True):
    """
    Goods Receipt Line - Received quantity for an order line

    Domain Rules:
    - Belongs to exactly one goods receipt (deleted with it)
    - received_quantity > 0 (zero-quantity lines are dropped before persisting)
    - total_received_after / line_status_after snapshot the order line right
      after the receipt, so idempotent replays return identical results
    """

    __tablename__ = "goods_receipt_lines"
    __table_args__ = (
        CheckConstraint('received_quantity > 0', name='receipt_line_quantity_positive'),
        Index('ix_goods_receipt_lines_receipt_id', 'receipt_id'),
        Index('ix_goods_receipt_lines_order_line_id', 'order_line_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique receipt line identifier (auto-increment)"
    )

    receipt_id: int = Field(
        sa_column=Column(IdType, ForeignKey("goods_receipts.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to GoodsReceipt"
    )

    order_line_id: int = Field(
        sa_column=Column(IdType, ForeignKey("purchase_order_lines.id"), nullable=False),
        description="Foreign key to PurchaseOrderLine"
    )

    item_reference: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Item copied from the order line"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Description copied from the order line"
    )

    ordered_quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Ordered quantity of the order line at receipt time"
    )

    received_quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Quantity received in this receipt"
    )

    total_received_after: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Cumulative received quantity of the order line after this receipt"
    )

    line_status_after: LineFulfillmentStatus = Field(
        description="Order line fulfillment state after this receipt"
    )

    note: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Optional note (e.g., damaged packaging)"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "receipt_id": 1,
                "order_line_id": 1,
                "item_reference": "ITEM-42",
                "description": "Steel bolts M8",
                "ordered_quantity": "90.000000",
                "received_quantity": "40.000000",
                "total_received_after": "40.000000",
                "line_status_after": "partially_received",
                "note": None
            }
        }
