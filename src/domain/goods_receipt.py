"""Goods Receipt Domain Entity

Immutable record of goods physically received against one purchase order.
"""

from datetime import datetime, date
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, ForeignKey, String, Text, UniqueConstraint
from src.domain.base import BaseModel, IdType
from src.domain.purchase_order import PurchaseOrderStatus


class GoodsReceiptStatus(str, Enum):
    """Completeness of a receipt relative to the lines it delivered against"""
    PARTIALLY_RECEIVED = "partially_received"
    FULLY_RECEIVED = "fully_received"


class GoodsReceipt(BaseModel, table=True):
    """
    Goods Receipt - Append-only goods-received event

    Domain Rules:
    - References exactly one purchase order; never edited once committed
    - idempotency_key is unique per order (retried submissions replay the
      committed result)
    - Always has at least one line with a positive quantity
    - order_status_after snapshots the order status produced by this receipt
    """

    __tablename__ = "goods_receipts"
    __table_args__ = (
        UniqueConstraint('order_id', 'idempotency_key', name='uq_goods_receipts_order_idempotency_key'),
        Index('ix_goods_receipts_order_id', 'order_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique receipt identifier (auto-increment)"
    )

    order_id: int = Field(
        sa_column=Column(IdType, ForeignKey("purchase_orders.id"), nullable=False),
        description="Foreign key to PurchaseOrder"
    )

    idempotency_key: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Caller-supplied key, unique per order"
    )

    supplier_reference: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Supplier copied from the order"
    )

    receipt_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date the goods were received"
    )

    received_by: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Person who logged the receipt"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Free-form notes"
    )

    status: GoodsReceiptStatus = Field(
        description="Receipt completeness (partially_received, fully_received)"
    )

    order_status_after: PurchaseOrderStatus = Field(
        description="Order status right after this receipt was applied"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Receipt timestamp (immutable)"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "order_id": 1,
                "idempotency_key": "dock-3:2024-01-05:001",
                "supplier_reference": "SUP-1001",
                "receipt_date": "2024-01-05",
                "received_by": "warehouse.clerk",
                "notes": None,
                "status": "partially_received",
                "order_status_after": "partially_received",
                "created_at": "2024-01-05T09:30:00Z"
            }
        }
