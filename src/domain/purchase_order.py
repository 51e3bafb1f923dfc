"""Purchase Order Domain Entity

A request to a supplier for goods. Owns its PurchaseOrderLines; its status
always reflects the aggregate received quantities of those lines.
"""

from datetime import datetime, date
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, Integer, String, Text
from src.domain.base import BaseModel, IdType


class PurchaseOrderStatus(str, Enum):
    """Purchase order status types"""
    DRAFT = "draft"                                # Not receivable until approved
    APPROVED = "approved"                          # Receivable, nothing received yet
    PARTIALLY_RECEIVED = "partially_received"
    FULLY_RECEIVED = "fully_received"
    CANCELLED = "cancelled"                        # Terminal, set externally
    CLOSED_SHORT = "closed_short"                  # Terminal, remaining quantities abandoned


RECEIVABLE_STATUSES = frozenset(
    {PurchaseOrderStatus.APPROVED, PurchaseOrderStatus.PARTIALLY_RECEIVED}
)


class PurchaseOrder(BaseModel, table=True):
    """
    Purchase Order - Goods requested from a supplier

    Domain Rules:
    - order_number must be unique
    - Created as draft; receivable only once approved
    - After approval, status is changed only by goods receipts or by
      an explicit cancel / close-short action
    - version increments on every status write (optimistic concurrency)
    """

    __tablename__ = "purchase_orders"
    __table_args__ = (
        Index('ix_purchase_orders_status', 'status'),
        Index('ix_purchase_orders_supplier_reference', 'supplier_reference'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique purchase order identifier (auto-increment)"
    )

    order_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Unique order number (e.g., PO-2024-001)"
    )

    supplier_reference: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Supplier identifier owned by supplier management"
    )

    issue_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date the order was issued"
    )

    expected_delivery_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Date the goods are expected"
    )

    status: PurchaseOrderStatus = Field(
        default=PurchaseOrderStatus.DRAFT,
        description="Order status (draft, approved, partially_received, fully_received, cancelled, closed_short)"
    )

    version: int = Field(
        default=1,
        sa_column=Column(Integer, nullable=False, default=1),
        description="Optimistic concurrency counter, bumped on every status write"
    )

    notes: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Free-form notes"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Order creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last status change timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "order_number": "PO-2024-001",
                "supplier_reference": "SUP-1001",
                "issue_date": "2024-01-01",
                "expected_delivery_date": "2024-01-15",
                "status": "approved",
                "version": 2,
                "notes": None,
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-02T00:00:00Z"
            }
        }
