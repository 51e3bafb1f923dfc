"""Purchase Order Line Domain Entity

One requested item within a purchase order.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text
from src.domain.base import BaseModel, IdType


class PurchaseOrderLine(BaseModel, table=True):
    """
    Purchase Order Line - Requested item and quantity

    Domain Rules:
    - Belongs to exactly one purchase order (deleted with it)
    - ordered_quantity is positive and immutable once the order is approved
    - received_quantity caches the sum of its goods receipt lines and is
      only written in the transaction that appends a goods receipt
    - 0 <= received_quantity <= ordered_quantity
    """

    __tablename__ = "purchase_order_lines"
    __table_args__ = (
        CheckConstraint('ordered_quantity > 0', name='ordered_quantity_positive'),
        CheckConstraint(
            'received_quantity >= 0 AND received_quantity <= ordered_quantity',
            name='received_quantity_within_ordered',
        ),
        Index('ix_purchase_order_lines_order_id', 'order_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique order line identifier (auto-increment)"
    )

    order_id: int = Field(
        sa_column=Column(IdType, ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to PurchaseOrder"
    )

    item_reference: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Item/product identifier owned by inventory management"
    )

    description: Optional[str] = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
        description="Line description"
    )

    ordered_quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Quantity ordered (must be > 0)"
    )

    unit_price: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Price per unit (informational, not used by fulfillment)"
    )

    received_quantity: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False, default=0),
        description="Cached cumulative received quantity across goods receipts"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": 1,
                "order_id": 1,
                "item_reference": "ITEM-42",
                "description": "Steel bolts M8",
                "ordered_quantity": "90.000000",
                "unit_price": "0.250000",
                "received_quantity": "40.000000"
            }
        }
