"""Goods Receipt Repository Interface

Defines the contract for the append-only goods receipt log.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from src.domain.goods_receipt import GoodsReceipt
from src.domain.goods_receipt_line import GoodsReceiptLine


class GoodsReceiptRepository(ABC):
    """
    Repository interface for GoodsReceipt persistence

    Receipts are immutable and append-only. Idempotency is enforced by a
    unique (order_id, idempotency_key) constraint.
    """

    @abstractmethod
    async def create(self, receipt: GoodsReceipt, lines: Sequence[GoodsReceiptLine]) -> GoodsReceipt:
        """
        Persist a receipt together with its lines

        Args:
            receipt: GoodsReceipt entity to persist
            lines: Receipt lines; their receipt_id is assigned here

        Returns:
            Created GoodsReceipt with generated ID

        Raises:
            IntegrityError: If the idempotency key was already used for this order
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, order_id: int, idempotency_key: str) -> Optional[GoodsReceipt]:
        """
        Retrieve a committed receipt by its idempotency key

        Args:
            order_id: Purchase order ID
            idempotency_key: Caller-supplied key

        Returns:
            GoodsReceipt if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_order(self, order_id: int) -> List[GoodsReceipt]:
        """Retrieve every receipt of an order, oldest first"""
        pass

    @abstractmethod
    async def list_lines(self, receipt_id: int) -> List[GoodsReceiptLine]:
        """Retrieve the lines of a receipt, ordered by ID"""
        pass

    @abstractmethod
    async def sum_received_by_order(self, order_id: int) -> Dict[int, Decimal]:
        """
        Sum received quantities per order line over all receipts of the order

        Args:
            order_id: Purchase order ID

        Returns:
            Mapping of order_line_id to cumulative received quantity
            (lines without receipts are absent)
        """
        pass

    @abstractmethod
    async def count_by_order(self, order_id: int) -> int:
        """Number of receipts referencing the order"""
        pass
