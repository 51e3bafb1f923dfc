"""Purchase Order Line Repository Interface"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List
from src.domain.purchase_order_line import PurchaseOrderLine


class PurchaseOrderLineRepository(ABC):
    """Repository interface for PurchaseOrderLine persistence"""

    @abstractmethod
    async def list_by_order(self, order_id: int) -> List[PurchaseOrderLine]:
        """
        Retrieve all lines of a purchase order, ordered by ID

        Args:
            order_id: Purchase order ID

        Returns:
            List of PurchaseOrderLine (empty if the order has none)
        """
        pass

    @abstractmethod
    async def update_received_quantity(self, line_id: int, received_quantity: Decimal) -> None:
        """
        Overwrite the cached cumulative received quantity of a line

        Args:
            line_id: Order line ID
            received_quantity: New cumulative total

        Note:
            Only called inside the unit of work that appends a goods receipt
        """
        pass
