"""Purchase Order Repository Interface

Defines the contract for purchase order persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.purchase_order import PurchaseOrder, PurchaseOrderStatus


class PurchaseOrderRepository(ABC):
    """
    Repository interface for PurchaseOrder persistence

    Status writes are guarded by the order version (optimistic concurrency);
    reads can additionally lock the row (SELECT FOR UPDATE).
    """

    @abstractmethod
    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[PurchaseOrder]:
        """
        Retrieve purchase order by ID

        Args:
            order_id: Purchase order ID
            for_update: If True, lock the row with SELECT FOR UPDATE (pessimistic lock)

        Returns:
            PurchaseOrder if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[PurchaseOrder]:
        """Retrieve every purchase order, ordered by ID"""
        pass

    @abstractmethod
    async def update_status(
        self, order_id: int, new_status: PurchaseOrderStatus, expected_version: int
    ) -> bool:
        """
        Write a new status and bump the version if the version still matches

        Args:
            order_id: Purchase order ID
            new_status: Status to store
            expected_version: Version read at the start of the unit of work

        Returns:
            True if the row was updated, False if another writer got there first
        """
        pass
