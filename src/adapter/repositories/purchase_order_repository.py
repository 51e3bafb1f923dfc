"""SQLAlchemy implementation of PurchaseOrderRepository

Provides persistence for PurchaseOrder entities with pessimistic locking
and version-checked status writes.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.purchase_order_repository import PurchaseOrderRepository
from src.domain.purchase_order import PurchaseOrder, PurchaseOrderStatus


class SqlAlchemyPurchaseOrderRepository(PurchaseOrderRepository):
    """
    SQLAlchemy implementation of PurchaseOrderRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE (ignored by SQLite)
    - Compare-and-set status updates keyed on the order version
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, order_id: int, for_update: bool = False) -> Optional[PurchaseOrder]:
        """
        Retrieve purchase order by ID with optional row-level locking

        Args:
            order_id: Purchase order ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            PurchaseOrder if found, None otherwise
        """
        stmt = select(PurchaseOrder).where(PurchaseOrder.id == order_id)

        if for_update:
            stmt = stmt.with_for_update()

        # Always re-read: a previous attempt may have left a stale identity
        stmt = stmt.execution_options(populate_existing=True)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self) -> List[PurchaseOrder]:
        stmt = select(PurchaseOrder).order_by(PurchaseOrder.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_status(
        self, order_id: int, new_status: PurchaseOrderStatus, expected_version: int
    ) -> bool:
        """
        Compare-and-set the order status

        Note:
            Issues UPDATE ... WHERE id = :id AND version = :expected_version,
            so a concurrent writer that already bumped the version makes
            this a no-op and the caller retries.
        """
        stmt = (
            update(PurchaseOrder)
            .where(PurchaseOrder.id == order_id)
            .where(PurchaseOrder.version == expected_version)
            .values(
                status=new_status,
                version=expected_version + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
