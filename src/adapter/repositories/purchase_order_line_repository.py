"""SQLAlchemy implementation of PurchaseOrderLineRepository"""

from decimal import Decimal
from typing import List
from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.purchase_order_line_repository import PurchaseOrderLineRepository
from src.domain.purchase_order_line import PurchaseOrderLine


class SqlAlchemyPurchaseOrderLineRepository(PurchaseOrderLineRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_by_order(self, order_id: int) -> List[PurchaseOrderLine]:
        stmt = (
            select(PurchaseOrderLine)
            .where(PurchaseOrderLine.order_id == order_id)
            .order_by(PurchaseOrderLine.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_received_quantity(self, line_id: int, received_quantity: Decimal) -> None:
        """
        Overwrite the cached received total of a line

        Note:
            The database check constraint rejects totals above the ordered quantity
        """
        stmt = (
            update(PurchaseOrderLine)
            .where(PurchaseOrderLine.id == line_id)
            .values(received_quantity=received_quantity)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.flush()
