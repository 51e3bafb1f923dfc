"""SQLAlchemy implementation of GoodsReceiptRepository

Provides persistence for the append-only goods receipt log with
idempotency enforcement via unique (order_id, idempotency_key).
"""

from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.goods_receipt_repository import GoodsReceiptRepository
from src.domain.goods_receipt import GoodsReceipt
from src.domain.goods_receipt_line import GoodsReceiptLine


class SqlAlchemyGoodsReceiptRepository(GoodsReceiptRepository):
    """
    SQLAlchemy implementation of GoodsReceiptRepository

    Features:
    - Receipt and lines flushed together inside the caller's transaction
    - Received totals aggregated in the database
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, receipt: GoodsReceipt, lines: Sequence[GoodsReceiptLine]) -> GoodsReceipt:
        """
        Create a receipt and its lines

        Raises:
            IntegrityError: If idempotency_key already exists for the order
        """
        self.session.add(receipt)
        await self.session.flush()
        await self.session.refresh(receipt)

        for line in lines:
            line.receipt_id = receipt.id
            self.session.add(line)
        await self.session.flush()
        return receipt

    async def get_by_idempotency_key(self, order_id: int, idempotency_key: str) -> Optional[GoodsReceipt]:
        stmt = select(GoodsReceipt).where(
            GoodsReceipt.order_id == order_id,
            GoodsReceipt.idempotency_key == idempotency_key,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by_order(self, order_id: int) -> List[GoodsReceipt]:
        stmt = (
            select(GoodsReceipt)
            .where(GoodsReceipt.order_id == order_id)
            .order_by(GoodsReceipt.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_lines(self, receipt_id: int) -> List[GoodsReceiptLine]:
        stmt = (
            select(GoodsReceiptLine)
            .where(GoodsReceiptLine.receipt_id == receipt_id)
            .order_by(GoodsReceiptLine.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_received_by_order(self, order_id: int) -> Dict[int, Decimal]:
        """
        Sum received quantities per order line from the receipt log

        Returns:
            Mapping of order_line_id to cumulative received quantity
        """
        stmt = (
            select(
                GoodsReceiptLine.order_line_id,
                func.sum(GoodsReceiptLine.received_quantity),
            )
            .join(GoodsReceipt, GoodsReceipt.id == GoodsReceiptLine.receipt_id)
            .where(GoodsReceipt.order_id == order_id)
            .group_by(GoodsReceiptLine.order_line_id)
        )
        result = await self.session.execute(stmt)
        return {
            order_line_id: Decimal(str(total))
            for order_line_id, total in result.all()
        }

    async def count_by_order(self, order_id: int) -> int:
        stmt = select(func.count()).select_from(GoodsReceipt).where(GoodsReceipt.order_id == order_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
