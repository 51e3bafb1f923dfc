"""Fulfillment reconciliation worker

Audits cached line totals and stored order statuses against the goods
receipt log, once or on an interval.

    python -m src.worker.fulfillment_reconciler --once
    python -m src.worker.fulfillment_reconciler --interval 3600
"""

import argparse
import asyncio
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.goods_receipt_repository import SqlAlchemyGoodsReceiptRepository
from src.adapter.repositories.purchase_order_line_repository import SqlAlchemyPurchaseOrderLineRepository
from src.adapter.repositories.purchase_order_repository import SqlAlchemyPurchaseOrderRepository
from src.app.use_cases.procurement import ReconcileFulfillment, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class FulfillmentReconcilerWorker:
    """Runs ReconcileFulfillment against its own engine and reports drift through logging"""

    def __init__(self, db_uri: Optional[str] = None):
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )

    async def run_once(self) -> ReconciliationResultDTO:
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Fulfillment reconciliation is disabled, skipping")
            return ReconciliationResultDTO(
                total_orders_checked=0,
                discrepancies_found=0,
                discrepancies=[],
                reconciliation_time=datetime.utcnow(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            result = await ReconcileFulfillment(
                order_repo=SqlAlchemyPurchaseOrderRepository(session),
                line_repo=SqlAlchemyPurchaseOrderLineRepository(session),
                receipt_repo=SqlAlchemyGoodsReceiptRepository(session),
            ).execute()

        if result.is_err():
            raise RuntimeError(f"Reconciliation failed: {result.error.message}")

        report(result.value)
        return result.value

    async def run_forever(self, interval_seconds: int):
        logger.info(f"Reconciling fulfillment every {interval_seconds}s")
        while True:
            try:
                await self.run_once()
            except Exception:
                # The next cycle retries; the worker itself keeps running
                logger.exception("Reconciliation cycle failed")
            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        await self.engine.dispose()


def report(result: ReconciliationResultDTO) -> None:
    """Log a reconciliation summary; each discrepancy gets its own warning line"""
    logger.info(
        f"Checked {result.total_orders_checked} orders in {result.execution_time_ms}ms, "
        f"{result.discrepancies_found} discrepancies"
    )
    for d in result.discrepancies:
        logger.warning(
            f"Order {d.order_number} (order_id={d.order_id}, line={d.order_line_id}) "
            f"{d.kind}: stored={d.stored_value}, calculated={d.calculated_value}"
        )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Purchase order fulfillment reconciliation")
    parser.add_argument("--once", action="store_true", help="Run a single pass and exit")
    parser.add_argument(
        "--interval",
        type=int,
        default=ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS,
        help="Seconds between passes",
    )
    return parser.parse_args(argv)


async def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    worker = FulfillmentReconcilerWorker()
    try:
        if args.once:
            await worker.run_once()
        else:
            await worker.run_forever(interval_seconds=args.interval)
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
