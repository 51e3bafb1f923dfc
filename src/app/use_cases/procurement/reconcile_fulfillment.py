"""ReconcileFulfillment Use Case

Audits cached fulfillment state against the goods receipt log.
"""

import logging
import time
from datetime import datetime
from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.purchase_order_repository import PurchaseOrderRepository
from src.app.repositories.purchase_order_line_repository import PurchaseOrderLineRepository
from src.app.repositories.goods_receipt_repository import GoodsReceiptRepository
from src.domain.purchase_order import PurchaseOrder
from src.domain.quantity_ledger import QuantityLedger, to_quantity
from src.domain.status_deriver import derive_line_status, derive_order_status
from .dtos import FulfillmentDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileFulfillment:
    """
    Use Case: Reconcile purchase order fulfillment against receipts

    Business Rules:
    1. Retrieves all purchase orders
    2. For each order, recomputes per-line received totals from the receipt log
    3. Compares them with the cached line totals and the ordered quantities
    4. Compares the stored order status with the status derived from the log
    5. Does NOT modify any data (read-only reconciliation)
    """

    def __init__(
        self,
        order_repo: PurchaseOrderRepository,
        line_repo: PurchaseOrderLineRepository,
        receipt_repo: GoodsReceiptRepository,
    ):
        self.order_repo = order_repo
        self.line_repo = line_repo
        self.receipt_repo = receipt_repo

    async def execute(self) -> Result[ReconciliationResultDTO]:
        """
        Execute fulfillment reconciliation

        Returns:
            Result[ReconciliationResultDTO]: Reconciliation result with any discrepancies
        """
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting purchase order fulfillment reconciliation")

            orders = await self.order_repo.get_all()
            discrepancies: List[FulfillmentDiscrepancyDTO] = []

            for order in orders:
                discrepancies.extend(await self._check_order(order))

            execution_time_ms = int((time.time() - start_time) * 1000)

            response = ReconciliationResultDTO(
                total_orders_checked=len(orders),
                discrepancies_found=len(discrepancies),
                discrepancies=discrepancies,
                reconciliation_time=reconciliation_time,
                execution_time_ms=execution_time_ms,
            )

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} discrepancies "
                    f"across {len(orders)} orders in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {len(orders)} orders consistent "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(response)

        except Exception as e:
            logger.error(f"Fulfillment reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile purchase order fulfillment",
                    reason=str(e),
                )
            )

    async def _check_order(self, order: PurchaseOrder) -> List[FulfillmentDiscrepancyDTO]:
        found: List[FulfillmentDiscrepancyDTO] = []
        order_lines = await self.line_repo.list_by_order(order.id)
        ledger = QuantityLedger(await self.receipt_repo.sum_received_by_order(order.id))

        line_statuses = []
        for line in order_lines:
            calculated = ledger.received_so_far(line.id)
            cached = to_quantity(line.received_quantity)

            if cached != calculated:
                found.append(
                    self._discrepancy(order, line.id, "received_total", cached, calculated)
                )
                logger.warning(
                    f"Order {order.id} line {line.id}: cached received={cached}, "
                    f"receipt log={calculated}"
                )

            if calculated > to_quantity(line.ordered_quantity):
                found.append(
                    self._discrepancy(order, line.id, "over_received", to_quantity(line.ordered_quantity), calculated)
                )
                logger.warning(
                    f"Order {order.id} line {line.id}: received {calculated} "
                    f"exceeds ordered {line.ordered_quantity}"
                )
                # Status cannot be derived from an over-received line
                line_statuses = None
                continue

            if line_statuses is not None:
                line_statuses.append(derive_line_status(line.ordered_quantity, calculated))

        if line_statuses is not None:
            expected_status = derive_order_status(order.status, line_statuses)
            if expected_status != order.status:
                found.append(
                    self._discrepancy(order, None, "order_status", order.status.value, expected_status.value)
                )
                logger.warning(
                    f"Order {order.id}: stored status {order.status.value}, "
                    f"derived {expected_status.value}"
                )

        return found

    def _discrepancy(self, order: PurchaseOrder, order_line_id, kind: str, stored, calculated) -> FulfillmentDiscrepancyDTO:
        return FulfillmentDiscrepancyDTO(
            order_id=order.id,
            order_number=order.order_number,
            order_line_id=order_line_id,
            kind=kind,
            stored_value=str(stored),
            calculated_value=str(calculated),
        )
