"""Integration tests for fulfillment reconciliation and explicit status changes"""

import pytest
from decimal import Decimal
from sqlalchemy import update

from src.adapter.repositories.goods_receipt_repository import SqlAlchemyGoodsReceiptRepository
from src.adapter.repositories.purchase_order_line_repository import SqlAlchemyPurchaseOrderLineRepository
from src.adapter.repositories.purchase_order_repository import SqlAlchemyPurchaseOrderRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.procurement.dtos import (
    ReceiptLineCommandDTO,
    SubmitReceiptCommandDTO,
    UpdateOrderStatusCommandDTO,
)
from src.app.use_cases.procurement.reconcile_fulfillment import ReconcileFulfillment
from src.app.use_cases.procurement.submit_goods_receipt import SubmitGoodsReceipt
from src.app.use_cases.procurement.update_order_status import UpdateOrderStatus
from src.domain.purchase_order import PurchaseOrder, PurchaseOrderStatus
from src.domain.purchase_order_line import PurchaseOrderLine
from src.worker.fulfillment_reconciler import FulfillmentReconcilerWorker


async def receive(session, order_locks, order_id, key, line_id, quantity):
    use_case = SubmitGoodsReceipt(
        uow=SqlAlchemyUnitOfWork(session),
        order_repo=SqlAlchemyPurchaseOrderRepository(session),
        line_repo=SqlAlchemyPurchaseOrderLineRepository(session),
        receipt_repo=SqlAlchemyGoodsReceiptRepository(session),
        order_locks=order_locks,
    )
    return await use_case.execute(
        SubmitReceiptCommandDTO(
            order_id=order_id,
            idempotency_key=key,
            lines=[ReceiptLineCommandDTO(order_line_id=line_id, received_quantity=Decimal(quantity))],
        )
    )


async def reconcile(session_factory):
    async with session_factory() as session:
        use_case = ReconcileFulfillment(
            order_repo=SqlAlchemyPurchaseOrderRepository(session),
            line_repo=SqlAlchemyPurchaseOrderLineRepository(session),
            receipt_repo=SqlAlchemyGoodsReceiptRepository(session),
        )
        return await use_case.execute()


class TestFulfillmentReconciliation:
    @pytest.mark.asyncio
    async def test_consistent_orders(self, db_session, session_factory, create_order, order_locks):
        order, lines = await create_order("PO-R1", [90])
        await receive(db_session, order_locks, order.id, "grn-1", lines[0].id, "40")
        await create_order("PO-R2", [3])

        result = await reconcile(session_factory)

        assert result.is_ok()
        assert result.value.total_orders_checked == 2
        assert result.value.discrepancies_found == 0

    @pytest.mark.asyncio
    async def test_detects_tampered_cached_total(self, db_session, session_factory, create_order, order_locks):
        """
        Given: A cached line total edited outside of receipt submission
        When: Reconciliation runs
        Then: The drift is reported against the receipt log
        """
        order, lines = await create_order("PO-R3", [90])
        await receive(db_session, order_locks, order.id, "grn-1", lines[0].id, "40")

        async with session_factory() as session:
            await session.execute(
                update(PurchaseOrderLine)
                .where(PurchaseOrderLine.id == lines[0].id)
                .values(received_quantity=Decimal("35"))
            )
            await session.commit()

        result = await reconcile(session_factory)

        assert result.value.discrepancies_found == 1
        discrepancy = result.value.discrepancies[0]
        assert discrepancy.kind == "received_total"
        assert discrepancy.order_number == "PO-R3"
        assert Decimal(discrepancy.stored_value) == Decimal("35")
        assert Decimal(discrepancy.calculated_value) == Decimal("40")

    @pytest.mark.asyncio
    async def test_detects_stale_order_status(self, db_session, session_factory, create_order, order_locks):
        order, lines = await create_order("PO-R4", [5])
        await receive(db_session, order_locks, order.id, "grn-1", lines[0].id, "5")

        async with session_factory() as session:
            await session.execute(
                update(PurchaseOrder)
                .where(PurchaseOrder.id == order.id)
                .values(status=PurchaseOrderStatus.PARTIALLY_RECEIVED)
            )
            await session.commit()

        result = await reconcile(session_factory)

        assert [d.kind for d in result.value.discrepancies] == ["order_status"]
        assert result.value.discrepancies[0].calculated_value == "fully_received"

    @pytest.mark.asyncio
    async def test_worker_run_once(self, engine, db_session, create_order, order_locks):
        order, lines = await create_order("PO-R5", [10])
        await receive(db_session, order_locks, order.id, "grn-1", lines[0].id, "10")

        worker = FulfillmentReconcilerWorker(db_uri=engine.url.render_as_string(hide_password=False))
        try:
            result = await worker.run_once()
        finally:
            await worker.shutdown()

        assert result.total_orders_checked == 1
        assert result.discrepancies_found == 0


class TestOrderStatusWorkflow:
    async def change(self, session, order_locks, order_id, status):
        use_case = UpdateOrderStatus(
            uow=SqlAlchemyUnitOfWork(session),
            order_repo=SqlAlchemyPurchaseOrderRepository(session),
            receipt_repo=SqlAlchemyGoodsReceiptRepository(session),
            order_locks=order_locks,
        )
        return await use_case.execute(UpdateOrderStatusCommandDTO(order_id=order_id, status=status))

    @pytest.mark.asyncio
    async def test_approve_then_receive(self, db_session, create_order, order_locks):
        order, lines = await create_order("PO-S1", [2], status=PurchaseOrderStatus.DRAFT)

        rejected = await receive(db_session, order_locks, order.id, "early", lines[0].id, "1")
        assert rejected.error.code == "ORDER_NOT_RECEIVABLE"

        approved = await self.change(db_session, order_locks, order.id, PurchaseOrderStatus.APPROVED)
        assert approved.is_ok()

        accepted = await receive(db_session, order_locks, order.id, "on-time", lines[0].id, "2")
        assert accepted.is_ok()
        assert accepted.value.order_status == PurchaseOrderStatus.FULLY_RECEIVED

    @pytest.mark.asyncio
    async def test_closed_short_order_stops_receiving(self, db_session, create_order, order_locks):
        order, lines = await create_order("PO-S2", [10])
        await receive(db_session, order_locks, order.id, "grn-1", lines[0].id, "4")

        cancelled = await self.change(db_session, order_locks, order.id, PurchaseOrderStatus.CANCELLED)
        assert cancelled.error.code == "ORDER_HAS_RECEIPTS"

        closed = await self.change(db_session, order_locks, order.id, PurchaseOrderStatus.CLOSED_SHORT)
        assert closed.is_ok()
        assert closed.value.version == 3

        late = await receive(db_session, order_locks, order.id, "grn-2", lines[0].id, "1")
        assert late.error.code == "ORDER_NOT_RECEIVABLE"
