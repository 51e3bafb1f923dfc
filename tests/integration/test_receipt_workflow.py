"""Integration tests for goods receipt submission against a real database

Covers the end-to-end receipt scenarios: full receipt, multi-receipt
completion, over-receipt rejection, concurrent submissions, cancelled
orders and idempotent replay.
"""

import asyncio
import pytest
from decimal import Decimal
from sqlmodel import select

from src.adapter.repositories.goods_receipt_repository import SqlAlchemyGoodsReceiptRepository
from src.adapter.repositories.purchase_order_line_repository import SqlAlchemyPurchaseOrderLineRepository
from src.adapter.repositories.purchase_order_repository import SqlAlchemyPurchaseOrderRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.use_cases.procurement.dtos import ReceiptLineCommandDTO, SubmitReceiptCommandDTO
from src.app.use_cases.procurement.submit_goods_receipt import SubmitGoodsReceipt
from src.domain.goods_receipt import GoodsReceipt, GoodsReceiptStatus
from src.domain.goods_receipt_line import LineFulfillmentStatus
from src.domain.purchase_order import PurchaseOrder, PurchaseOrderStatus
from src.domain.purchase_order_line import PurchaseOrderLine


def build_use_case(session, order_locks) -> SubmitGoodsReceipt:
    return SubmitGoodsReceipt(
        uow=SqlAlchemyUnitOfWork(session),
        order_repo=SqlAlchemyPurchaseOrderRepository(session),
        line_repo=SqlAlchemyPurchaseOrderLineRepository(session),
        receipt_repo=SqlAlchemyGoodsReceiptRepository(session),
        order_locks=order_locks,
    )


def receipt_command(order_id: int, key: str, *lines) -> SubmitReceiptCommandDTO:
    return SubmitReceiptCommandDTO(
        order_id=order_id,
        idempotency_key=key,
        received_by="warehouse.clerk",
        lines=[
            ReceiptLineCommandDTO(order_line_id=line_id, received_quantity=Decimal(str(qty)))
            for line_id, qty in lines
        ],
    )


async def reload(session_factory, order_id: int):
    """Read order and lines through a fresh session"""
    async with session_factory() as session:
        order = (await session.execute(select(PurchaseOrder).where(PurchaseOrder.id == order_id))).scalar_one()
        lines = (
            await session.execute(
                select(PurchaseOrderLine).where(PurchaseOrderLine.order_id == order_id).order_by(PurchaseOrderLine.id)
            )
        ).scalars().all()
        receipts = (
            await session.execute(select(GoodsReceipt).where(GoodsReceipt.order_id == order_id))
        ).scalars().all()
        return order, list(lines), list(receipts)


class TestReceiptWorkflow:
    @pytest.mark.asyncio
    async def test_full_receipt_completes_order(self, db_session, session_factory, create_order, order_locks):
        """Ordered 5, received 5: order and receipt fully received"""
        order, lines = await create_order("PO-A", [5])

        result = await build_use_case(db_session, order_locks).execute(
            receipt_command(order.id, "grn-a-1", (lines[0].id, 5))
        )

        assert result.is_ok()
        assert result.value.order_status == PurchaseOrderStatus.FULLY_RECEIVED
        assert result.value.receipt_status == GoodsReceiptStatus.FULLY_RECEIVED

        stored_order, stored_lines, receipts = await reload(session_factory, order.id)
        assert stored_order.status == PurchaseOrderStatus.FULLY_RECEIVED
        assert stored_order.version == 2
        assert stored_lines[0].received_quantity == Decimal("5")
        assert len(receipts) == 1

    @pytest.mark.asyncio
    async def test_two_receipts_complete_order(self, db_session, session_factory, create_order, order_locks):
        """Ordered 90: 40 then 50"""
        order, lines = await create_order("PO-B", [90])
        use_case = build_use_case(db_session, order_locks)

        first = await use_case.execute(receipt_command(order.id, "grn-b-1", (lines[0].id, 40)))
        assert first.is_ok()
        assert first.value.order_status == PurchaseOrderStatus.PARTIALLY_RECEIVED
        assert first.value.lines[0].line_status == LineFulfillmentStatus.PARTIALLY_RECEIVED

        second = await use_case.execute(receipt_command(order.id, "grn-b-2", (lines[0].id, 50)))
        assert second.is_ok()
        assert second.value.order_status == PurchaseOrderStatus.FULLY_RECEIVED
        assert second.value.lines[0].total_received == Decimal("90")

        stored_order, stored_lines, receipts = await reload(session_factory, order.id)
        assert stored_order.status == PurchaseOrderStatus.FULLY_RECEIVED
        assert stored_lines[0].received_quantity == Decimal("90")
        assert len(receipts) == 2

    @pytest.mark.asyncio
    async def test_over_receipt_leaves_state_unchanged(
        self, db_session, session_factory, create_order, order_locks
    ):
        """Line 1 fully received; one more unit is rejected and nothing is written"""
        order, lines = await create_order("PO-C", [5, 3])
        use_case = build_use_case(db_session, order_locks)
        await use_case.execute(receipt_command(order.id, "grn-c-1", (lines[0].id, 5)))

        result = await use_case.execute(receipt_command(order.id, "grn-c-2", (lines[0].id, 1)))

        assert result.is_err()
        assert result.error.code == "OVER_RECEIPT"
        assert Decimal(result.error.details["excess"]) == Decimal("1")

        stored_order, stored_lines, receipts = await reload(session_factory, order.id)
        assert stored_order.status == PurchaseOrderStatus.PARTIALLY_RECEIVED
        assert stored_lines[0].received_quantity == Decimal("5")
        assert stored_lines[1].received_quantity == Decimal("0")
        assert len(receipts) == 1

    @pytest.mark.asyncio
    async def test_one_more_unit_on_fully_received_order(
        self, db_session, session_factory, create_order, order_locks
    ):
        """
        Given: Single line ordered 5 and already received 5 (order fully_received)
        When: One more unit is submitted
        Then: OVER_RECEIPT with an excess of 1; nothing is written
        """
        order, lines = await create_order("PO-C1", [5])
        use_case = build_use_case(db_session, order_locks)
        completed = await use_case.execute(receipt_command(order.id, "grn-c1-1", (lines[0].id, 5)))
        assert completed.value.order_status == PurchaseOrderStatus.FULLY_RECEIVED

        result = await use_case.execute(receipt_command(order.id, "grn-c1-2", (lines[0].id, 1)))

        assert result.is_err()
        assert result.error.code == "OVER_RECEIPT"
        assert result.error.message == f"Cannot receive 1 units on line {lines[0].id}, only 0 remain"
        assert Decimal(result.error.details["excess"]) == Decimal("1")

        stored_order, stored_lines, receipts = await reload(session_factory, order.id)
        assert stored_order.status == PurchaseOrderStatus.FULLY_RECEIVED
        assert stored_order.version == 2
        assert stored_lines[0].received_quantity == Decimal("5")
        assert len(receipts) == 1

    @pytest.mark.asyncio
    async def test_concurrent_receipts_cannot_overshoot(self, session_factory, create_order, order_locks):
        """
        Given: Line ordered 10
        When: Two submissions of 6 race on separate sessions
        Then: Exactly one succeeds; the other is an over-receipt with excess 2
        """
        order, lines = await create_order("PO-D", [10])

        async with session_factory() as session_a, session_factory() as session_b:
            results = await asyncio.gather(
                build_use_case(session_a, order_locks).execute(
                    receipt_command(order.id, "dock-1", (lines[0].id, 6))
                ),
                build_use_case(session_b, order_locks).execute(
                    receipt_command(order.id, "dock-2", (lines[0].id, 6))
                ),
            )

        accepted = [r for r in results if r.is_ok()]
        rejected = [r for r in results if r.is_err()]
        assert len(accepted) == 1
        assert len(rejected) == 1
        assert rejected[0].error.code == "OVER_RECEIPT"
        assert Decimal(rejected[0].error.details["excess"]) == Decimal("2")

        stored_order, stored_lines, receipts = await reload(session_factory, order.id)
        assert stored_lines[0].received_quantity == Decimal("6")
        assert stored_order.status == PurchaseOrderStatus.PARTIALLY_RECEIVED
        assert len(receipts) == 1

    @pytest.mark.asyncio
    async def test_cancelled_order_rejects_receipt(self, db_session, session_factory, create_order, order_locks):
        order, lines = await create_order("PO-E", [4], status=PurchaseOrderStatus.CANCELLED)

        result = await build_use_case(db_session, order_locks).execute(
            receipt_command(order.id, "grn-e-1", (lines[0].id, 1))
        )

        assert result.is_err()
        assert result.error.code == "ORDER_NOT_RECEIVABLE"
        _, _, receipts = await reload(session_factory, order.id)
        assert receipts == []

    @pytest.mark.asyncio
    async def test_resubmission_replays_first_result(
        self, db_session, session_factory, create_order, order_locks
    ):
        """Same idempotency key twice: one receipt persisted, identical results"""
        order, lines = await create_order("PO-F", [90])
        use_case = build_use_case(db_session, order_locks)

        first = await use_case.execute(receipt_command(order.id, "grn-f-1", (lines[0].id, 40)))
        second = await use_case.execute(receipt_command(order.id, "grn-f-1", (lines[0].id, 40)))

        assert first.is_ok() and second.is_ok()
        assert first.value == second.value

        stored_order, stored_lines, receipts = await reload(session_factory, order.id)
        assert len(receipts) == 1
        assert stored_lines[0].received_quantity == Decimal("40")
        assert stored_order.version == 2

    @pytest.mark.asyncio
    async def test_replay_from_new_session_after_commit(
        self, db_session, session_factory, create_order, order_locks
    ):
        """A retry after a lost response sees the committed receipt"""
        order, lines = await create_order("PO-G", [10])
        first = await build_use_case(db_session, order_locks).execute(
            receipt_command(order.id, "grn-g-1", (lines[0].id, 10))
        )

        async with session_factory() as retry_session:
            replay = await build_use_case(retry_session, order_locks).execute(
                receipt_command(order.id, "grn-g-1", (lines[0].id, 10))
            )

        assert replay.is_ok()
        assert replay.value.receipt_id == first.value.receipt_id
        assert replay.value.order_status == PurchaseOrderStatus.FULLY_RECEIVED
        assert replay.value.lines[0].total_received == Decimal("10")

    @pytest.mark.asyncio
    async def test_unknown_line_is_rejected(self, db_session, create_order, order_locks):
        order, _ = await create_order("PO-H", [10])
        _, other_lines = await create_order("PO-H2", [10])

        result = await build_use_case(db_session, order_locks).execute(
            receipt_command(order.id, "grn-h-1", (other_lines[0].id, 1))
        )

        assert result.is_err()
        assert result.error.code == "LINE_NOT_IN_ORDER"

    @pytest.mark.asyncio
    async def test_all_zero_receipt_is_rejected(self, db_session, create_order, order_locks):
        order, lines = await create_order("PO-I", [10, 10])

        result = await build_use_case(db_session, order_locks).execute(
            receipt_command(order.id, "grn-i-1", (lines[0].id, 0), (lines[1].id, 0))
        )

        assert result.is_err()
        assert result.error.code == "EMPTY_OR_INVALID_RECEIPT"

    @pytest.mark.asyncio
    async def test_unknown_order(self, db_session, order_locks):
        result = await build_use_case(db_session, order_locks).execute(
            receipt_command(999, "grn-x", (1, 1))
        )

        assert result.is_err()
        assert result.error.code == "ORDER_NOT_FOUND"
