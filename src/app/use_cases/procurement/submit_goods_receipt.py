"""SubmitGoodsReceipt Use Case

Records goods received against a purchase order and reconciles the order
and receipt fulfillment status in one atomic unit of work, with idempotency
and per-order concurrency control.
"""

import logging
from datetime import date
from typing import Optional, Sequence
from sqlalchemy.exc import IntegrityError
from libs.result import Result, Return, Error
from src.app.services.order_lock import OrderLockRegistry
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.purchase_order_repository import PurchaseOrderRepository
from src.app.repositories.purchase_order_line_repository import PurchaseOrderLineRepository
from src.app.repositories.goods_receipt_repository import GoodsReceiptRepository
from src.domain.goods_receipt import GoodsReceipt
from src.domain.goods_receipt_line import GoodsReceiptLine
from src.domain.quantity_ledger import QuantityLedger
from src.domain.receipt_validator import ProposedReceiptLine, RejectionCode, validate_receipt
from src.domain.status_deriver import (
    derive_line_status,
    derive_order_status,
    derive_receipt_status,
)
from .dtos import ReceiptLineResultDTO, SubmitReceiptCommandDTO, SubmitReceiptResponseDTO

logger = logging.getLogger(__name__)


class StaleOrderVersion(Exception):
    """Another writer changed the order between read and status write"""

    def __init__(self, order_id: int, expected_version: int):
        super().__init__(f"order {order_id} is no longer at version {expected_version}")
        self.order_id = order_id
        self.expected_version = expected_version


class SubmitGoodsReceipt:
    """
    Use Case: Submit a goods receipt against a purchase order

    Business Rules:
    1. Idempotency: the same (order_id, idempotency_key) replays the committed result
    2. Receivable order: only approved or partially received orders accept goods
    3. No over-receipt: cumulative received never exceeds ordered, per line
    4. Atomic updates: receipt, cached line totals and order status commit together
    5. Concurrency: per-order lock, SELECT FOR UPDATE and a version-checked
       status write; a lost race is retried against freshly read totals

    Flow (per attempt):
    1. Check idempotency (replay existing receipt if found)
    2. Get order with lock (SELECT FOR UPDATE), then check idempotency again
    3. Sum received quantities from the receipt log
    4. Validate the proposed lines
    5. Derive line, order and receipt statuses
    6. Create receipt and lines, update cached line totals
    7. Compare-and-set order status on its version
    8. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: PurchaseOrderRepository,
        line_repo: PurchaseOrderLineRepository,
        receipt_repo: GoodsReceiptRepository,
        order_locks: OrderLockRegistry,
        max_attempts: int = 3,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.uow = uow
        self.order_repo = order_repo
        self.line_repo = line_repo
        self.receipt_repo = receipt_repo
        self.order_locks = order_locks
        self.max_attempts = max_attempts

    async def execute(self, command: SubmitReceiptCommandDTO) -> Result[SubmitReceiptResponseDTO]:
        """
        Execute goods receipt submission

        Args:
            command: SubmitReceiptCommandDTO with order_id, idempotency_key and lines

        Returns:
            Result[SubmitReceiptResponseDTO]: committed (or replayed) receipt, or a rejection

        Raises:
            Exception: storage failures other than lost concurrency races,
            after rolling back
        """
        async with self.order_locks.hold(command.order_id):
            for attempt in range(1, self.max_attempts + 1):
                try:
                    return await self._attempt(command)
                except (StaleOrderVersion, IntegrityError) as e:
                    await self.uow.rollback()
                    logger.warning(
                        f"Receipt {command.idempotency_key} for order {command.order_id} "
                        f"lost a concurrent write (attempt {attempt}/{self.max_attempts}): {e}"
                    )
                except Exception:
                    await self.uow.rollback()
                    logger.exception(
                        f"Receipt {command.idempotency_key} for order {command.order_id} failed"
                    )
                    raise

        logger.error(
            f"Receipt {command.idempotency_key} for order {command.order_id} "
            f"gave up after {self.max_attempts} attempts"
        )
        return Return.err(
            Error(
                code=RejectionCode.CONCURRENCY_CONFLICT.value,
                message=f"Purchase order {command.order_id} is being updated concurrently, retry the submission",
                reason=f"attempts={self.max_attempts}",
                details={"order_id": command.order_id, "attempts": self.max_attempts},
            )
        )

    async def _attempt(self, command: SubmitReceiptCommandDTO) -> Result[SubmitReceiptResponseDTO]:
        # Step 1: Idempotent replay
        replay = await self._replay(command)
        if replay:
            return replay

        # Step 2: Load order with pessimistic lock
        order = await self.order_repo.get_by_id(command.order_id, for_update=True)
        if not order:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=RejectionCode.ORDER_NOT_FOUND.value,
                    message=f"Purchase order {command.order_id} not found",
                    details={"order_id": command.order_id},
                )
            )

        # A same-key submission from another process may have committed
        # while this one waited for the row lock
        replay = await self._replay(command)
        if replay:
            return replay

        # Step 3: Current totals from the receipt log
        order_lines = await self.line_repo.list_by_order(order.id)
        ledger = QuantityLedger(await self.receipt_repo.sum_received_by_order(order.id))

        # Step 4: Validate
        proposed = [
            ProposedReceiptLine(
                order_line_id=line.order_line_id,
                received_quantity=line.received_quantity,
                note=line.note,
            )
            for line in command.lines
        ]
        validation = validate_receipt(order, order_lines, ledger, proposed)
        if validation.is_err():
            # Rollback expires the loaded entities; nothing below may touch them
            logger.warning(
                f"Receipt {command.idempotency_key} for order {command.order_id} rejected: "
                f"{validation.error.code} - {validation.error.message}"
            )
            await self.uow.rollback()
            return validation
        validated = validation.value

        # Step 5: Derive statuses from the updated totals
        updated = ledger.apply(
            (line.order_line.id, line.received_quantity) for line in validated.lines
        )
        line_statuses = {
            line.id: derive_line_status(line.ordered_quantity, updated.received_so_far(line.id))
            for line in order_lines
        }
        new_order_status = derive_order_status(order.status, line_statuses.values())
        receipt_status = derive_receipt_status(
            line_statuses[line.order_line.id] for line in validated.lines
        )

        # Step 6: Append receipt and refresh cached totals
        receipt = GoodsReceipt(
            order_id=order.id,
            idempotency_key=command.idempotency_key,
            supplier_reference=order.supplier_reference,
            receipt_date=command.receipt_date or date.today(),
            received_by=command.received_by,
            notes=command.notes,
            status=receipt_status,
            order_status_after=new_order_status,
        )
        receipt_lines = [
            GoodsReceiptLine(
                order_line_id=line.order_line.id,
                item_reference=line.order_line.item_reference,
                description=line.order_line.description,
                ordered_quantity=line.order_line.ordered_quantity,
                received_quantity=line.received_quantity,
                total_received_after=updated.received_so_far(line.order_line.id),
                line_status_after=line_statuses[line.order_line.id],
                note=line.note,
            )
            for line in validated.lines
        ]
        created_receipt = await self.receipt_repo.create(receipt, receipt_lines)

        for line in validated.lines:
            await self.line_repo.update_received_quantity(
                line.order_line.id, updated.received_so_far(line.order_line.id)
            )

        # Step 7: Version-checked order status write
        if not await self.order_repo.update_status(order.id, new_order_status, expected_version=order.version):
            raise StaleOrderVersion(order.id, order.version)

        # Step 8: Commit
        await self.uow.commit()

        logger.info(
            f"Receipt {created_receipt.id} committed for order {order.id}: "
            f"{order.status.value} -> {new_order_status.value}, receipt {receipt_status.value}"
        )
        return Return.ok(self._to_response_dto(created_receipt, receipt_lines))

    async def _replay(self, command: SubmitReceiptCommandDTO) -> Optional[Result[SubmitReceiptResponseDTO]]:
        """Committed result for this idempotency key, or None if there is none yet"""
        existing = await self.receipt_repo.get_by_idempotency_key(
            command.order_id, command.idempotency_key
        )
        if not existing:
            return None

        response = self._to_response_dto(existing, await self.receipt_repo.list_lines(existing.id))
        logger.info(
            f"Replaying receipt {response.receipt_id} for order {command.order_id} "
            f"(idempotency_key={command.idempotency_key})"
        )
        await self.uow.rollback()
        return Return.ok(response)

    def _to_response_dto(
        self, receipt: GoodsReceipt, lines: Sequence[GoodsReceiptLine]
    ) -> SubmitReceiptResponseDTO:
        """
        Convert a receipt and its lines to the response DTO

        Status and totals come from the snapshots stored on the receipt, so a
        replay returns exactly what the first commit returned.
        """
        return SubmitReceiptResponseDTO(
            order_id=receipt.order_id,
            order_status=receipt.order_status_after,
            receipt_id=receipt.id,
            receipt_status=receipt.status,
            idempotency_key=receipt.idempotency_key,
            receipt_date=receipt.receipt_date,
            lines=[
                ReceiptLineResultDTO(
                    order_line_id=line.order_line_id,
                    received_quantity=line.received_quantity,
                    total_received=line.total_received_after,
                    line_status=line.line_status_after,
                )
                for line in lines
            ],
            created_at=receipt.created_at,
        )
